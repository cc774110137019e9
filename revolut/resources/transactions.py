from __future__ import annotations

from typing import Any, List, Optional

from .base import Resource
from .entities import Transaction

__all__ = ["Transactions"]


class Transactions(Resource):
    resource_name = "transactions"
    item_name = "transaction"
    entity = Transaction
    operations = frozenset({"list", "retrieve"})

    def list(
        self,
        *,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        account: Optional[str] = None,
        count: Optional[int] = None,
        type: Optional[str] = None,
        **filters: Any,
    ) -> List[Transaction]:
        """List transactions, newest first.

        ``from_date``/``to_date`` map to the API's ``from``/``to`` parameters
        (ISO dates or timestamps); ``count`` caps the page size (API max 1000).
        """
        named = {"from": from_date, "to": to_date, "account": account, "count": count, "type": type}
        # raw ``from``/``to`` keys are kept unless the named argument is set
        filters.update({k: v for k, v in named.items() if v is not None})
        return super().list(**filters)

    def retrieve_by_request_id(self, request_id: str) -> Transaction:
        """Look a transaction up by the ``request_id`` it was created with."""
        self._check("retrieve")
        body = self.client.get(self.item_path(request_id), id_type="request_id").body
        return Transaction.from_payload(body)
