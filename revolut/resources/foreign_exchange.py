from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any, Optional, Union

from .base import Resource
from .entities import ExchangeRate, Transaction

__all__ = ["ForeignExchange"]


class ForeignExchange(Resource):
    resource_name = "exchange"
    entity = Transaction

    def rate(
        self,
        from_currency: str,
        to_currency: str,
        amount: Optional[Union[Decimal, float, str]] = None,
    ) -> ExchangeRate:
        """Current rate (and fee) for exchanging *amount* of *from_currency*."""
        query = {"from": from_currency, "to": to_currency, "amount": None if amount is None else str(amount)}
        return ExchangeRate.from_payload(self.client.get(self._url("rate"), **query).body)

    def exchange(self, **data: Any) -> Transaction:
        """Exchange money between two of the business' accounts.

        ``data`` follows the API body: ``from``/``to`` objects with
        ``account_id``, ``currency`` and ``amount`` on exactly one side, plus
        ``request_id`` (generated when absent) and ``reference``.
        """
        data.setdefault("request_id", uuid.uuid4().hex)
        return Transaction.from_payload(self.client.post(self.collection_path(), data=data).body)
