from __future__ import annotations

from typing import Any, List, Optional

from .base import Resource
from .entities import Counterparty

__all__ = ["Counterparties"]


class Counterparties(Resource):
    resource_name = "counterparties"
    item_name = "counterparty"
    entity = Counterparty
    operations = frozenset({"list", "retrieve", "create", "delete"})

    def list(
        self,
        *,
        name: Optional[str] = None,
        account_no: Optional[str] = None,
        sort_code: Optional[str] = None,
        iban: Optional[str] = None,
        bic: Optional[str] = None,
        created_before: Optional[str] = None,
        limit: Optional[int] = None,
        **filters: Any,
    ) -> List[Counterparty]:
        return super().list(
            name=name,
            account_no=account_no,
            sort_code=sort_code,
            iban=iban,
            bic=bic,
            created_before=created_before,
            limit=limit,
            **filters,
        )
