from __future__ import annotations

from typing import List

from .base import Resource
from .entities import Account, BankDetails

__all__ = ["Accounts"]


class Accounts(Resource):
    resource_name = "accounts"
    entity = Account
    operations = frozenset({"list", "retrieve"})

    def bank_details(self, id: str) -> List[BankDetails]:
        """Details needed to send money into the account, one entry per scheme."""
        return BankDetails.from_payload(self.client.get(self.collection_path(id, "bank-details")).body) or []
