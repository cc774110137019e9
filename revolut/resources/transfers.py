from __future__ import annotations

import uuid
from typing import Any, Dict, List

from .base import Resource
from .entities import Transaction, TransferReason

__all__ = ["Transfers"]


def _with_request_id(data: Dict[str, Any]) -> Dict[str, Any]:
    # request_id is Revolut's idempotency key; one is generated when absent
    data.setdefault("request_id", uuid.uuid4().hex)
    return data


class Transfers(Resource):
    """Money movement: payments to counterparties and moves between own accounts."""

    resource_name = "transfer"
    entity = Transaction

    def pay(self, **data: Any) -> Transaction:
        """Send money to a counterparty (``POST /pay``)."""
        return Transaction.from_payload(self.client.post(self._url("pay"), data=_with_request_id(data)).body)

    def transfer(self, **data: Any) -> Transaction:
        """Move money between accounts of the same business (``POST /transfer``)."""
        return Transaction.from_payload(self.client.post(self._url("transfer"), data=_with_request_id(data)).body)

    def cancel(self, id: str) -> bool:
        """Cancel a scheduled transfer that has not been processed yet."""
        self.client.delete(self._url(f"transaction/{id}"))
        return True

    def reasons(self) -> List[TransferReason]:
        return TransferReason.from_payload(self.client.get(self._url("transfer-reasons")).body) or []
