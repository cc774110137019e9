"""Sandbox-only helpers to drive test data through its lifecycle."""
from __future__ import annotations

from typing import Any

from ..errors import UnsupportedOperationError
from .base import Resource
from .entities import Transaction

__all__ = ["Simulations", "TRANSACTION_ACTIONS"]

TRANSACTION_ACTIONS = frozenset({"complete", "revert", "decline", "fail"})


class Simulations(Resource):
    resource_name = "sandbox"
    entity = Transaction

    def _sandbox_only(self) -> None:
        if not self.client.sandbox:
            raise UnsupportedOperationError("Simulations are only available in the sandbox environment")

    def update_transaction(self, id: str, action: str) -> Transaction:
        """Move a sandbox transaction to another state (complete/revert/decline/fail)."""
        self._sandbox_only()
        if action not in TRANSACTION_ACTIONS:
            raise ValueError(f"Unknown simulation action {action!r}; expected one of {sorted(TRANSACTION_ACTIONS)}")
        return Transaction.from_payload(self.client.post(self.collection_path("transactions", id, action)).body)

    def top_up(self, **data: Any) -> Transaction:
        """Credit a sandbox account (``account_id``, ``amount``, ``currency``, ``reference``, ``state``)."""
        self._sandbox_only()
        return Transaction.from_payload(self.client.post(self.collection_path("topup"), data=data).body)
