from __future__ import annotations

from typing import Any, List

from .base import Resource
from .entities import PaymentDraft

__all__ = ["PaymentDrafts"]


class PaymentDrafts(Resource):
    resource_name = "payment-drafts"
    entity = PaymentDraft
    operations = frozenset({"list", "retrieve", "create", "delete"})

    def list(self, **filters: Any) -> List[PaymentDraft]:
        # the collection comes wrapped: {"payment_orders": [...]}
        self._check("list")
        body = self.client.get(self.collection_path(), **filters).body or {}
        if isinstance(body, dict):
            body = body.get("payment_orders", [])
        return PaymentDraft.from_payload(body)
