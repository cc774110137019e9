"""Response models.

Only the fields callers commonly rely on are declared (and typed); everything
else the API sends is kept as an extra attribute, with nested objects turned
into :class:`Entity` so ``counterparty.accounts[0].iban`` works.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "Entity",
    "Account",
    "BankDetails",
    "Counterparty",
    "Transaction",
    "TransferReason",
    "PaymentDraft",
    "ExchangeRate",
    "Webhook",
    "WebhookEvent",
]


def _wrap(value: Any) -> Any:
    if isinstance(value, Mapping):
        return Entity.model_validate({k: _wrap(v) for k, v in value.items()})
    if isinstance(value, list):
        return [_wrap(v) for v in value]
    return value


class Entity(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @classmethod
    def from_payload(cls, payload: Any) -> Any:
        """Build one entity from a JSON object, or a list of them from an array."""
        if payload is None:
            return None
        if isinstance(payload, list):
            return [cls.from_payload(item) for item in payload]
        declared = {f.alias or name for name, f in cls.model_fields.items()} | set(cls.model_fields)
        data = {k: (v if k in declared else _wrap(v)) for k, v in payload.items()}
        return cls.model_validate(data)

    def __getitem__(self, key: str) -> Any:
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key) from None

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self, key, default)


class Account(Entity):
    id: str
    name: Optional[str] = None
    balance: Optional[Decimal] = None
    currency: Optional[str] = None
    state: Optional[str] = None
    public: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BankDetails(Entity):
    iban: Optional[str] = None
    bic: Optional[str] = None
    account_no: Optional[str] = None
    sort_code: Optional[str] = None
    routing_number: Optional[str] = None
    beneficiary: Optional[str] = None
    schemes: List[str] = Field(default_factory=list)


class Counterparty(Entity):
    id: str
    name: Optional[str] = None
    profile_type: Optional[str] = None
    state: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Transaction(Entity):
    id: str
    type: Optional[str] = None
    state: Optional[str] = None
    request_id: Optional[str] = None
    reason_code: Optional[str] = None
    reference: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class TransferReason(Entity):
    country: Optional[str] = None
    currency: Optional[str] = None
    code: str
    description: Optional[str] = None


class PaymentDraft(Entity):
    id: str
    title: Optional[str] = None
    scheduled_for: Optional[str] = None


class ExchangeRate(Entity):
    source: Optional[Entity] = Field(default=None, alias="from")
    target: Optional[Entity] = Field(default=None, alias="to")
    rate: Optional[Decimal] = None
    fee: Optional[Entity] = None
    rate_date: Optional[datetime] = None


class Webhook(Entity):
    id: str
    url: str
    events: List[str] = Field(default_factory=list)
    signing_secret: Optional[str] = None


class WebhookEvent(Entity):
    id: str
    webhook_id: Optional[str] = None
    webhook_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_sent_date: Optional[datetime] = None
