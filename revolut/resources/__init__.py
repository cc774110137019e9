"""Resource wrappers for the Revolut Business API."""

from .accounts import Accounts
from .base import Resource
from .counterparties import Counterparties
from .entities import (
    Account,
    BankDetails,
    Counterparty,
    Entity,
    ExchangeRate,
    PaymentDraft,
    Transaction,
    TransferReason,
    Webhook,
    WebhookEvent,
)
from .foreign_exchange import ForeignExchange
from .payment_drafts import PaymentDrafts
from .simulations import Simulations
from .transactions import Transactions
from .transfers import Transfers
from .webhooks import Webhooks, signature_valid, verify_signature

__all__ = [
    "Resource",
    "Accounts",
    "Counterparties",
    "Transactions",
    "Transfers",
    "PaymentDrafts",
    "ForeignExchange",
    "Webhooks",
    "Simulations",
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
    "signature_valid",
    "verify_signature",
]
