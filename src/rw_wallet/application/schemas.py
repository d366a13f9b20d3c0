"""Pydantic schemas and cursor utilities for rw_wallet API."""

import base64
import json

from pydantic import BaseModel, Field

from src.rw_commission.domain.commission import CommissionBreakdown
from src.rw_common.money import format_amount
from src.rw_wallet.domain.models import LedgerEntry, LedgerPosting

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a ledger entry id into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except (ValueError, KeyError, TypeError):
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
# Amounts are validated by the service so that a bad amount is reported as
# InvalidAmountError (2001) rather than a generic 422 body error.


class DepositRequest(BaseModel):
    amount: int = Field(..., description="Amount to deposit in TZS")
    method: str = Field("wallet", max_length=50, description="Funding method, e.g. M-Pesa")
    reference: str | None = Field(
        None, max_length=64, description="External payment reference, stored verbatim"
    )


class WithdrawRequest(BaseModel):
    amount: int = Field(..., description="Amount to withdraw in TZS")
    method: str = Field(..., min_length=1, max_length=50, description="Payout method, e.g. M-Pesa")
    destination: str = Field("", max_length=100, description="Payout phone number or address")


class VendorCommissionRequest(BaseModel):
    vendor_id: str = Field(..., min_length=1, max_length=64)
    transaction_amount: int = Field(..., description="Gross sale amount in TZS")
    order_reference: str = Field(..., min_length=1, max_length=64)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LedgerEntryItem(BaseModel):
    id: int
    kind: str
    amount: int
    amount_display: str
    balance_before: int
    balance_after: int
    balance_after_display: str
    reference: str | None
    description: str | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, entry: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=entry.id,
            kind=entry.kind,
            amount=entry.amount,
            amount_display=format_amount(entry.amount),
            balance_before=entry.balance_before,
            balance_after=entry.balance_after,
            balance_after_display=format_amount(entry.balance_after),
            reference=entry.reference,
            description=entry.description,
            created_at=entry.created_at.isoformat() if entry.created_at else "",
        )


class BalanceResponse(BaseModel):
    user_id: str
    balance: int
    balance_display: str

    @classmethod
    def from_amount(cls, user_id: str, balance: int) -> "BalanceResponse":
        return cls(user_id=user_id, balance=balance, balance_display=format_amount(balance))


class LedgerMutationResponse(BaseModel):
    balance: int
    balance_display: str
    amount: int
    amount_display: str
    ledger_entry_id: int
    entry: LedgerEntryItem

    @classmethod
    def from_posting(cls, posting: LedgerPosting) -> "LedgerMutationResponse":
        amount = abs(posting.entry.amount)
        return cls(
            balance=posting.balance,
            balance_display=format_amount(posting.balance),
            amount=amount,
            amount_display=format_amount(amount),
            ledger_entry_id=posting.ledger_entry_id,
            entry=LedgerEntryItem.from_domain(posting.entry),
        )


class VendorCommissionResponse(BaseModel):
    vendor_id: str
    transaction_amount: int
    commission_rate_percent: str
    fee: int
    fee_display: str
    net_amount: int
    net_amount_display: str
    balance: int
    balance_display: str
    ledger_entry_id: int

    @classmethod
    def from_result(
        cls, vendor_id: str, breakdown: CommissionBreakdown, posting: LedgerPosting
    ) -> "VendorCommissionResponse":
        return cls(
            vendor_id=vendor_id,
            transaction_amount=breakdown.amount,
            commission_rate_percent=breakdown.rate_percent_display,
            fee=breakdown.fee,
            fee_display=format_amount(breakdown.fee),
            net_amount=breakdown.net_amount,
            net_amount_display=format_amount(breakdown.net_amount),
            balance=posting.balance,
            balance_display=format_amount(posting.balance),
            ledger_entry_id=posting.ledger_entry_id,
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool


class ReconciliationResponse(BaseModel):
    user_id: str
    balance: int
    ledger_total: int
    consistent: bool
    violations: list[str]
