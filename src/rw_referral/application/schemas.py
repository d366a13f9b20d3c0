"""Pydantic schemas for rw_referral API."""

from pydantic import BaseModel, Field

from src.rw_common.enums import ReferralStatus
from src.rw_common.money import format_amount
from src.rw_referral.domain.models import Referral, ReferralSummary
from src.rw_wallet.domain.models import LedgerPosting

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ValidateCodeRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)


class LinkReferralRequest(BaseModel):
    """The current user registers as referred by the owner of `code`."""

    code: str = Field(..., min_length=1, max_length=20)


class AccrueRequest(BaseModel):
    base_amount: int = Field(..., description="Source transaction amount in TZS")
    source_reference: str = Field(..., min_length=1, max_length=64)


class SetReferralStatusRequest(BaseModel):
    status: ReferralStatus


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ReferralItem(BaseModel):
    id: int
    referrer_id: str
    referred_id: str
    commission_rate_percent: str
    total_commission: int
    total_commission_display: str
    status: str
    created_at: str | None

    @classmethod
    def from_domain(cls, referral: Referral) -> "ReferralItem":
        return cls(
            id=referral.id,
            referrer_id=referral.referrer_id,
            referred_id=referral.referred_id,
            commission_rate_percent=str(referral.commission_rate_percent),
            total_commission=referral.total_commission,
            total_commission_display=format_amount(referral.total_commission),
            status=referral.status,
            created_at=referral.created_at.isoformat() if referral.created_at else None,
        )


class ReferralCodeResponse(BaseModel):
    code: str


class CodeValidationResponse(BaseModel):
    valid: bool
    code: str
    referrer_id: str


class ReferralSummaryResponse(BaseModel):
    code: str
    total_referrals: int
    total_commission: int
    total_commission_display: str
    referrals: list[ReferralItem]

    @classmethod
    def from_domain(cls, summary: ReferralSummary) -> "ReferralSummaryResponse":
        return cls(
            code=summary.code,
            total_referrals=summary.total_referrals,
            total_commission=summary.total_commission,
            total_commission_display=format_amount(summary.total_commission),
            referrals=[ReferralItem.from_domain(r) for r in summary.referrals],
        )


class AccrualResponse(BaseModel):
    referral: ReferralItem
    base_amount: int
    commission: int
    commission_display: str
    referrer_balance: int
    ledger_entry_id: int

    @classmethod
    def from_result(
        cls,
        referral: Referral,
        base_amount: int,
        commission: int,
        posting: LedgerPosting,
    ) -> "AccrualResponse":
        return cls(
            referral=ReferralItem.from_domain(referral),
            base_amount=base_amount,
            commission=commission,
            commission_display=format_amount(commission),
            referrer_balance=posting.balance,
            ledger_entry_id=posting.ledger_entry_id,
        )
