"""Domain models for rw_referral: pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass
class Referral:
    id: int
    referrer_id: str
    referred_id: str                      # a user is referred at most once
    commission_rate_percent: Decimal      # 5.00 == 5% of each source amount
    total_commission: int                 # TZS credited to the referrer so far
    status: str                           # ReferralStatus value
    created_at: datetime | None = None


@dataclass(frozen=True)
class ReferralSummary:
    referrer_id: str
    code: str
    total_referrals: int
    total_commission: int
    referrals: list[Referral] = field(default_factory=list)
