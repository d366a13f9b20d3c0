"""Domain models for rw_investment: pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class InvestmentPlan:
    id: int
    name: str
    min_amount: int                       # TZS
    max_amount: int | None                # None = unbounded
    annual_return_rate_percent: Decimal   # 12.00 == 12% a year
    duration_days: int                    # always > 0
    is_active: bool
    created_at: datetime | None = None


@dataclass
class Investment:
    id: str                               # INV-… reference, also the ledger reference
    user_id: str
    plan_id: int
    amount: int                           # principal, TZS
    annual_return_rate_percent: Decimal   # snapshot of the plan at open time
    duration_days: int                    # snapshot of the plan at open time
    expected_return: int                  # principal + full-term interest
    start_date: datetime
    maturity_date: datetime
    status: str                           # InvestmentStatus value
    closed_at: datetime | None = None


@dataclass(frozen=True)
class InvestmentValuation:
    """Derived at read time from the clock, never stored."""

    days_passed: int
    days_remaining: int
    progress: float          # 0.0 .. 1.0
    current_value: int
    is_matured: bool

    @property
    def progress_percent(self) -> int:
        return round(self.progress * 100)


@dataclass(frozen=True)
class PortfolioStats:
    total_invested: int
    total_current_value: int
    total_returns: int
    investment_count: int
