"""Investment accrual: simple (non-compounding) interest on a 365-day year.

    expected_return = amount + floor(amount x rate% x duration_days / 36500)
    days_passed     = max(floor((as_of - start_date) / 1 day), 0)
    progress        = min(days_passed / duration_days, 1)
    current_value   = amount + floor((expected_return - amount) x min(days_passed, duration) / duration)

Progress is clamped at 1: value locks at expected_return from the maturity
day on. Interest rounds down to the whole shilling.
"""

from datetime import datetime, timedelta
from decimal import ROUND_FLOOR, Decimal

from src.rw_common.datetime_utils import ensure_utc, utc_now
from src.rw_common.errors import (
    AmountAboveMaximumError,
    AmountBelowMinimumError,
    InvalidPlanError,
)
from src.rw_investment.domain.models import (
    Investment,
    InvestmentPlan,
    InvestmentValuation,
    PortfolioStats,
)

_DAYS_PER_YEAR = 365


def validate_plan_terms(
    min_amount: int,
    max_amount: int | None,
    annual_return_rate_percent: Decimal,
    duration_days: int,
) -> None:
    """Reject plans that could not be valued (zero duration divides by zero)."""
    if duration_days <= 0:
        raise InvalidPlanError("duration_days must be positive")
    if min_amount <= 0:
        raise InvalidPlanError("min_amount must be positive")
    if max_amount is not None and max_amount < min_amount:
        raise InvalidPlanError("max_amount must not be below min_amount")
    if annual_return_rate_percent < 0:
        raise InvalidPlanError("annual_return_rate_percent must not be negative")


def ensure_amount_within_plan(plan: InvestmentPlan, amount: int) -> None:
    if amount < plan.min_amount:
        raise AmountBelowMinimumError(amount, plan.min_amount)
    if plan.max_amount is not None and amount > plan.max_amount:
        raise AmountAboveMaximumError(amount, plan.max_amount)


def compute_maturity_date(start_date: datetime, duration_days: int) -> datetime:
    return start_date + timedelta(days=duration_days)


def compute_expected_return(
    amount: int, annual_return_rate_percent: Decimal, duration_days: int
) -> int:
    interest = (
        Decimal(amount) * annual_return_rate_percent * duration_days
        / Decimal(_DAYS_PER_YEAR * 100)
    )
    return amount + int(interest.to_integral_value(rounding=ROUND_FLOOR))


def value_of(investment: Investment, as_of: datetime | None = None) -> InvestmentValuation:
    """Current value of a position at `as_of` (default: now)."""
    duration = investment.duration_days
    if duration <= 0:
        raise InvalidPlanError(f"investment {investment.id} has no duration")

    moment = ensure_utc(as_of) if as_of is not None else utc_now()
    elapsed = moment - ensure_utc(investment.start_date)
    # timedelta.days is floored, so any moment before start_date clamps to 0
    days_passed = max(elapsed.days, 0)
    accrued_days = min(days_passed, duration)

    interest = investment.expected_return - investment.amount
    return InvestmentValuation(
        days_passed=days_passed,
        days_remaining=duration - accrued_days,
        progress=accrued_days / duration,
        current_value=investment.amount + interest * accrued_days // duration,
        is_matured=days_passed >= duration,
    )


def portfolio_stats(
    investments: list[Investment], as_of: datetime | None = None
) -> PortfolioStats:
    """Totals over the given (active) positions, valued at the same instant."""
    moment = as_of if as_of is not None else utc_now()
    total_invested = sum(inv.amount for inv in investments)
    total_current = sum(value_of(inv, moment).current_value for inv in investments)
    return PortfolioStats(
        total_invested=total_invested,
        total_current_value=total_current,
        total_returns=total_current - total_invested,
        investment_count=len(investments),
    )
