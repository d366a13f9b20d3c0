"""Pydantic schemas for rw_investment API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.rw_common.money import format_amount
from src.rw_investment.domain.models import (
    Investment,
    InvestmentPlan,
    InvestmentValuation,
    PortfolioStats,
)
from src.rw_wallet.domain.models import LedgerPosting

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreatePlanRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    min_amount: int
    max_amount: int | None = None
    annual_return_rate_percent: Decimal = Field(..., max_digits=6, decimal_places=2)
    duration_days: int
    is_active: bool = True


class SetPlanActiveRequest(BaseModel):
    is_active: bool


class OpenInvestmentRequest(BaseModel):
    plan_id: int
    amount: int = Field(..., description="Principal in TZS")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PlanItem(BaseModel):
    id: int
    name: str
    min_amount: int
    min_amount_display: str
    max_amount: int | None
    annual_return_rate_percent: str
    duration_days: int
    is_active: bool

    @classmethod
    def from_domain(cls, plan: InvestmentPlan) -> "PlanItem":
        return cls(
            id=plan.id,
            name=plan.name,
            min_amount=plan.min_amount,
            min_amount_display=format_amount(plan.min_amount),
            max_amount=plan.max_amount,
            annual_return_rate_percent=str(plan.annual_return_rate_percent),
            duration_days=plan.duration_days,
            is_active=plan.is_active,
        )


class PlanListResponse(BaseModel):
    plans: list[PlanItem]


class InvestmentItem(BaseModel):
    id: str
    plan_id: int
    amount: int
    amount_display: str
    annual_return_rate_percent: str
    duration_days: int
    expected_return: int
    expected_return_display: str
    start_date: str
    maturity_date: str
    status: str
    closed_at: str | None
    # derived at read time
    days_passed: int
    days_remaining: int
    progress_percent: int
    current_value: int
    current_value_display: str
    is_matured: bool

    @classmethod
    def from_domain(
        cls, investment: Investment, valuation: InvestmentValuation
    ) -> "InvestmentItem":
        return cls(
            id=investment.id,
            plan_id=investment.plan_id,
            amount=investment.amount,
            amount_display=format_amount(investment.amount),
            annual_return_rate_percent=str(investment.annual_return_rate_percent),
            duration_days=investment.duration_days,
            expected_return=investment.expected_return,
            expected_return_display=format_amount(investment.expected_return),
            start_date=investment.start_date.isoformat(),
            maturity_date=investment.maturity_date.isoformat(),
            status=investment.status,
            closed_at=investment.closed_at.isoformat() if investment.closed_at else None,
            days_passed=valuation.days_passed,
            days_remaining=valuation.days_remaining,
            progress_percent=valuation.progress_percent,
            current_value=valuation.current_value,
            current_value_display=format_amount(valuation.current_value),
            is_matured=valuation.is_matured,
        )


class InvestmentListResponse(BaseModel):
    items: list[InvestmentItem]


class InvestmentPostingResponse(BaseModel):
    """Returned by open and close: the position plus the wallet movement."""

    investment: InvestmentItem
    balance: int
    balance_display: str
    ledger_entry_id: int

    @classmethod
    def from_result(
        cls,
        investment: Investment,
        valuation: InvestmentValuation,
        posting: LedgerPosting,
    ) -> "InvestmentPostingResponse":
        return cls(
            investment=InvestmentItem.from_domain(investment, valuation),
            balance=posting.balance,
            balance_display=format_amount(posting.balance),
            ledger_entry_id=posting.ledger_entry_id,
        )


class PortfolioStatsResponse(BaseModel):
    total_invested: int
    total_invested_display: str
    total_current_value: int
    total_current_value_display: str
    total_returns: int
    total_returns_display: str
    investment_count: int

    @classmethod
    def from_domain(cls, stats: PortfolioStats) -> "PortfolioStatsResponse":
        return cls(
            total_invested=stats.total_invested,
            total_invested_display=format_amount(stats.total_invested),
            total_current_value=stats.total_current_value,
            total_current_value_display=format_amount(stats.total_current_value),
            total_returns=stats.total_returns,
            total_returns_display=format_amount(stats.total_returns),
            investment_count=stats.investment_count,
        )
