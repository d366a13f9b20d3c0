"""InvestmentAccrualService: plan catalogue and fixed-term positions.

Opening a position and the wallet debit that funds it share one unit of
work, as do the wallet credit and status flip on close. Every business
check runs before the first write.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.rw_common.database import run_in_transaction
from src.rw_common.datetime_utils import utc_now
from src.rw_common.enums import InvestmentStatus
from src.rw_common.errors import (
    InvestmentClosedError,
    InvestmentNotFoundError,
    InvestmentNotMaturedError,
    PlanInactiveError,
    PlanNotFoundError,
)
from src.rw_common.money import require_positive_amount
from src.rw_common.references import new_reference
from src.rw_investment.application.schemas import (
    InvestmentItem,
    InvestmentListResponse,
    InvestmentPostingResponse,
    PlanItem,
    PlanListResponse,
    PortfolioStatsResponse,
)
from src.rw_investment.domain.accrual import (
    compute_expected_return,
    compute_maturity_date,
    ensure_amount_within_plan,
    portfolio_stats,
    validate_plan_terms,
    value_of,
)
from src.rw_investment.domain.models import Investment, InvestmentPlan
from src.rw_investment.domain.repository import InvestmentRepositoryProtocol
from src.rw_investment.infrastructure.persistence import InvestmentRepository
from src.rw_wallet.application.service import WalletLedgerService
from src.rw_wallet.domain.models import LedgerPosting

logger = logging.getLogger(__name__)


class InvestmentAccrualService:
    def __init__(
        self,
        repo: InvestmentRepositoryProtocol | None = None,
        wallet: WalletLedgerService | None = None,
    ) -> None:
        self._repo: InvestmentRepositoryProtocol = repo or InvestmentRepository()
        self._wallet = wallet or WalletLedgerService()

    # ------------------------------------------------------------------
    # Plans
    # ------------------------------------------------------------------

    async def create_plan(
        self,
        db: AsyncSession,
        name: str,
        min_amount: int,
        max_amount: int | None,
        annual_return_rate_percent: Decimal,
        duration_days: int,
        is_active: bool = True,
    ) -> PlanItem:
        validate_plan_terms(min_amount, max_amount, annual_return_rate_percent, duration_days)

        async def work(session: AsyncSession) -> InvestmentPlan:
            return await self._repo.create_plan(
                session,
                name,
                min_amount,
                max_amount,
                annual_return_rate_percent,
                duration_days,
                is_active,
            )

        plan = await run_in_transaction(db, work)
        logger.info(
            "Plan created: id=%s name=%s rate=%s%% duration=%dd",
            plan.id, plan.name, plan.annual_return_rate_percent, plan.duration_days,
        )
        return PlanItem.from_domain(plan)

    async def set_plan_active(
        self, db: AsyncSession, plan_id: int, is_active: bool
    ) -> PlanItem:
        """Open positions keep their snapshot terms; this only gates new opens."""

        async def work(session: AsyncSession) -> InvestmentPlan:
            plan = await self._repo.set_plan_active(session, plan_id, is_active)
            if plan is None:
                raise PlanNotFoundError(plan_id)
            return plan

        plan = await run_in_transaction(db, work)
        logger.info("Plan %s is_active=%s", plan_id, is_active)
        return PlanItem.from_domain(plan)

    async def list_plans(self, db: AsyncSession) -> PlanListResponse:
        plans = await self._repo.list_active_plans(db)
        return PlanListResponse(plans=[PlanItem.from_domain(p) for p in plans])

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    async def open(
        self,
        db: AsyncSession,
        user_id: str,
        plan_id: int,
        amount: int,
        as_of: datetime | None = None,
    ) -> InvestmentPostingResponse:
        require_positive_amount(amount)
        plan = await self._repo.get_plan(db, plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)
        if not plan.is_active:
            raise PlanInactiveError(plan_id)
        ensure_amount_within_plan(plan, amount)

        start = as_of or utc_now()
        investment = Investment(
            id=new_reference("INV"),
            user_id=user_id,
            plan_id=plan.id,
            amount=amount,
            annual_return_rate_percent=plan.annual_return_rate_percent,
            duration_days=plan.duration_days,
            expected_return=compute_expected_return(
                amount, plan.annual_return_rate_percent, plan.duration_days
            ),
            start_date=start,
            maturity_date=compute_maturity_date(start, plan.duration_days),
            status=InvestmentStatus.ACTIVE.value,
        )

        async def work(session: AsyncSession) -> LedgerPosting:
            await self._repo.insert_investment(session, investment)
            # InsufficientFunds here rolls back the insert above
            return await self._wallet.debit_for_investment(
                session, user_id, amount, investment.id
            )

        posting = await run_in_transaction(db, work)
        logger.info(
            "Investment opened: id=%s user=%s plan=%s amount=%d expected=%d",
            investment.id, user_id, plan.id, amount, investment.expected_return,
        )
        return InvestmentPostingResponse.from_result(
            investment, value_of(investment, start), posting
        )

    async def list_investments(
        self,
        db: AsyncSession,
        user_id: str,
        status: InvestmentStatus | None = None,
        as_of: datetime | None = None,
    ) -> InvestmentListResponse:
        investments = await self._repo.list_investments(
            db, user_id, status.value if status else None
        )
        moment = as_of or utc_now()
        return InvestmentListResponse(
            items=[InvestmentItem.from_domain(inv, value_of(inv, moment)) for inv in investments]
        )

    async def get_investment(
        self,
        db: AsyncSession,
        user_id: str,
        investment_id: str,
        as_of: datetime | None = None,
    ) -> InvestmentItem:
        investment = await self._owned_investment(db, user_id, investment_id)
        return InvestmentItem.from_domain(investment, value_of(investment, as_of))

    async def portfolio_stats(
        self, db: AsyncSession, user_id: str, as_of: datetime | None = None
    ) -> PortfolioStatsResponse:
        active = await self._repo.list_investments(
            db, user_id, InvestmentStatus.ACTIVE.value
        )
        return PortfolioStatsResponse.from_domain(portfolio_stats(active, as_of))

    async def close(
        self,
        db: AsyncSession,
        user_id: str,
        investment_id: str,
        as_of: datetime | None = None,
    ) -> InvestmentPostingResponse:
        """Pay out a matured position: credit expected_return, mark COMPLETED."""
        investment = await self._owned_investment(db, user_id, investment_id)
        if investment.status != InvestmentStatus.ACTIVE.value:
            raise InvestmentClosedError(investment_id)
        moment = as_of or utc_now()
        valuation = value_of(investment, moment)
        if not valuation.is_matured:
            raise InvestmentNotMaturedError(investment_id, valuation.days_remaining)

        async def work(session: AsyncSession) -> LedgerPosting:
            # Conditional flip: a concurrent close loses here, before any credit
            if not await self._repo.mark_completed(session, investment_id, moment):
                raise InvestmentClosedError(investment_id)
            return await self._wallet.credit_investment_return(
                session, user_id, investment.expected_return, investment_id
            )

        posting = await run_in_transaction(db, work)
        investment.status = InvestmentStatus.COMPLETED.value
        investment.closed_at = moment
        logger.info(
            "Investment closed: id=%s user=%s paid=%d balance=%d",
            investment_id, user_id, investment.expected_return, posting.balance,
        )
        return InvestmentPostingResponse.from_result(investment, valuation, posting)

    async def _owned_investment(
        self, db: AsyncSession, user_id: str, investment_id: str
    ) -> Investment:
        investment = await self._repo.get_investment(db, investment_id)
        # Another user's position is reported as missing
        if investment is None or investment.user_id != user_id:
            raise InvestmentNotFoundError(investment_id)
        return investment
