"""InvestmentRepository: concrete implementation of InvestmentRepositoryProtocol.

Plans are read-only once a position references them: every investment row
carries its own copy of the rate and duration.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.rw_common.datetime_utils import ensure_utc, utc_now
from src.rw_common.enums import InvestmentStatus
from src.rw_common.errors import InternalError
from src.rw_investment.domain.models import Investment, InvestmentPlan
from src.rw_investment.infrastructure.db_models import InvestmentORM, InvestmentPlanORM

_plans = InvestmentPlanORM.__table__
_investments = InvestmentORM.__table__


def _row_to_plan(row: object) -> InvestmentPlan:
    return InvestmentPlan(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        min_amount=row.min_amount,  # type: ignore[attr-defined]
        max_amount=row.max_amount,  # type: ignore[attr-defined]
        annual_return_rate_percent=Decimal(row.annual_return_rate_percent),  # type: ignore[attr-defined]
        duration_days=row.duration_days,  # type: ignore[attr-defined]
        is_active=bool(row.is_active),  # type: ignore[attr-defined]
        created_at=ensure_utc(row.created_at) if row.created_at else None,  # type: ignore[attr-defined]
    )


def _row_to_investment(row: object) -> Investment:
    return Investment(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        plan_id=row.plan_id,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        annual_return_rate_percent=Decimal(row.annual_return_rate_percent),  # type: ignore[attr-defined]
        duration_days=row.duration_days,  # type: ignore[attr-defined]
        expected_return=row.expected_return,  # type: ignore[attr-defined]
        start_date=ensure_utc(row.start_date),  # type: ignore[attr-defined]
        maturity_date=ensure_utc(row.maturity_date),  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        closed_at=ensure_utc(row.closed_at) if row.closed_at else None,  # type: ignore[attr-defined]
    )


class InvestmentRepository:
    async def get_plan(self, db: AsyncSession, plan_id: int) -> InvestmentPlan | None:
        result = await db.execute(select(_plans).where(_plans.c.id == plan_id))
        row = result.fetchone()
        return _row_to_plan(row) if row else None

    async def list_active_plans(self, db: AsyncSession) -> list[InvestmentPlan]:
        result = await db.execute(
            select(_plans)
            .where(_plans.c.is_active.is_(True))
            .order_by(_plans.c.min_amount.asc(), _plans.c.id.asc())
        )
        return [_row_to_plan(row) for row in result.fetchall()]

    async def create_plan(
        self,
        db: AsyncSession,
        name: str,
        min_amount: int,
        max_amount: int | None,
        annual_return_rate_percent: Decimal,
        duration_days: int,
        is_active: bool,
    ) -> InvestmentPlan:
        result = await db.execute(
            insert(_plans)
            .values(
                name=name,
                min_amount=min_amount,
                max_amount=max_amount,
                annual_return_rate_percent=annual_return_rate_percent,
                duration_days=duration_days,
                is_active=is_active,
                created_at=utc_now(),
            )
            .returning(*_plans.c)
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Plan insert returned no rows")
        return _row_to_plan(row)

    async def set_plan_active(
        self, db: AsyncSession, plan_id: int, is_active: bool
    ) -> InvestmentPlan | None:
        result = await db.execute(
            update(_plans)
            .where(_plans.c.id == plan_id)
            .values(is_active=is_active)
            .returning(*_plans.c)
        )
        row = result.fetchone()
        return _row_to_plan(row) if row else None

    async def insert_investment(self, db: AsyncSession, investment: Investment) -> None:
        await db.execute(
            insert(_investments).values(
                id=investment.id,
                user_id=investment.user_id,
                plan_id=investment.plan_id,
                amount=investment.amount,
                annual_return_rate_percent=investment.annual_return_rate_percent,
                duration_days=investment.duration_days,
                expected_return=investment.expected_return,
                start_date=investment.start_date,
                maturity_date=investment.maturity_date,
                status=investment.status,
                closed_at=investment.closed_at,
            )
        )

    async def get_investment(
        self, db: AsyncSession, investment_id: str
    ) -> Investment | None:
        result = await db.execute(
            select(_investments).where(_investments.c.id == investment_id)
        )
        row = result.fetchone()
        return _row_to_investment(row) if row else None

    async def list_investments(
        self, db: AsyncSession, user_id: str, status: str | None
    ) -> list[Investment]:
        stmt = select(_investments).where(_investments.c.user_id == user_id)
        if status is not None:
            stmt = stmt.where(_investments.c.status == status)
        result = await db.execute(
            stmt.order_by(_investments.c.start_date.desc(), _investments.c.id.desc())
        )
        return [_row_to_investment(row) for row in result.fetchall()]

    async def mark_completed(
        self, db: AsyncSession, investment_id: str, closed_at: datetime
    ) -> bool:
        """ACTIVE → COMPLETED. False if the position was already closed."""
        result = await db.execute(
            update(_investments)
            .where(
                _investments.c.id == investment_id,
                _investments.c.status == InvestmentStatus.ACTIVE.value,
            )
            .values(status=InvestmentStatus.COMPLETED.value, closed_at=closed_at)
            .returning(_investments.c.id)
        )
        return result.fetchone() is not None
