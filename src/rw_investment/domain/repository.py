"""Repository Protocol for rw_investment: plans and positions.

Methods run on the caller's session; the application service owns commit.
"""

from datetime import datetime
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rw_investment.domain.models import Investment, InvestmentPlan


class InvestmentRepositoryProtocol(Protocol):
    async def get_plan(self, db: AsyncSession, plan_id: int) -> InvestmentPlan | None: ...

    async def list_active_plans(self, db: AsyncSession) -> list[InvestmentPlan]: ...

    async def create_plan(
        self,
        db: AsyncSession,
        name: str,
        min_amount: int,
        max_amount: int | None,
        annual_return_rate_percent: Decimal,
        duration_days: int,
        is_active: bool,
    ) -> InvestmentPlan: ...

    async def set_plan_active(
        self, db: AsyncSession, plan_id: int, is_active: bool
    ) -> InvestmentPlan | None: ...

    async def insert_investment(self, db: AsyncSession, investment: Investment) -> None: ...

    async def get_investment(
        self, db: AsyncSession, investment_id: str
    ) -> Investment | None: ...

    async def list_investments(
        self, db: AsyncSession, user_id: str, status: str | None
    ) -> list[Investment]: ...

    async def mark_completed(
        self, db: AsyncSession, investment_id: str, closed_at: datetime
    ) -> bool: ...
