"""Open/close investment flow against the SQLite store."""

from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.rw_common.datetime_utils import utc_now
from src.rw_common.enums import InvestmentStatus
from src.rw_common.errors import (
    InsufficientFundsError,
    InvestmentClosedError,
    InvestmentNotMaturedError,
    PlanInactiveError,
)
from src.rw_investment.application.service import InvestmentAccrualService
from src.rw_wallet.application.service import WalletLedgerService

USER = "investor-1"


@pytest.fixture
async def plan_id(db: AsyncSession) -> int:
    plan = await InvestmentAccrualService().create_plan(
        db, "Growth", 100_000, 10_000_000, Decimal("12.00"), 90
    )
    return plan.id


async def _balance(db: AsyncSession) -> int:
    balance = (await WalletLedgerService().get_balance(db, USER)).balance
    await db.rollback()
    return balance


class TestOpenAndClose:
    async def test_full_lifecycle(self, db: AsyncSession, plan_id: int) -> None:
        wallet = WalletLedgerService()
        svc = InvestmentAccrualService()
        await wallet.deposit(db, USER, 500_000)
        start = utc_now()

        opened = await svc.open(db, USER, plan_id, 100_000, as_of=start)

        assert opened.balance == 400_000
        assert opened.investment.expected_return == 102_958
        assert opened.investment.status == "ACTIVE"
        assert await _balance(db) == 400_000

        halfway = await svc.list_investments(db, USER, as_of=start + timedelta(days=45))
        await db.rollback()
        assert halfway.items[0].current_value == 101_479

        with pytest.raises(InvestmentNotMaturedError):
            await svc.close(db, USER, opened.investment.id, as_of=start + timedelta(days=89))
        await db.rollback()

        closed = await svc.close(db, USER, opened.investment.id, as_of=start + timedelta(days=90))
        assert closed.investment.status == "COMPLETED"
        assert closed.balance == 400_000 + 102_958
        assert await _balance(db) == 502_958

        with pytest.raises(InvestmentClosedError):
            await svc.close(db, USER, opened.investment.id, as_of=start + timedelta(days=91))
        await db.rollback()
        assert await _balance(db) == 502_958

        report = await wallet.reconcile(db, USER)
        await db.rollback()
        assert report.consistent is True

        page = await wallet.list_ledger(db, USER, cursor=None, limit=10, kind=None)
        await db.rollback()
        assert [i.kind for i in page.items] == ["INVESTMENT_RETURN", "INVESTMENT", "DEPOSIT"]
        assert page.items[0].reference == page.items[1].reference == opened.investment.id

    async def test_insufficient_funds_leaves_no_position(
        self, db: AsyncSession, plan_id: int
    ) -> None:
        svc = InvestmentAccrualService()
        await WalletLedgerService().deposit(db, USER, 50_000)

        with pytest.raises(InsufficientFundsError):
            await svc.open(db, USER, plan_id, 100_000)

        positions = await svc.list_investments(db, USER)
        await db.rollback()
        assert positions.items == []
        assert await _balance(db) == 50_000

    async def test_portfolio_stats_ignore_completed(self, db: AsyncSession, plan_id: int) -> None:
        svc = InvestmentAccrualService()
        await WalletLedgerService().deposit(db, USER, 1_000_000)
        start = utc_now()
        first = await svc.open(db, USER, plan_id, 100_000, as_of=start - timedelta(days=100))
        await svc.open(db, USER, plan_id, 200_000, as_of=start)
        await svc.close(db, USER, first.investment.id, as_of=start)

        stats = await svc.portfolio_stats(db, USER, as_of=start)
        active = await svc.list_investments(db, USER, status=InvestmentStatus.ACTIVE)
        await db.rollback()

        assert stats.investment_count == 1
        assert stats.total_invested == 200_000
        assert len(active.items) == 1


class TestPlans:
    async def test_deactivated_plan_rejects_new_positions(
        self, db: AsyncSession, plan_id: int
    ) -> None:
        svc = InvestmentAccrualService()
        await WalletLedgerService().deposit(db, USER, 500_000)
        await svc.set_plan_active(db, plan_id, False)

        with pytest.raises(PlanInactiveError):
            await svc.open(db, USER, plan_id, 100_000)
        await db.rollback()

        plans = await svc.list_plans(db)
        await db.rollback()
        assert plans.plans == []

    async def test_list_orders_by_minimum(self, db: AsyncSession, plan_id: int) -> None:
        svc = InvestmentAccrualService()
        await svc.create_plan(db, "Starter", 10_000, 1_000_000, Decimal("8.00"), 30)

        plans = await svc.list_plans(db)
        await db.rollback()

        assert [p.name for p in plans.plans] == ["Starter", "Growth"]
        assert plans.plans[1].annual_return_rate_percent == "12.00"
