"""Store-level tests for the wallet ledger against a real SQL database (SQLite).

Each test gets a fresh database file; see tests/conftest.py.
"""

import asyncio

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.rw_common.enums import LedgerEntryKind
from src.rw_common.errors import (
    ConcurrencyConflictError,
    InsufficientFundsError,
)
from src.rw_wallet.application.service import WalletLedgerService
from src.rw_wallet.infrastructure.db_models import LedgerEntryORM
from src.rw_wallet.infrastructure.persistence import SqlLedgerStore

USER = "user-ledger"


async def _ledger_count(db: AsyncSession, account_id: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(LedgerEntryORM).where(
            LedgerEntryORM.account_id == account_id
        )
    )
    count = int(result.scalar_one())
    await db.rollback()
    return count


class TestBalanceMatchesLedger:
    async def test_after_every_operation(self, db: AsyncSession) -> None:
        svc = WalletLedgerService()
        operations = [
            ("deposit", 50_000),
            ("withdraw", 20_000),
            ("deposit", 7_500),
            ("withdraw", 37_500),
            ("deposit", 1),
        ]
        expected = 0
        for op, amount in operations:
            if op == "deposit":
                await svc.deposit(db, USER, amount, "M-Pesa")
                expected += amount
            else:
                await svc.withdraw(db, USER, amount, "M-Pesa", "+255700000001")
                expected -= amount

            report = await svc.reconcile(db, USER)
            await db.rollback()
            assert report.consistent is True
            assert report.balance == expected
            assert report.ledger_total == expected

    async def test_entries_chain_balances(self, db: AsyncSession) -> None:
        svc = WalletLedgerService()
        await svc.deposit(db, USER, 10_000)
        await svc.withdraw(db, USER, 4_000, "Bank", "ACC-77")

        page = await svc.list_ledger(db, USER, cursor=None, limit=10, kind=None)
        await db.rollback()

        newest, oldest = page.items
        assert oldest.kind == "DEPOSIT"
        assert (oldest.balance_before, oldest.amount, oldest.balance_after) == (0, 10_000, 10_000)
        assert newest.kind == "WITHDRAWAL"
        assert (newest.balance_before, newest.amount, newest.balance_after) == (10_000, -4_000, 6_000)
        assert newest.reference.startswith("WD-")

    async def test_kind_filter_and_pagination(self, db: AsyncSession) -> None:
        svc = WalletLedgerService()
        for _ in range(3):
            await svc.deposit(db, USER, 1_000)
        await svc.withdraw(db, USER, 500, "M-Pesa", "x")

        first = await svc.list_ledger(db, USER, cursor=None, limit=2, kind="DEPOSIT")
        second = await svc.list_ledger(db, USER, cursor=first.next_cursor, limit=2, kind="DEPOSIT")
        await db.rollback()

        assert first.has_more is True
        assert len(first.items) == 2
        assert second.has_more is False
        assert len(second.items) == 1
        ids = [i.id for i in first.items + second.items]
        assert ids == sorted(ids, reverse=True)


class TestInsufficientFunds:
    async def test_overdraft_leaves_state_unchanged(self, db: AsyncSession) -> None:
        svc = WalletLedgerService()
        await svc.deposit(db, USER, 30_000)
        before_count = await _ledger_count(db, USER)

        with pytest.raises(InsufficientFundsError):
            await svc.withdraw(db, USER, 30_001, "M-Pesa", "+255700000001")

        balance = await svc.get_balance(db, USER)
        await db.rollback()
        assert balance.balance == 30_000
        assert await _ledger_count(db, USER) == before_count

    async def test_debit_without_account_creates_nothing(self, db: AsyncSession) -> None:
        store = SqlLedgerStore()
        with pytest.raises(InsufficientFundsError):
            await store.apply_entry(db, "ghost", LedgerEntryKind.WITHDRAWAL, -1, None, None)
        await db.rollback()

        assert await store.get_account(db, "ghost") is None
        await db.rollback()


class TestConcurrentWithdrawals:
    async def test_fifty_full_balance_withdrawals(
        self,
        db: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        svc = WalletLedgerService()
        await svc.deposit(db, USER, 100_000)

        async def attempt() -> str:
            async with session_factory() as session:
                try:
                    await svc.withdraw(session, USER, 100_000, "M-Pesa", "+255700000001")
                except InsufficientFundsError:
                    return "insufficient"
                except ConcurrencyConflictError:
                    return "conflict"
                return "ok"

        outcomes = await asyncio.gather(*(attempt() for _ in range(50)))

        assert outcomes.count("ok") == 1
        assert outcomes.count("insufficient") + outcomes.count("conflict") == 49

        report = await svc.reconcile(db, USER)
        await db.rollback()
        assert report.balance == 0
        assert report.consistent is True
        assert await _ledger_count(db, USER) == 2
