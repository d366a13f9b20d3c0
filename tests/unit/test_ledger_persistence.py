"""Unit tests for SqlLedgerStore using a MagicMock AsyncSession."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.rw_common.enums import LedgerEntryKind
from src.rw_common.errors import (
    ConcurrencyConflictError,
    InsufficientFundsError,
    InvalidAmountError,
)
from src.rw_wallet.infrastructure.persistence import SqlLedgerStore


def _account_row(balance: int = 100_000, version: int = 3):
    row = MagicMock()
    row.user_id = "user-1"
    row.balance = balance
    row.version = version
    row.created_at = datetime.now(UTC)
    row.updated_at = datetime.now(UTC)
    return row


def _ledger_row(amount: int, before: int):
    row = MagicMock()
    row.id = 11
    row.account_id = "user-1"
    row.kind = "WITHDRAWAL"
    row.amount = amount
    row.balance_before = before
    row.balance_after = before + amount
    row.reference = "WD-1"
    row.description = "Withdrawal to M-Pesa (x)"
    row.created_at = datetime.now(UTC)
    return row


def _result(row):
    result = MagicMock()
    result.fetchone.return_value = row
    return result


@pytest.fixture
def db():
    return MagicMock()


class TestApplyEntry:
    async def test_cas_update_then_insert(self, db) -> None:
        db.execute = AsyncMock(
            side_effect=[
                _result(_account_row(100_000, 3)),
                _result(_account_row(90_000, 4)),
                _result(_ledger_row(-10_000, 100_000)),
            ]
        )

        account, entry = await SqlLedgerStore().apply_entry(
            db, "user-1", LedgerEntryKind.WITHDRAWAL, -10_000, "WD-1", "x"
        )

        assert account.balance == 90_000
        assert account.version == 4
        assert entry.balance_before == 100_000
        assert entry.balance_after == 90_000
        assert db.execute.await_count == 3

    async def test_cas_miss_raises_conflict(self, db) -> None:
        db.execute = AsyncMock(
            side_effect=[_result(_account_row(100_000, 3)), _result(None)]
        )

        with pytest.raises(ConcurrencyConflictError):
            await SqlLedgerStore().apply_entry(
                db, "user-1", LedgerEntryKind.WITHDRAWAL, -10_000, "WD-1", "x"
            )

        # No ledger row after a lost race
        assert db.execute.await_count == 2

    async def test_overdraft_raises_before_write(self, db) -> None:
        db.execute = AsyncMock(side_effect=[_result(_account_row(5_000, 1))])

        with pytest.raises(InsufficientFundsError) as exc_info:
            await SqlLedgerStore().apply_entry(
                db, "user-1", LedgerEntryKind.WITHDRAWAL, -10_000, None, None
            )

        assert exc_info.value.available == 5_000
        assert db.execute.await_count == 1

    async def test_debit_on_missing_account(self, db) -> None:
        db.execute = AsyncMock(side_effect=[_result(None)])

        with pytest.raises(InsufficientFundsError) as exc_info:
            await SqlLedgerStore().apply_entry(
                db, "user-1", LedgerEntryKind.INVESTMENT, -1, "INV-1", None
            )

        assert exc_info.value.available == 0

    async def test_zero_amount_rejected(self, db) -> None:
        db.execute = AsyncMock()

        with pytest.raises(InvalidAmountError):
            await SqlLedgerStore().apply_entry(db, "user-1", LedgerEntryKind.DEPOSIT, 0, None, None)

        db.execute.assert_not_awaited()

    async def test_credit_creates_account(self, db) -> None:
        db.execute = AsyncMock(
            side_effect=[
                _result(None),                       # no account yet
                _result(_account_row(0, 0)),         # insert
                _result(_account_row(500, 1)),       # CAS
                _result(_ledger_row(500, 0)),        # ledger
            ]
        )

        account, entry = await SqlLedgerStore().apply_entry(
            db, "user-1", LedgerEntryKind.DEPOSIT, 500, "DEP-1", None
        )

        assert account.balance == 500
        assert entry.balance_before == 0


class TestReads:
    async def test_get_account_missing(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(None))
        assert await SqlLedgerStore().get_account(db, "nobody") is None

    async def test_sum_entries(self, db) -> None:
        result = MagicMock()
        result.scalar_one.return_value = 70_000
        db.execute = AsyncMock(return_value=result)
        assert await SqlLedgerStore().sum_entries(db, "user-1") == 70_000
