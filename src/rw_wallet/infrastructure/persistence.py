"""SqlLedgerStore: concrete implementation of LedgerStoreProtocol.

apply_entry is a compare-and-swap on accounts.version:

    read (balance, version) → check balance_after >= 0 →
    UPDATE accounts SET balance = :after, version = version + 1
     WHERE user_id = :id AND version = :seen  RETURNING …
    → INSERT ledger_entries … RETURNING …

Zero rows from the UPDATE means another unit of work committed first; that
raises ConcurrencyConflictError and the unit-of-work runner retries.

Transaction ownership: The CALLER is responsible for committing or rolling
back (see src.rw_common.database.run_in_transaction).
"""

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.rw_common.datetime_utils import ensure_utc, utc_now
from src.rw_common.enums import LedgerEntryKind
from src.rw_common.errors import (
    ConcurrencyConflictError,
    InsufficientFundsError,
    InternalError,
    InvalidAmountError,
)
from src.rw_wallet.domain.models import Account, LedgerEntry
from src.rw_wallet.infrastructure.db_models import AccountORM, LedgerEntryORM

_accounts = AccountORM.__table__
_ledger = LedgerEntryORM.__table__


def _row_to_account(row: object) -> Account:
    return Account(
        user_id=row.user_id,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=ensure_utc(row.created_at) if row.created_at else None,  # type: ignore[attr-defined]
        updated_at=ensure_utc(row.updated_at) if row.updated_at else None,  # type: ignore[attr-defined]
    )


def _row_to_ledger(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        account_id=row.account_id,  # type: ignore[attr-defined]
        kind=row.kind,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_before=row.balance_before,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        reference=row.reference,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=ensure_utc(row.created_at) if row.created_at else None,  # type: ignore[attr-defined]
    )


class SqlLedgerStore:
    """Concrete store: every balance change is a CAS on the account row."""

    async def get_account(self, db: AsyncSession, user_id: str) -> Account | None:
        result = await db.execute(select(_accounts).where(_accounts.c.user_id == user_id))
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def _create_account(self, db: AsyncSession, user_id: str) -> Account:
        now = utc_now()
        try:
            result = await db.execute(
                insert(_accounts)
                .values(user_id=user_id, balance=0, version=0, created_at=now, updated_at=now)
                .returning(*_accounts.c)
            )
        except IntegrityError as exc:
            # Another unit of work created the row first; retry sees it.
            raise ConcurrencyConflictError(f"Account {user_id} created concurrently") from exc
        row = result.fetchone()
        if row is None:
            raise InternalError("Account insert returned no rows")
        return _row_to_account(row)

    async def apply_entry(
        self,
        db: AsyncSession,
        account_id: str,
        kind: LedgerEntryKind,
        signed_amount: int,
        reference: str | None,
        description: str | None,
    ) -> tuple[Account, LedgerEntry]:
        if signed_amount == 0:
            raise InvalidAmountError("ledger amount must be non-zero")

        current = await self.get_account(db, account_id)
        if current is None:
            if signed_amount < 0:
                raise InsufficientFundsError(-signed_amount, 0)
            current = await self._create_account(db, account_id)

        balance_before = current.balance
        balance_after = balance_before + signed_amount
        if balance_after < 0:
            raise InsufficientFundsError(-signed_amount, balance_before)

        now = utc_now()
        result = await db.execute(
            update(_accounts)
            .where(
                _accounts.c.user_id == account_id,
                _accounts.c.version == current.version,
            )
            .values(balance=balance_after, version=_accounts.c.version + 1, updated_at=now)
            .returning(*_accounts.c)
        )
        row = result.fetchone()
        if row is None:
            raise ConcurrencyConflictError(
                f"Account {account_id} changed since version {current.version}"
            )
        account = _row_to_account(row)

        ledger_result = await db.execute(
            insert(_ledger)
            .values(
                account_id=account_id,
                kind=LedgerEntryKind(kind).value,
                amount=signed_amount,
                balance_before=balance_before,
                balance_after=balance_after,
                reference=reference,
                description=description,
                created_at=now,
            )
            .returning(*_ledger.c)
        )
        ledger_row = ledger_result.fetchone()
        if ledger_row is None:
            raise InternalError("Ledger insert returned no rows: this should never happen")
        return account, _row_to_ledger(ledger_row)

    async def list_entries(
        self,
        db: AsyncSession,
        account_id: str,
        cursor_id: int | None,
        limit: int,
        kind: str | None,
    ) -> list[LedgerEntry]:
        stmt = select(_ledger).where(_ledger.c.account_id == account_id)
        if cursor_id is not None:
            stmt = stmt.where(_ledger.c.id < cursor_id)
        if kind is not None:
            stmt = stmt.where(_ledger.c.kind == kind)
        result = await db.execute(stmt.order_by(_ledger.c.id.desc()).limit(limit))
        return [_row_to_ledger(row) for row in result.fetchall()]

    async def sum_entries(self, db: AsyncSession, account_id: str) -> int:
        result = await db.execute(
            select(func.coalesce(func.sum(_ledger.c.amount), 0)).where(
                _ledger.c.account_id == account_id
            )
        )
        return int(result.scalar_one())
