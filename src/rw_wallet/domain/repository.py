"""LedgerStore Protocol: dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.

Transaction ownership: every method runs on the caller's session. The caller
wraps a whole unit of work in `run_in_transaction`, which commits or rolls
back; `apply_entry` therefore never leaves a balance change without its entry.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rw_common.enums import LedgerEntryKind
from src.rw_wallet.domain.models import Account, LedgerEntry


class LedgerStoreProtocol(Protocol):
    async def get_account(self, db: AsyncSession, user_id: str) -> Account | None: ...

    async def apply_entry(
        self,
        db: AsyncSession,
        account_id: str,
        kind: LedgerEntryKind,
        signed_amount: int,
        reference: str | None,
        description: str | None,
    ) -> tuple[Account, LedgerEntry]: ...

    async def list_entries(
        self,
        db: AsyncSession,
        account_id: str,
        cursor_id: int | None,
        limit: int,
        kind: str | None,
    ) -> list[LedgerEntry]: ...

    async def sum_entries(self, db: AsyncSession, account_id: str) -> int: ...
