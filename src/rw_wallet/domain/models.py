"""Domain models for rw_wallet: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Account:
    user_id: str
    balance: int      # TZS, never negative
    version: int      # optimistic-concurrency counter, +1 per mutation
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class LedgerEntry:
    id: int                          # autoincrement
    account_id: str
    kind: str                        # LedgerEntryKind value
    amount: int                      # signed: credit > 0, debit < 0
    balance_before: int
    balance_after: int               # == balance_before + amount
    reference: str | None = None     # origin (investment id, payment ref), stored verbatim
    description: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class LedgerPosting:
    """Result of one applied ledger mutation: the new balance and the entry that records it."""

    balance: int
    entry: LedgerEntry

    @property
    def ledger_entry_id(self) -> int:
        return self.entry.id
