"""WalletLedgerService: deposits, withdrawals and ledger postings.

Two kinds of operation:
  - Standalone mutations (deposit, withdraw, charge_vendor_commission) run as
    their own unit of work through `run_in_transaction`, which commits, rolls
    back, and retries a lost balance race.
  - Postings used by other contexts (debit_for_investment,
    credit_investment_return, post) run inside the CALLER's unit of work and
    never commit on their own.

All validation happens before the first statement is issued.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.rw_commission.domain.commission import commission_breakdown
from src.rw_common.database import run_in_transaction
from src.rw_common.enums import LedgerEntryKind
from src.rw_common.errors import InvalidAmountError, MissingDestinationError
from src.rw_common.money import format_amount, require_positive_amount
from src.rw_common.references import new_reference
from src.rw_wallet.application.schemas import (
    BalanceResponse,
    LedgerEntryItem,
    LedgerMutationResponse,
    LedgerResponse,
    ReconciliationResponse,
    VendorCommissionResponse,
    cursor_decode,
    cursor_encode,
)
from src.rw_wallet.domain.models import LedgerPosting
from src.rw_wallet.domain.repository import LedgerStoreProtocol
from src.rw_wallet.infrastructure.persistence import SqlLedgerStore

logger = logging.getLogger(__name__)


class WalletLedgerService:
    def __init__(self, store: LedgerStoreProtocol | None = None) -> None:
        self._store: LedgerStoreProtocol = store or SqlLedgerStore()

    # ------------------------------------------------------------------
    # Postings inside the caller's unit of work
    # ------------------------------------------------------------------

    async def post(
        self,
        db: AsyncSession,
        account_id: str,
        kind: LedgerEntryKind,
        signed_amount: int,
        reference: str | None,
        description: str | None,
    ) -> LedgerPosting:
        account, entry = await self._store.apply_entry(
            db, account_id, kind, signed_amount, reference, description
        )
        return LedgerPosting(balance=account.balance, entry=entry)

    async def debit_for_investment(
        self, db: AsyncSession, user_id: str, amount: int, investment_reference: str
    ) -> LedgerPosting:
        require_positive_amount(amount)
        return await self.post(
            db,
            user_id,
            LedgerEntryKind.INVESTMENT,
            -amount,
            investment_reference,
            f"Investment {investment_reference}",
        )

    async def credit_investment_return(
        self, db: AsyncSession, user_id: str, amount: int, investment_reference: str
    ) -> LedgerPosting:
        require_positive_amount(amount)
        return await self.post(
            db,
            user_id,
            LedgerEntryKind.INVESTMENT_RETURN,
            amount,
            investment_reference,
            f"Investment return {investment_reference}",
        )

    # ------------------------------------------------------------------
    # Standalone mutations
    # ------------------------------------------------------------------

    async def deposit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        method: str | None = None,
        reference: str | None = None,
    ) -> LedgerMutationResponse:
        require_positive_amount(amount)
        ref = reference or new_reference("DEP")
        description = f"Deposit via {method or 'wallet'}"

        async def work(session: AsyncSession) -> LedgerPosting:
            return await self.post(
                session, user_id, LedgerEntryKind.DEPOSIT, amount, ref, description
            )

        posting = await run_in_transaction(db, work)
        logger.info(
            "Deposit committed: user=%s amount=%d entry=%d balance=%d",
            user_id, amount, posting.ledger_entry_id, posting.balance,
        )
        return LedgerMutationResponse.from_posting(posting)

    async def withdraw(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        method: str,
        destination: str | None,
    ) -> LedgerMutationResponse:
        require_positive_amount(amount)
        if destination is None or not destination.strip():
            raise MissingDestinationError()
        ref = new_reference("WD")
        description = f"Withdrawal to {method} ({destination.strip()})"

        async def work(session: AsyncSession) -> LedgerPosting:
            return await self.post(
                session, user_id, LedgerEntryKind.WITHDRAWAL, -amount, ref, description
            )

        posting = await run_in_transaction(db, work)
        logger.info(
            "Withdrawal committed: user=%s amount=%d entry=%d balance=%d",
            user_id, amount, posting.ledger_entry_id, posting.balance,
        )
        return LedgerMutationResponse.from_posting(posting)

    async def charge_vendor_commission(
        self,
        db: AsyncSession,
        vendor_id: str,
        transaction_amount: int,
        order_reference: str,
    ) -> VendorCommissionResponse:
        """Debit the platform commission for one sale from the vendor's wallet."""
        breakdown = commission_breakdown(transaction_amount)
        if breakdown.fee <= 0:
            raise InvalidAmountError(f"no commission due on {transaction_amount}")
        description = (
            f"Vendor commission {breakdown.rate_percent_display} "
            f"on {format_amount(transaction_amount)}"
        )

        async def work(session: AsyncSession) -> LedgerPosting:
            return await self.post(
                session,
                vendor_id,
                LedgerEntryKind.COMMISSION,
                -breakdown.fee,
                order_reference,
                description,
            )

        posting = await run_in_transaction(db, work)
        logger.info(
            "Vendor commission committed: vendor=%s order=%s fee=%d balance=%d",
            vendor_id, order_reference, breakdown.fee, posting.balance,
        )
        return VendorCommissionResponse.from_result(vendor_id, breakdown, posting)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_balance(self, db: AsyncSession, user_id: str) -> BalanceResponse:
        account = await self._store.get_account(db, user_id)
        # Accounts are created lazily at the first credit
        balance = account.balance if account is not None else 0
        return BalanceResponse.from_amount(user_id, balance)

    async def list_ledger(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
        kind: str | None,
    ) -> LedgerResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._store.list_entries(db, user_id, cursor_id, limit + 1, kind)
        has_more = len(entries) > limit
        page = entries[:limit]

        items = [LedgerEntryItem.from_domain(e) for e in page]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(items=items, next_cursor=next_cursor, has_more=has_more)

    async def reconcile(self, db: AsyncSession, user_id: str) -> ReconciliationResponse:
        """Check balance == sum of signed ledger amounts for one account."""
        account = await self._store.get_account(db, user_id)
        balance = account.balance if account is not None else 0
        ledger_total = await self._store.sum_entries(db, user_id)

        violations: list[str] = []
        if balance != ledger_total:
            msg = (
                f"Ledger mismatch for {user_id}: balance({balance}) "
                f"!= sum(ledger amounts)={ledger_total}"
            )
            violations.append(msg)
            logger.error(msg)
        return ReconciliationResponse(
            user_id=user_id,
            balance=balance,
            ledger_total=ledger_total,
            consistent=not violations,
            violations=violations,
        )
