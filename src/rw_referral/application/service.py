"""ReferralCommissionService: referral links, codes and commission accrual.

accrue() credits the referrer's wallet and bumps the referral's running
total in one unit of work, so the two can never disagree.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.rw_common.database import run_in_transaction
from src.rw_common.enums import LedgerEntryKind, ReferralStatus
from src.rw_common.errors import (
    InternalError,
    InvalidAmountError,
    InvalidReferralError,
    ReferralCodeInvalidError,
    ReferralInactiveError,
    ReferralNotFoundError,
)
from src.rw_common.money import format_amount, require_positive_amount
from src.rw_referral.application.schemas import (
    AccrualResponse,
    CodeValidationResponse,
    ReferralCodeResponse,
    ReferralItem,
    ReferralSummaryResponse,
)
from src.rw_referral.domain.models import Referral, ReferralSummary
from src.rw_referral.domain.repository import ReferralRepositoryProtocol
from src.rw_referral.domain.rules import (
    generate_referral_code,
    is_well_formed_code,
    referral_commission,
    validate_commission_rate,
)
from src.rw_referral.infrastructure.persistence import ReferralRepository
from src.rw_wallet.application.service import WalletLedgerService
from src.rw_wallet.domain.models import LedgerPosting

logger = logging.getLogger(__name__)

# Fresh candidates tried per unit of work before giving up on a collision
_CODE_CANDIDATES = 5


class ReferralCommissionService:
    def __init__(
        self,
        repo: ReferralRepositoryProtocol | None = None,
        wallet: WalletLedgerService | None = None,
    ) -> None:
        self._repo: ReferralRepositoryProtocol = repo or ReferralRepository()
        self._wallet = wallet or WalletLedgerService()

    # ------------------------------------------------------------------
    # Codes
    # ------------------------------------------------------------------

    async def get_or_create_code(
        self, db: AsyncSession, user_id: str, display_name: str | None
    ) -> ReferralCodeResponse:
        existing = await self._repo.get_code(db, user_id)
        if existing is not None:
            return ReferralCodeResponse(code=existing)

        async def work(session: AsyncSession) -> str:
            current = await self._repo.get_code(session, user_id)
            if current is not None:
                return current
            for _ in range(_CODE_CANDIDATES):
                candidate = generate_referral_code(display_name)
                if await self._repo.find_code_owner(session, candidate) is None:
                    break
            else:
                raise InternalError(
                    f"No free referral code after {_CODE_CANDIDATES} candidates for {user_id}"
                )
            await self._repo.insert_code(session, user_id, candidate)
            return candidate

        code = await run_in_transaction(db, work)
        logger.info("Referral code issued: user=%s code=%s", user_id, code)
        return ReferralCodeResponse(code=code)

    async def resolve_code(self, db: AsyncSession, code: str) -> CodeValidationResponse:
        """Return the owner of `code`; malformed or unknown codes are rejected alike."""
        normalized = code.strip()
        if not is_well_formed_code(normalized):
            raise ReferralCodeInvalidError(code)
        owner = await self._repo.find_code_owner(db, normalized)
        if owner is None:
            raise ReferralCodeInvalidError(code)
        return CodeValidationResponse(valid=True, code=normalized, referrer_id=owner)

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    async def create_referral(
        self,
        db: AsyncSession,
        referrer_id: str,
        referred_id: str,
        commission_rate_percent: Decimal | None = None,
    ) -> ReferralItem:
        rate = (
            commission_rate_percent
            if commission_rate_percent is not None
            else settings.DEFAULT_REFERRAL_COMMISSION_PERCENT
        )
        validate_commission_rate(rate)
        if referrer_id == referred_id:
            raise InvalidReferralError("users cannot refer themselves")
        if await self._repo.get_referral_by_referred(db, referred_id) is not None:
            raise InvalidReferralError(f"user {referred_id} was already referred")

        async def work(session: AsyncSession) -> Referral:
            return await self._repo.insert_referral(session, referrer_id, referred_id, rate)

        referral = await run_in_transaction(db, work)
        logger.info(
            "Referral created: id=%s referrer=%s referred=%s rate=%s%%",
            referral.id, referrer_id, referred_id, rate,
        )
        return ReferralItem.from_domain(referral)

    async def link_by_code(
        self, db: AsyncSession, referred_id: str, code: str
    ) -> ReferralItem:
        resolved = await self.resolve_code(db, code)
        return await self.create_referral(db, resolved.referrer_id, referred_id)

    async def set_status(
        self, db: AsyncSession, referral_id: int, status: ReferralStatus
    ) -> ReferralItem:
        async def work(session: AsyncSession) -> Referral:
            referral = await self._repo.set_status(session, referral_id, status.value)
            if referral is None:
                raise ReferralNotFoundError(referral_id)
            return referral

        referral = await run_in_transaction(db, work)
        logger.info("Referral %s status=%s", referral_id, status.value)
        return ReferralItem.from_domain(referral)

    # ------------------------------------------------------------------
    # Accrual
    # ------------------------------------------------------------------

    async def accrue(
        self,
        db: AsyncSession,
        referral_id: int,
        base_amount: int,
        source_reference: str,
    ) -> AccrualResponse:
        require_positive_amount(base_amount)
        referral = await self._repo.get_referral(db, referral_id)
        if referral is None:
            raise ReferralNotFoundError(referral_id)
        if referral.status != ReferralStatus.ACTIVE.value:
            raise ReferralInactiveError(referral_id)
        commission = referral_commission(base_amount, referral.commission_rate_percent)
        if commission <= 0:
            raise InvalidAmountError(
                f"commission on {base_amount} at {referral.commission_rate_percent}% rounds to 0"
            )
        description = (
            f"Referral commission {referral.commission_rate_percent}% "
            f"on {format_amount(base_amount)} from {referral.referred_id}"
        )

        async def work(session: AsyncSession) -> tuple[Referral, LedgerPosting]:
            updated = await self._repo.add_commission(session, referral_id, commission)
            if updated is None:
                # Deactivated between the read above and this unit of work
                raise ReferralInactiveError(referral_id)
            posting = await self._wallet.post(
                session,
                updated.referrer_id,
                LedgerEntryKind.REFERRAL_COMMISSION,
                commission,
                source_reference,
                description,
            )
            return updated, posting

        updated, posting = await run_in_transaction(db, work)
        logger.info(
            "Referral commission committed: referral=%s referrer=%s source=%s commission=%d",
            referral_id, updated.referrer_id, source_reference, commission,
        )
        return AccrualResponse.from_result(updated, base_amount, commission, posting)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def summary(
        self, db: AsyncSession, referrer_id: str, display_name: str | None = None
    ) -> ReferralSummaryResponse:
        code = await self.get_or_create_code(db, referrer_id, display_name)
        referrals = await self._repo.list_referrals(db, referrer_id)
        summary = ReferralSummary(
            referrer_id=referrer_id,
            code=code.code,
            total_referrals=len(referrals),
            total_commission=sum(r.total_commission for r in referrals),
            referrals=referrals,
        )
        return ReferralSummaryResponse.from_domain(summary)
