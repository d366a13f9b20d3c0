"""ReferralRepository: concrete implementation of ReferralRepositoryProtocol."""

from decimal import Decimal

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.rw_common.datetime_utils import ensure_utc, utc_now
from src.rw_common.enums import ReferralStatus
from src.rw_common.errors import ConcurrencyConflictError, InternalError, InvalidReferralError
from src.rw_referral.domain.models import Referral
from src.rw_referral.infrastructure.db_models import ReferralCodeORM, ReferralORM

_referrals = ReferralORM.__table__
_codes = ReferralCodeORM.__table__


def _row_to_referral(row: object) -> Referral:
    return Referral(
        id=row.id,  # type: ignore[attr-defined]
        referrer_id=row.referrer_id,  # type: ignore[attr-defined]
        referred_id=row.referred_id,  # type: ignore[attr-defined]
        commission_rate_percent=Decimal(row.commission_rate_percent),  # type: ignore[attr-defined]
        total_commission=row.total_commission,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        created_at=ensure_utc(row.created_at) if row.created_at else None,  # type: ignore[attr-defined]
    )


class ReferralRepository:
    async def get_referral(self, db: AsyncSession, referral_id: int) -> Referral | None:
        result = await db.execute(select(_referrals).where(_referrals.c.id == referral_id))
        row = result.fetchone()
        return _row_to_referral(row) if row else None

    async def get_referral_by_referred(
        self, db: AsyncSession, referred_id: str
    ) -> Referral | None:
        result = await db.execute(
            select(_referrals).where(_referrals.c.referred_id == referred_id)
        )
        row = result.fetchone()
        return _row_to_referral(row) if row else None

    async def insert_referral(
        self,
        db: AsyncSession,
        referrer_id: str,
        referred_id: str,
        commission_rate_percent: Decimal,
    ) -> Referral:
        try:
            result = await db.execute(
                insert(_referrals)
                .values(
                    referrer_id=referrer_id,
                    referred_id=referred_id,
                    commission_rate_percent=commission_rate_percent,
                    total_commission=0,
                    status=ReferralStatus.ACTIVE.value,
                    created_at=utc_now(),
                )
                .returning(*_referrals.c)
            )
        except IntegrityError as exc:
            raise InvalidReferralError(f"user {referred_id} was already referred") from exc
        row = result.fetchone()
        if row is None:
            raise InternalError("Referral insert returned no rows")
        return _row_to_referral(row)

    async def list_referrals(self, db: AsyncSession, referrer_id: str) -> list[Referral]:
        result = await db.execute(
            select(_referrals)
            .where(_referrals.c.referrer_id == referrer_id)
            .order_by(_referrals.c.created_at.desc(), _referrals.c.id.desc())
        )
        return [_row_to_referral(row) for row in result.fetchall()]

    async def add_commission(
        self, db: AsyncSession, referral_id: int, commission: int
    ) -> Referral | None:
        # Atomic increment; the status guard makes a concurrent deactivation win
        result = await db.execute(
            update(_referrals)
            .where(
                _referrals.c.id == referral_id,
                _referrals.c.status == ReferralStatus.ACTIVE.value,
            )
            .values(total_commission=_referrals.c.total_commission + commission)
            .returning(*_referrals.c)
        )
        row = result.fetchone()
        return _row_to_referral(row) if row else None

    async def set_status(
        self, db: AsyncSession, referral_id: int, status: str
    ) -> Referral | None:
        result = await db.execute(
            update(_referrals)
            .where(_referrals.c.id == referral_id)
            .values(status=status)
            .returning(*_referrals.c)
        )
        row = result.fetchone()
        return _row_to_referral(row) if row else None

    async def get_code(self, db: AsyncSession, user_id: str) -> str | None:
        result = await db.execute(select(_codes.c.code).where(_codes.c.user_id == user_id))
        return result.scalar_one_or_none()

    async def find_code_owner(self, db: AsyncSession, code: str) -> str | None:
        result = await db.execute(select(_codes.c.user_id).where(_codes.c.code == code))
        return result.scalar_one_or_none()

    async def insert_code(self, db: AsyncSession, user_id: str, code: str) -> None:
        try:
            await db.execute(
                insert(_codes).values(user_id=user_id, code=code, created_at=utc_now())
            )
        except IntegrityError as exc:
            # Same user issued concurrently, or a code collision; retry picks it up.
            raise ConcurrencyConflictError(f"Referral code for {user_id} collided") from exc
