"""Repository Protocol for rw_referral: referral links and codes."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rw_referral.domain.models import Referral


class ReferralRepositoryProtocol(Protocol):
    async def get_referral(self, db: AsyncSession, referral_id: int) -> Referral | None: ...

    async def get_referral_by_referred(
        self, db: AsyncSession, referred_id: str
    ) -> Referral | None: ...

    async def insert_referral(
        self,
        db: AsyncSession,
        referrer_id: str,
        referred_id: str,
        commission_rate_percent: Decimal,
    ) -> Referral: ...

    async def list_referrals(self, db: AsyncSession, referrer_id: str) -> list[Referral]: ...

    async def add_commission(
        self, db: AsyncSession, referral_id: int, commission: int
    ) -> Referral | None:
        """Increment total_commission of an ACTIVE referral; None if not ACTIVE."""
        ...

    async def set_status(
        self, db: AsyncSession, referral_id: int, status: str
    ) -> Referral | None: ...

    async def get_code(self, db: AsyncSession, user_id: str) -> str | None: ...

    async def find_code_owner(self, db: AsyncSession, code: str) -> str | None: ...

    async def insert_code(self, db: AsyncSession, user_id: str, code: str) -> None: ...
