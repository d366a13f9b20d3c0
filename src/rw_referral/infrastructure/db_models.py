"""SQLAlchemy ORM models for rw_referral.

These map to tables created by Alembic migration 006.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Index, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.rw_common.database import Base


class ReferralORM(Base):
    __tablename__ = "referrals"
    __table_args__ = (
        CheckConstraint("referrer_id <> referred_id", name="ck_referrals_not_self"),
        CheckConstraint("total_commission >= 0", name="ck_referrals_total_gte_0"),
        CheckConstraint(
            "commission_rate_percent > 0 AND commission_rate_percent <= 100",
            name="ck_referrals_rate_range",
        ),
        CheckConstraint("status IN ('ACTIVE', 'INACTIVE')", name="ck_referrals_status"),
        Index("idx_referrals_referrer", "referrer_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    referrer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    referred_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    commission_rate_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    total_commission: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class ReferralCodeORM(Base):
    __tablename__ = "referral_codes"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    code: Mapped[str] = mapped_column(String(7), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
