"""SQLAlchemy ORM models for rw_investment.

These map to tables created by Alembic migrations (004, 005).
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.rw_common.database import Base


class InvestmentPlanORM(Base):
    __tablename__ = "investment_plans"
    __table_args__ = (
        CheckConstraint("duration_days > 0", name="ck_plans_duration_gt_0"),
        CheckConstraint("min_amount > 0", name="ck_plans_min_amount_gt_0"),
        CheckConstraint(
            "max_amount IS NULL OR max_amount >= min_amount", name="ck_plans_max_gte_min"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    min_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    max_amount: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    annual_return_rate_percent: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class InvestmentORM(Base):
    __tablename__ = "investments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_investments_amount_gt_0"),
        CheckConstraint("expected_return >= amount", name="ck_investments_return_gte_amount"),
        Index("idx_investments_user_start", "user_id", "start_date"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    plan_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("investment_plans.id"), nullable=False
    )
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    annual_return_rate_percent: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    expected_return: Mapped[int] = mapped_column(BigInteger, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    maturity_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
