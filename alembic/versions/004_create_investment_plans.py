"""004: create investment_plans table and seed the default catalogue

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE investment_plans (
            id                          SERIAL          PRIMARY KEY,
            name                        VARCHAR(100)    NOT NULL,
            min_amount                  BIGINT          NOT NULL,
            max_amount                  BIGINT,
            annual_return_rate_percent  NUMERIC(6, 2)   NOT NULL,
            duration_days               INTEGER         NOT NULL,
            is_active                   BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_plans_duration_gt_0   CHECK (duration_days > 0),
            CONSTRAINT ck_plans_min_amount_gt_0 CHECK (min_amount > 0),
            CONSTRAINT ck_plans_max_gte_min     CHECK (max_amount IS NULL OR max_amount >= min_amount),
            CONSTRAINT ck_plans_rate_gte_0      CHECK (annual_return_rate_percent >= 0)
        );
    """)
    op.execute("""
        INSERT INTO investment_plans
            (name, min_amount, max_amount, annual_return_rate_percent, duration_days)
        VALUES
            ('Starter',  10000,    1000000,   8.00,  30),
            ('Growth',   100000,   10000000,  12.00, 90),
            ('Premium',  1000000,  NULL,      15.00, 180);
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS investment_plans CASCADE;")
