"""005: create investments table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE investments (
            id                          VARCHAR(64)     PRIMARY KEY,
            user_id                     VARCHAR(64)     NOT NULL,
            plan_id                     INTEGER         NOT NULL REFERENCES investment_plans(id),
            amount                      BIGINT          NOT NULL,
            annual_return_rate_percent  NUMERIC(6, 2)   NOT NULL,
            duration_days               INTEGER         NOT NULL,
            expected_return             BIGINT          NOT NULL,
            start_date                  TIMESTAMPTZ     NOT NULL,
            maturity_date               TIMESTAMPTZ     NOT NULL,
            status                      VARCHAR(20)     NOT NULL DEFAULT 'ACTIVE',
            closed_at                   TIMESTAMPTZ,
            CONSTRAINT ck_investments_amount_gt_0        CHECK (amount > 0),
            CONSTRAINT ck_investments_return_gte_amount  CHECK (expected_return >= amount),
            CONSTRAINT ck_investments_duration_gt_0      CHECK (duration_days > 0),
            CONSTRAINT ck_investments_status             CHECK (status IN ('ACTIVE', 'COMPLETED')),
            CONSTRAINT ck_investments_closed_at CHECK (
                (status = 'COMPLETED') = (closed_at IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_investments_user_start ON investments (user_id, start_date DESC);")
    op.execute("COMMENT ON TABLE investments IS 'Fixed-term positions; rate/duration are a snapshot of the plan';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS investments CASCADE;")
