"""006: create referrals and referral_codes tables

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE referrals (
            id                       SERIAL          PRIMARY KEY,
            referrer_id              VARCHAR(64)     NOT NULL,
            referred_id              VARCHAR(64)     NOT NULL,
            commission_rate_percent  NUMERIC(5, 2)   NOT NULL DEFAULT 5.00,
            total_commission         BIGINT          NOT NULL DEFAULT 0,
            status                   VARCHAR(20)     NOT NULL DEFAULT 'ACTIVE',
            created_at               TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_referrals_referred_id  UNIQUE (referred_id),
            CONSTRAINT ck_referrals_not_self     CHECK (referrer_id <> referred_id),
            CONSTRAINT ck_referrals_total_gte_0  CHECK (total_commission >= 0),
            CONSTRAINT ck_referrals_rate_range   CHECK (
                commission_rate_percent > 0 AND commission_rate_percent <= 100
            ),
            CONSTRAINT ck_referrals_status       CHECK (status IN ('ACTIVE', 'INACTIVE'))
        );
    """)
    op.execute("CREATE INDEX idx_referrals_referrer ON referrals (referrer_id);")
    op.execute("""
        CREATE TABLE referral_codes (
            user_id     VARCHAR(64) PRIMARY KEY,
            code        VARCHAR(7)  NOT NULL,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_referral_codes_code    UNIQUE (code),
            CONSTRAINT ck_referral_codes_format  CHECK (code ~ '^[A-Z]{3}[0-9]{4}$')
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS referral_codes CASCADE;")
    op.execute("DROP TABLE IF EXISTS referrals CASCADE;")
