"""003: create lp_shares and lp_events tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE lp_shares (
            address             VARCHAR(64)     PRIMARY KEY,
            shares              NUMERIC         NOT NULL,
            total_deposited     NUMERIC         NOT NULL DEFAULT 0,
            total_withdrawn     NUMERIC         NOT NULL DEFAULT 0,
            first_deposit_at    TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            last_action_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_lp_shares_shares_gte_0 CHECK (shares >= 0)
        );
    """)
    op.execute("COMMENT ON TABLE lp_shares IS 'Pooled-liquidity share ledger, one row per provider';")

    op.execute("""
        CREATE TABLE lp_events (
            id                  BIGSERIAL       PRIMARY KEY,
            address             VARCHAR(64)     NOT NULL,
            type                VARCHAR(20)     NOT NULL,
            amount              NUMERIC         NOT NULL,
            shares              NUMERIC         NOT NULL,
            share_price         NUMERIC         NOT NULL,
            pool_value_before   NUMERIC         NOT NULL,
            pool_value_after    NUMERIC         NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_lp_events_type CHECK (type IN ('DEPOSIT', 'WITHDRAWAL'))
        );
    """)
    op.execute("CREATE INDEX idx_lp_events_address ON lp_events (address, id DESC);")
    op.execute("COMMENT ON TABLE lp_events IS 'Append-only deposit/withdrawal log';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS lp_events CASCADE;")
    op.execute("DROP TABLE IF EXISTS lp_shares CASCADE;")
