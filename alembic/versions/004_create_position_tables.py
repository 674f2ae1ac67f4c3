"""004: create positions and settlements tables

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE positions (
            id                  BIGSERIAL       PRIMARY KEY,
            address             VARCHAR(64)     NOT NULL,
            market_id           VARCHAR(200)    NOT NULL REFERENCES markets (id),
            outcome             VARCHAR(64)     NOT NULL,
            shares              NUMERIC         NOT NULL,
            cost_paid           NUMERIC         NOT NULL,
            fee                 NUMERIC         NOT NULL DEFAULT 0,
            app_session_id      VARCHAR(128)    NOT NULL,
            app_session_version INT             NOT NULL,
            session_status      VARCHAR(20)     NOT NULL DEFAULT 'open',
            session_data        TEXT,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_positions_shares_gte_0 CHECK (shares >= 0),
            CONSTRAINT ck_positions_session_status CHECK (
                session_status IN ('open', 'settling', 'settled')
            )
        );
    """)
    op.execute("CREATE INDEX idx_positions_market ON positions (market_id);")
    op.execute("CREATE INDEX idx_positions_address ON positions (address);")
    op.execute("CREATE INDEX idx_positions_session ON positions (app_session_id);")
    op.execute("COMMENT ON TABLE positions IS 'Active positions; cleared when the market settles';")

    op.execute("""
        CREATE TABLE settlements (
            id                  BIGSERIAL       PRIMARY KEY,
            market_id           VARCHAR(200)    NOT NULL REFERENCES markets (id),
            address             VARCHAR(64)     NOT NULL,
            outcome             VARCHAR(64)     NOT NULL,
            result              VARCHAR(10)     NOT NULL,
            shares              NUMERIC         NOT NULL,
            cost_paid           NUMERIC         NOT NULL,
            payout              NUMERIC         NOT NULL,
            profit              NUMERIC         NOT NULL,
            app_session_id      VARCHAR(128)    NOT NULL,
            settled_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_settlements_result CHECK (result IN ('WIN', 'LOSS')),
            CONSTRAINT ck_settlements_profit CHECK (profit = payout - cost_paid)
        );
    """)
    op.execute("CREATE INDEX idx_settlements_market ON settlements (market_id);")
    op.execute("CREATE INDEX idx_settlements_address ON settlements (address);")
    op.execute("COMMENT ON TABLE settlements IS 'Write-once settlement archive';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS settlements CASCADE;")
    op.execute("DROP TABLE IF EXISTS positions CASCADE;")
