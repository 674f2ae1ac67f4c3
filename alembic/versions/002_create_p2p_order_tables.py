"""002: create p2p_orders and p2p_fills tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE p2p_orders (
            id                  VARCHAR(64)     PRIMARY KEY,
            market_id           VARCHAR(200)    NOT NULL REFERENCES markets (id),
            game_id             VARCHAR(64)     NOT NULL,
            user_address        VARCHAR(64)     NOT NULL,
            outcome             VARCHAR(64)     NOT NULL,
            mcps                NUMERIC         NOT NULL,
            amount              NUMERIC         NOT NULL,
            filled_amount       NUMERIC         NOT NULL DEFAULT 0,
            unfilled_amount     NUMERIC         NOT NULL,
            max_shares          NUMERIC         NOT NULL,
            filled_shares       NUMERIC         NOT NULL DEFAULT 0,
            unfilled_shares     NUMERIC         NOT NULL,
            app_session_id      VARCHAR(128)    NOT NULL,
            app_session_version INT             NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'OPEN',
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_p2p_orders_mcps             CHECK (mcps > 0 AND mcps < 1),
            CONSTRAINT ck_p2p_orders_amount           CHECK (amount > 0),
            CONSTRAINT ck_p2p_orders_unfilled_gte_0   CHECK (unfilled_shares >= 0 AND unfilled_amount >= 0),
            CONSTRAINT ck_p2p_orders_share_consistency
                CHECK (filled_shares + unfilled_shares = max_shares),
            CONSTRAINT ck_p2p_orders_amount_consistency
                CHECK (filled_amount + unfilled_amount = amount),
            CONSTRAINT ck_p2p_orders_status CHECK (
                status IN ('OPEN', 'PARTIALLY_FILLED', 'FILLED', 'CANCELLED', 'EXPIRED', 'SETTLED')
            )
        );
    """)
    op.execute(
        "CREATE INDEX idx_p2p_orders_market_outcome_status"
        " ON p2p_orders (market_id, outcome, status);"
    )
    op.execute("""
        CREATE INDEX idx_p2p_orders_book
        ON p2p_orders (market_id, outcome, mcps DESC, created_at ASC)
        WHERE status IN ('OPEN', 'PARTIALLY_FILLED');
    """)
    op.execute("CREATE INDEX idx_p2p_orders_user ON p2p_orders (user_address, created_at DESC);")
    op.execute("COMMENT ON TABLE p2p_orders IS 'Peer-to-peer binary orders; never deleted';")

    op.execute("""
        CREATE TABLE p2p_fills (
            id                      VARCHAR(64)     PRIMARY KEY,
            order_id                VARCHAR(64)     NOT NULL REFERENCES p2p_orders (id),
            counterparty_order_id   VARCHAR(64)     NOT NULL REFERENCES p2p_orders (id),
            counterparty_address    VARCHAR(64)     NOT NULL,
            shares                  NUMERIC         NOT NULL,
            effective_price         NUMERIC         NOT NULL,
            cost                    NUMERIC         NOT NULL,
            filled_at               TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_p2p_fills_shares_gt_0 CHECK (shares > 0),
            CONSTRAINT ck_p2p_fills_price CHECK (effective_price > 0 AND effective_price < 1)
        );
    """)
    op.execute("CREATE INDEX idx_p2p_fills_order ON p2p_fills (order_id);")
    op.execute("COMMENT ON TABLE p2p_fills IS 'Two rows per match, one per side; immutable';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS p2p_fills CASCADE;")
    op.execute("DROP TABLE IF EXISTS p2p_orders CASCADE;")
