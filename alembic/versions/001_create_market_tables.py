"""001: create market_categories and markets tables

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE market_categories (
            id              VARCHAR(64)     PRIMARY KEY,
            name            VARCHAR(200)    NOT NULL,
            outcomes        TEXT[]          NOT NULL,
            description     TEXT,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_market_categories_outcomes CHECK (cardinality(outcomes) >= 2)
        );
    """)
    op.execute("COMMENT ON TABLE market_categories IS 'Outcome catalog, read-only for the exchange core';")

    # category_id has no FK: markets may be created for categories the catalog
    # does not know yet (they default to two outcomes)
    op.execute("""
        CREATE TABLE markets (
            id              VARCHAR(200)    PRIMARY KEY,
            game_id         VARCHAR(64)     NOT NULL,
            category_id     VARCHAR(64)     NOT NULL,
            sequence_num    INT             NOT NULL,
            status          VARCHAR(20)     NOT NULL DEFAULT 'PENDING',
            quantities      NUMERIC[]       NOT NULL,
            b               NUMERIC         NOT NULL DEFAULT 100,
            volume          NUMERIC         NOT NULL DEFAULT 0,
            outcome         VARCHAR(64),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            opened_at       TIMESTAMPTZ,
            closed_at       TIMESTAMPTZ,
            resolved_at     TIMESTAMPTZ,
            CONSTRAINT uq_markets_game_category_seq UNIQUE (game_id, category_id, sequence_num),
            CONSTRAINT ck_markets_sequence_gte_1    CHECK (sequence_num >= 1),
            CONSTRAINT ck_markets_b_gt_0            CHECK (b > 0),
            CONSTRAINT ck_markets_volume_gte_0      CHECK (volume >= 0),
            CONSTRAINT ck_markets_status CHECK (
                status IN ('PENDING', 'OPEN', 'CLOSED', 'RESOLVED')
            ),
            CONSTRAINT ck_markets_outcome_resolved CHECK (
                (status = 'RESOLVED') = (outcome IS NOT NULL)
            )
        );
    """)
    op.execute(
        "CREATE INDEX idx_markets_game_category_status ON markets (game_id, category_id, status);"
    )
    op.execute("CREATE INDEX idx_markets_game_status ON markets (game_id, status);")
    op.execute("COMMENT ON TABLE markets IS 'Market lifecycle PENDING -> OPEN -> CLOSED -> RESOLVED';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
    op.execute("DROP TABLE IF EXISTS market_categories CASCADE;")
