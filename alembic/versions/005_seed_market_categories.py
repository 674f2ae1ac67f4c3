"""005: seed market categories

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        INSERT INTO market_categories (id, name, outcomes, description) VALUES
            ('pitching', 'Pitch outcome', ARRAY['BALL', 'STRIKE'],
             'Next pitch is called a ball or a strike.'),
            ('at-bat', 'At-bat result', ARRAY['HIT', 'OUT'],
             'Current batter reaches base on a hit or is put out.');
    """)


def downgrade() -> None:
    op.execute("DELETE FROM market_categories WHERE id IN ('pitching', 'at-bat');")
