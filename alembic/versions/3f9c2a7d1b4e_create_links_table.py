"""create links table

Revision ID: 3f9c2a7d1b4e
Revises: 
Create Date: 2026-10-18 09:12:40.511203

"""
from typing import Sequence, Union

from alembic import op  # type: ignore
import sqlalchemy as sa  # type: ignore


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d1b4e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'links',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('submitted_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=1), nullable=False),
        sa.Column('hash', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    # Dedup relies on this index, not on a lookup before insert
    op.create_index('ix_links_hash', 'links', ['hash'], unique=True)
    op.create_index('ix_links_status', 'links', ['status'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_links_status', table_name='links')
    op.drop_index('ix_links_hash', table_name='links')
    op.drop_table('links')
