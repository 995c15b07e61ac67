"""Create videos table

Revision ID: 8e4d2b6c5a10
Revises: 3c1f0a7b9d21
Create Date: 2026-09-02 10:21:05.904117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8e4d2b6c5a10'
down_revision: Union[str, Sequence[str], None] = '3c1f0a7b9d21'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'videos',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('project_id', sa.String(), nullable=False),
        sa.Column('storage_path', sa.String(length=500), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('transcript_text', sa.JSON(), nullable=True),
        sa.Column('transcript_data_full', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_videos_project_id', 'videos', ['project_id'])
    op.create_index('ix_videos_storage_path', 'videos', ['storage_path'])
    op.create_index('ix_videos_status', 'videos', ['status'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_videos_status', 'videos')
    op.drop_index('ix_videos_storage_path', 'videos')
    op.drop_index('ix_videos_project_id', 'videos')
    op.drop_table('videos')
