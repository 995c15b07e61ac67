"""Add transcription_request_id to videos table

Revision ID: b7a9e3f41c58
Revises: 8e4d2b6c5a10
Create Date: 2026-09-09 16:48:52.377405

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'b7a9e3f41c58'
down_revision: Union[str, Sequence[str], None] = '8e4d2b6c5a10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column(
        'videos', sa.Column('transcription_request_id', sa.String(), nullable=True)
    )
    op.create_index(
        'ix_videos_transcription_request_id', 'videos', ['transcription_request_id']
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_videos_transcription_request_id', 'videos')
    op.drop_column('videos', 'transcription_request_id')
