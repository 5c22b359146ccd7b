"""Create lighthouse_scores table

Revision ID: 001
Revises:
Create Date: 2025-06-02 10:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
  op.create_table(
    'lighthouse_scores',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    sa.Column('url', sa.String(length=2048), nullable=True),
    sa.Column('device_strategy', sa.String(length=16), nullable=True),
    sa.Column('first_content_paint', sa.Float(), nullable=False),
    sa.Column('speed_index', sa.Float(), nullable=False),
    sa.Column('largest_content_paint', sa.Float(), nullable=False),
    sa.Column('total_blocking_time', sa.Float(), nullable=False),
    sa.Column('time_to_interactive', sa.Float(), nullable=False),
    sa.PrimaryKeyConstraint('id'),
  )

  op.create_index('ix_lighthouse_scores_created_at', 'lighthouse_scores', ['created_at'])
  op.create_index('ix_lighthouse_scores_url', 'lighthouse_scores', ['url'])


def downgrade():
  op.drop_index('ix_lighthouse_scores_url', table_name='lighthouse_scores')
  op.drop_index('ix_lighthouse_scores_created_at', table_name='lighthouse_scores')
  op.drop_table('lighthouse_scores')
