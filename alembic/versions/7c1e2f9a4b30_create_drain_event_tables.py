"""create_drain_event_tables

Revision ID: 7c1e2f9a4b30
Revises:
Create Date: 2026-10-16 23:40:12.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7c1e2f9a4b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('speed_insights_events',
        sa.Column('event_id', sa.String(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('metric_type', sa.String(), nullable=False),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('project_id', sa.String(), nullable=True),
        sa.Column('owner_id', sa.String(), nullable=True),
        sa.Column('device_id', sa.String(), nullable=True),
        sa.Column('origin', sa.String(), nullable=True),
        sa.Column('path', sa.String(), nullable=True),
        sa.Column('route', sa.String(), nullable=True),
        sa.Column('country', sa.String(), nullable=True),
        sa.Column('region', sa.String(), nullable=True),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('os_name', sa.String(), nullable=True),
        sa.Column('os_version', sa.String(), nullable=True),
        sa.Column('client_name', sa.String(), nullable=True),
        sa.Column('client_type', sa.String(), nullable=True),
        sa.Column('client_version', sa.String(), nullable=True),
        sa.Column('device_type', sa.String(), nullable=True),
        sa.Column('device_brand', sa.String(), nullable=True),
        sa.Column('connection_speed', sa.String(), nullable=True),
        sa.Column('browser_engine', sa.String(), nullable=True),
        sa.Column('browser_engine_version', sa.String(), nullable=True),
        sa.Column('sdk_name', sa.String(), nullable=True),
        sa.Column('sdk_version', sa.String(), nullable=True),
        sa.Column('vercel_environment', sa.String(), nullable=True),
        sa.Column('vercel_url', sa.String(), nullable=True),
        sa.Column('deployment_id', sa.String(), nullable=True),
        sa.Column('raw', sa.JSON(), nullable=False),
        sa.Column('received_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('event_id')
    )
    op.create_index('idx_speed_insights_timestamp', 'speed_insights_events', ['timestamp'])
    op.create_index('idx_speed_insights_metric_type', 'speed_insights_events', ['metric_type'])

    op.create_table('trace_events',
        sa.Column('event_id', sa.String(), nullable=False),
        sa.Column('content_type', sa.String(), nullable=False),
        sa.Column('body_json', sa.JSON(), nullable=True),
        sa.Column('body_base64', sa.Text(), nullable=True),
        sa.Column('received_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('event_id')
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('trace_events')
    op.drop_index('idx_speed_insights_metric_type', 'speed_insights_events')
    op.drop_index('idx_speed_insights_timestamp', 'speed_insights_events')
    op.drop_table('speed_insights_events')
