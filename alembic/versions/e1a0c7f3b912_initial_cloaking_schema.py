"""initial cloaking schema

Revision ID: e1a0c7f3b912
Revises:
Create Date: 2026-10-19 09:12:40.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = 'e1a0c7f3b912'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- Domains ---
    op.create_table('domains',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('entry_domain', sa.String(length=255), nullable=False),
        sa.Column('offer_domain', sa.String(length=255), nullable=True),
        sa.Column('is_verified', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('entry_domain'),
    )
    op.create_index(op.f('ix_domains_user_id'), 'domains', ['user_id'], unique=False)

    # --- Campaigns ---
    op.create_table('campaigns',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('domain_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=100), nullable=False),
        sa.Column('destination_url', sa.Text(), nullable=False),
        sa.Column('safe_page_url', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('block_bots', sa.Boolean(), nullable=False),
        sa.Column('block_desktop', sa.Boolean(), nullable=False),
        sa.Column('blocked_countries', postgresql.ARRAY(sa.String(length=2)), server_default='{}', nullable=False),
        sa.Column('enable_origin_lock', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['domain_id'], ['domains.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_campaigns_user_id'), 'campaigns', ['user_id'], unique=False)
    # Two-tier slug uniqueness
    op.create_index('uq_campaigns_slug_domain', 'campaigns', ['slug', 'domain_id'], unique=True)
    op.create_index(
        'uq_campaigns_slug_global', 'campaigns', ['slug'], unique=True,
        postgresql_where=sa.text('domain_id IS NULL'),
    )

    # --- Access logs (append-only) ---
    op.create_table('access_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('campaign_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('referer', sa.Text(), nullable=True),
        sa.Column('country', sa.String(length=2), nullable=True),
        sa.Column('device_type', sa.String(length=20), nullable=True),
        sa.Column('is_bot', sa.Boolean(), nullable=True),
        sa.Column('bot_reason', sa.String(length=255), nullable=True),
        sa.Column('was_blocked', sa.Boolean(), nullable=True),
        sa.Column('block_reason', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['campaign_id'], ['campaigns.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_access_logs_campaign_created', 'access_logs', ['campaign_id', 'created_at'], unique=False)
    op.create_index('ix_access_logs_created', 'access_logs', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_table('access_logs')
    op.drop_table('campaigns')
    op.drop_table('domains')
