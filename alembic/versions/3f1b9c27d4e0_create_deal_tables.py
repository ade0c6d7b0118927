"""Create business_ideas, webhook_logs, user_profiles

Revision ID: 3f1b9c27d4e0
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1b9c27d4e0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'business_ideas',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('business_name', sa.Text(), nullable=False),
        sa.Column('contact_name', sa.Text(), nullable=True),
        sa.Column('contact_email', sa.Text(), nullable=True),
        sa.Column('industry', sa.Text(), nullable=True),
        sa.Column('funding_amount_requested', sa.Float(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('website_url', sa.Text(), nullable=True),
        sa.Column('stage', sa.Text(), nullable=False, server_default='submitted'),
        sa.Column('source', sa.Text(), nullable=False, server_default='manual'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'webhook_logs',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('business_idea_id', sa.Text(),
                  sa.ForeignKey('business_ideas.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', sa.Text(), nullable=False),
        sa.Column('triggered_by', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False, server_default='success'),
        sa.Column('triggered_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('details', sa.JSON(), nullable=True),
    )
    op.create_index('ix_webhook_logs_business_idea_id', 'webhook_logs', ['business_idea_id'])
    op.create_index('ix_webhook_logs_triggered_at', 'webhook_logs', ['triggered_at'])

    op.create_table(
        'user_profiles',
        sa.Column('id', sa.Text(), primary_key=True),
        sa.Column('username', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('full_name', sa.Text(), nullable=True),
        sa.Column('role', sa.Text(), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_user_profiles_username', 'user_profiles', ['username'])


def downgrade() -> None:
    op.drop_index('ix_user_profiles_username', 'user_profiles')
    op.drop_table('user_profiles')

    op.drop_index('ix_webhook_logs_triggered_at', 'webhook_logs')
    op.drop_index('ix_webhook_logs_business_idea_id', 'webhook_logs')
    op.drop_table('webhook_logs')

    op.drop_table('business_ideas')
