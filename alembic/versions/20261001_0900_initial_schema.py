"""Initial schema: profiles, restaurants, reviews, audit logs

Revision ID: 20261001_0900_initial_schema
Revises:
Create Date: 2026-10-01 09:00:00.000000

Creates tables for:
- profiles: Accounts with their role
- restaurants: Listings
- reviews: User reviews of restaurants
- audit_logs: Append-only security and data-change trail
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '20261001_0900_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # ===========================================
    # PROFILES TABLE
    # ===========================================
    op.create_table(
        'profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=True),
        sa.Column('avatar_url', sa.String(500), nullable=True),
        sa.Column('role', sa.String(20), server_default='user', nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_profiles'),
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)

    # ===========================================
    # RESTAURANTS TABLE
    # ===========================================
    op.create_table(
        'restaurants',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('name_ar', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('description_ar', sa.Text(), nullable=True),
        sa.Column('emirate', sa.String(50), nullable=True),
        sa.Column('district', sa.String(100), nullable=True),
        sa.Column('price_tier', sa.Integer(), nullable=True, comment='1 (budget) to 4 (fine dining)'),
        sa.Column('rating', sa.Numeric(2, 1), nullable=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_restaurants'),
        sa.ForeignKeyConstraint(
            ['user_id'], ['profiles.id'],
            name='fk_restaurants_user_id_profiles', ondelete='SET NULL',
        ),
    )
    op.create_index('ix_restaurants_emirate', 'restaurants', ['emirate'])
    op.create_index('ix_restaurants_user_id', 'restaurants', ['user_id'])

    # ===========================================
    # REVIEWS TABLE
    # ===========================================
    op.create_table(
        'reviews',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('restaurant_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(200), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_reviews'),
        sa.ForeignKeyConstraint(
            ['restaurant_id'], ['restaurants.id'],
            name='fk_reviews_restaurant_id_restaurants', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['user_id'], ['profiles.id'],
            name='fk_reviews_user_id_profiles', ondelete='CASCADE',
        ),
    )
    op.create_index('ix_reviews_restaurant_id', 'reviews', ['restaurant_id'])
    op.create_index('ix_reviews_user_id', 'reviews', ['user_id'])

    # ===========================================
    # AUDIT LOGS TABLE (append-only)
    # ===========================================
    op.create_table(
        'audit_logs',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False,
                  comment='When the event happened (not when it was written)'),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('severity', sa.String(20), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('target_id', sa.String(100), nullable=True),
        sa.Column('target_type', sa.String(50), nullable=True,
                  comment='Type of the affected resource (reviews, user, ...)'),
        sa.Column('ip_address', postgresql.INET(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('metadata', sa.Text(), nullable=True),
        sa.Column('success', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_audit_logs'),
        sa.ForeignKeyConstraint(
            ['user_id'], ['profiles.id'],
            name='fk_audit_logs_user_id_profiles', ondelete='SET NULL',
        ),
        sa.CheckConstraint(
            "severity IN ('info', 'warning', 'error', 'critical')",
            name='ck_audit_logs_severity_valid',
        ),
    )
    op.create_index('ix_audit_logs_timestamp', 'audit_logs', ['timestamp'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_severity', 'audit_logs', ['severity'])
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_target', 'audit_logs', ['target_type', 'target_id'])


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('reviews')
    op.drop_table('restaurants')
    op.drop_table('profiles')
