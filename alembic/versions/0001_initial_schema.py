"""Initial schema: users, refresh tokens, venues, events, bookings, audit logs

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_role = sa.Enum('USER', 'ORGANIZER', 'ADMIN', name='user_role')
user_status = sa.Enum('ACTIVE', 'SUSPENDED', 'DELETED', name='user_status')
event_category = sa.Enum(
    'MUSIC', 'SPORTS', 'CONFERENCE', 'WORKSHOP', 'FESTIVAL', 'THEATER', 'EXHIBITION', 'OTHER',
    name='event_category',
)
event_status = sa.Enum('DRAFT', 'PUBLISHED', 'CANCELLED', 'COMPLETED', name='event_status')
booking_status = sa.Enum('PENDING', 'CONFIRMED', 'CANCELLED', 'REFUNDED', name='booking_status')


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('status', user_status, nullable=False),
        sa.Column('email_verified', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    # Emails stay unique among accounts that have not been soft-deleted
    op.create_index(
        'uq_users_email_not_deleted', 'users', ['email'], unique=True,
        postgresql_where=sa.text("status <> 'DELETED'"),
        sqlite_where=sa.text("status <> 'DELETED'"),
    )

    op.create_table('refresh_tokens',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('replaced_by_id', sa.Uuid(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_refresh_tokens_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_refresh_tokens'),
        sa.UniqueConstraint('token_hash', name='uq_refresh_tokens_token_hash'),
    )
    op.create_index('ix_refresh_tokens_user_id', 'refresh_tokens', ['user_id'])
    op.create_index('idx_refresh_tokens_user_revoked', 'refresh_tokens', ['user_id', 'revoked_at'])

    op.create_table('venues',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('slug', sa.String(length=200), nullable=False),
        sa.Column('address', sa.String(length=300), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('country', sa.String(length=100), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_venues'),
        sa.UniqueConstraint('slug', name='uq_venues_slug'),
    )

    op.create_table('events',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('slug', sa.String(length=200), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', event_category, nullable=False),
        sa.Column('status', event_status, nullable=False),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('booked_count', sa.Integer(), nullable=False),
        sa.Column('organizer_id', sa.Uuid(), nullable=False),
        sa.Column('venue_id', sa.Uuid(), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('video_url', sa.String(length=500), nullable=True),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('capacity > 0', name='ck_events_capacity_positive'),
        sa.CheckConstraint(
            'booked_count >= 0 AND booked_count <= capacity', name='ck_events_booked_count_within_capacity'
        ),
        sa.CheckConstraint('price >= 0', name='ck_events_price_not_negative'),
        sa.CheckConstraint('start_date < end_date', name='ck_events_dates_ordered'),
        sa.ForeignKeyConstraint(['organizer_id'], ['users.id'], name='fk_events_organizer_id_users'),
        sa.ForeignKeyConstraint(['venue_id'], ['venues.id'], name='fk_events_venue_id_venues'),
        sa.PrimaryKeyConstraint('id', name='pk_events'),
        sa.UniqueConstraint('slug', name='uq_events_slug'),
    )
    op.create_index('ix_events_status', 'events', ['status'])
    op.create_index('ix_events_start_date', 'events', ['start_date'])
    op.create_index('ix_events_organizer_id', 'events', ['organizer_id'])
    op.create_index('ix_events_venue_id', 'events', ['venue_id'])
    op.create_index('idx_events_status_start_date', 'events', ['status', 'start_date'])

    op.create_table('bookings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('seats', sa.Integer(), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('status', booking_status, nullable=False),
        sa.Column('payment_id', sa.String(length=255), nullable=True),
        sa.Column('booking_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('seats >= 1', name='ck_bookings_seats_positive'),
        sa.CheckConstraint('total_price >= 0', name='ck_bookings_total_price_not_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_bookings_user_id_users'),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], name='fk_bookings_event_id_events'),
        sa.PrimaryKeyConstraint('id', name='pk_bookings'),
    )
    op.create_index('ix_bookings_user_id', 'bookings', ['user_id'])
    op.create_index('ix_bookings_event_id', 'bookings', ['event_id'])
    op.create_index('ix_bookings_booking_date', 'bookings', ['booking_date'])
    op.create_index('idx_bookings_event_status', 'bookings', ['event_id', 'status'])

    op.create_table('audit_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('resource_type', sa.String(length=50), nullable=True),
        sa.Column('resource_id', sa.String(length=64), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_audit_logs_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_audit_logs'),
    )
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('bookings')
    op.drop_table('events')
    op.drop_table('venues')
    op.drop_table('refresh_tokens')
    op.drop_table('users')

    bind = op.get_bind()
    for enum in (booking_status, event_status, event_category, user_status, user_role):
        enum.drop(bind, checkfirst=True)
