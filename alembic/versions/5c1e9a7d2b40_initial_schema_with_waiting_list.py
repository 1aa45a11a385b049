"""Initial schema with attendance records and waiting list

Revision ID: 5c1e9a7d2b40
Revises:
Create Date: 2025-12-04 10:21:07.412318

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '5c1e9a7d2b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    rsvp_status_enum = postgresql.ENUM('attending', 'maybe', 'not_attending', name='rsvpstatusenum')
    rsvp_status_enum.create(op.get_bind())

    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'events',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('max_attendees', sa.Integer, nullable=False),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('idx_event_date', 'events', ['starts_at'])
    op.create_index('idx_event_organizer', 'events', ['created_by'])
    op.create_index('idx_event_created_at', 'events', ['created_at'])

    op.create_table(
        'rsvps',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.Enum('attending', 'maybe', 'not_attending', name='rsvpstatusenum', create_type=False), nullable=False, server_default='attending'),
        sa.Column('guest_count', sa.Integer, nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('idx_rsvp_user', 'rsvps', ['user_id'])
    op.create_index('idx_rsvp_event_status', 'rsvps', ['event_id', 'status'])
    op.create_unique_constraint('uq_user_event_rsvp', 'rsvps', ['user_id', 'event_id'])

    # Queue positions are dense per event; uniqueness is enforced here as well
    op.create_table(
        'waiting_list_entries',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('priority', sa.Integer, nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('notified', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.UniqueConstraint('user_id', 'event_id', name='uq_waitlist_user_event'),
        sa.UniqueConstraint('event_id', 'priority', name='uq_waitlist_event_priority'),
        sa.CheckConstraint('priority <> 0', name='ck_waitlist_priority_nonzero'),
    )
    op.create_index('idx_waitlist_event_priority', 'waiting_list_entries', ['event_id', 'priority'])

    op.create_table(
        'notifications',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=True),
        sa.Column('kind', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text, nullable=True),
        sa.Column('is_read', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('idx_notification_user_unread', 'notifications', ['user_id', 'is_read'])


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('waiting_list_entries')
    op.drop_table('rsvps')
    op.drop_table('events')
    op.drop_table('users')

    sa.Enum(name='rsvpstatusenum').drop(op.get_bind())
