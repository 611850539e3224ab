"""Initial tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '20261019_0001'
down_revision = None
branch_labels = None
depends_on = None


def _uuid():
    return postgresql.UUID(as_uuid=True)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    # ------------------------------
    # users (area FK added once areas exists)
    # ------------------------------
    op.create_table(
        'users',
        sa.Column('id', _uuid(), primary_key=True, nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('photo_url', sa.String(500), nullable=True),
        sa.Column('settings', sa.JSON(), nullable=False),
        sa.Column('role', sa.String(50), nullable=False, server_default='Bacenta_Leader'),
        sa.Column('area_id', _uuid(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('token_version', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_area_id', 'users', ['area_id'])

    # ------------------------------
    # regions / areas
    # ------------------------------
    op.create_table(
        'regions',
        sa.Column('id', _uuid(), primary_key=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('governor_id', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_regions_governor_id', 'regions', ['governor_id'])

    op.create_table(
        'areas',
        sa.Column('id', _uuid(), primary_key=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('region_id', _uuid(), sa.ForeignKey('regions.id', ondelete='SET NULL'), nullable=True),
        sa.Column('overseer_id', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('leader_id', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_areas_number', 'areas', ['number'], unique=True)
    op.create_index('ix_areas_region_id', 'areas', ['region_id'])

    op.create_foreign_key(
        'fk_users_area_id', 'users', 'areas', ['area_id'], ['id'], ondelete='SET NULL'
    )

    # ------------------------------
    # ministries / members
    # ------------------------------
    op.create_table(
        'ministries',
        sa.Column('id', _uuid(), primary_key=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('leader_id', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'members',
        sa.Column('id', _uuid(), primary_key=True, nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('phone_primary', sa.String(50), nullable=False),
        sa.Column('phone_secondary', sa.String(50), nullable=True),
        sa.Column('gender', sa.String(1), nullable=False),
        sa.Column('profession', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('photo_url', sa.String(500), nullable=True),
        sa.Column('is_registered', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('state', sa.String(20), nullable=False, server_default='Sheep'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('last_attendance_date', sa.Date(), nullable=True),
        sa.Column('area_id', _uuid(), sa.ForeignKey('areas.id'), nullable=False),
        sa.Column('leader_id', _uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('ministry_id', _uuid(), sa.ForeignKey('ministries.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_members_area_id', 'members', ['area_id'])
    op.create_index('ix_members_leader_id', 'members', ['leader_id'])
    op.create_index('ix_members_state', 'members', ['state'])

    # ------------------------------
    # Sunday attendance / call logs
    # ------------------------------
    op.create_table(
        'attendances',
        sa.Column('id', _uuid(), primary_key=True, nullable=False),
        sa.Column('member_id', _uuid(), sa.ForeignKey('members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sunday_date', sa.Date(), nullable=False),
        sa.Column('present', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('marked_by_user_id', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('service_type', sa.String(50), nullable=False, server_default='Experience'),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('member_id', 'sunday_date', name='uq_attendance_member_sunday'),
    )
    op.create_index('ix_attendances_member_id', 'attendances', ['member_id'])
    op.create_index('ix_attendances_sunday_date', 'attendances', ['sunday_date'])

    op.create_table(
        'call_logs',
        sa.Column('id', _uuid(), primary_key=True, nullable=False),
        sa.Column('member_id', _uuid(), sa.ForeignKey('members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('caller_id', _uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('call_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('outcome', sa.String(30), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('next_followup_date', sa.Date(), nullable=True),
        sa.Column('followup_notes', sa.Text(), nullable=True),
        sa.Column('call_duration', sa.Integer(), nullable=True),
        sa.Column('contact_method', sa.String(20), nullable=False, server_default='Phone'),
        sa.Column('is_completed', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
    )
    op.create_index('ix_call_logs_member_id', 'call_logs', ['member_id'])
    op.create_index('ix_call_logs_caller_id', 'call_logs', ['caller_id'])

    # ------------------------------
    # Bacenta
    # ------------------------------
    op.create_table(
        'bacenta_meetings',
        sa.Column('id', _uuid(), primary_key=True, nullable=False),
        sa.Column('leader_id', _uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('meeting_date', sa.Date(), nullable=False),
        sa.Column('meeting_time', sa.Time(), nullable=True),
        sa.Column('meeting_type', sa.String(30), nullable=False, server_default='Weekly_Sharing'),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('host', sa.String(255), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('expected_participants', sa.Integer(), nullable=True),
        sa.Column('agenda', sa.JSON(), nullable=True),
        sa.Column('family_photo', sa.String(500), nullable=True),
        sa.Column('photo_url', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('meeting_duration', sa.Integer(), nullable=True),
        sa.Column('offering_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total_members_present', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('verified_by', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('verification_notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_bacenta_meetings_leader_id', 'bacenta_meetings', ['leader_id'])
    op.create_index('ix_bacenta_meetings_meeting_date', 'bacenta_meetings', ['meeting_date'])

    op.create_table(
        'bacenta_attendances',
        sa.Column('id', _uuid(), primary_key=True, nullable=False),
        sa.Column('bacenta_meeting_id', _uuid(), sa.ForeignKey('bacenta_meetings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('member_id', _uuid(), sa.ForeignKey('members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('present', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('arrival_time', sa.Time(), nullable=True),
        sa.Column('offering_contribution', sa.Numeric(12, 2), nullable=True),
        sa.Column('special_notes', sa.Text(), nullable=True),
        sa.Column('marked_by_user_id', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('bacenta_meeting_id', 'member_id', name='uq_bacenta_attendance_meeting_member'),
    )
    op.create_index('ix_bacenta_attendances_bacenta_meeting_id', 'bacenta_attendances', ['bacenta_meeting_id'])

    op.create_table(
        'bacenta_offerings',
        sa.Column('id', _uuid(), primary_key=True, nullable=False),
        sa.Column('bacenta_meeting_id', _uuid(), sa.ForeignKey('bacenta_meetings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('offering_type', sa.String(20), nullable=False, server_default='Offering'),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='XAF'),
        sa.Column('collected_by', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('verified_by', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('verification_notes', sa.Text(), nullable=True),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
    )
    op.create_index('ix_bacenta_offerings_bacenta_meeting_id', 'bacenta_offerings', ['bacenta_meeting_id'])

    # ------------------------------
    # Ministry attendance
    # ------------------------------
    op.create_table(
        'ministry_attendances',
        sa.Column('id', _uuid(), primary_key=True, nullable=False),
        sa.Column('ministry_id', _uuid(), sa.ForeignKey('ministries.id', ondelete='CASCADE'), nullable=False),
        sa.Column('member_id', _uuid(), sa.ForeignKey('members.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('present', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('marked_by_user_id', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('ministry_id', 'member_id', 'date', name='uq_ministry_attendance'),
    )
    op.create_index('ix_ministry_attendances_ministry_id', 'ministry_attendances', ['ministry_id'])

    op.create_table(
        'ministry_headcounts',
        sa.Column('id', _uuid(), primary_key=True, nullable=False),
        sa.Column('ministry_id', _uuid(), sa.ForeignKey('ministries.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('headcount', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('marked_by_user_id', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('ministry_id', 'date', name='uq_ministry_headcount'),
    )

    # ------------------------------
    # Notifications / sync logs
    # ------------------------------
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(20), nullable=False, server_default='info'),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('icon', sa.String(50), nullable=False, server_default='bell'),
        sa.Column('color', sa.String(20), nullable=False, server_default='#6B7280'),
        *_timestamps(),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    op.create_table(
        'sync_logs',
        sa.Column('id', _uuid(), primary_key=True, nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', _uuid(), nullable=True),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('sync_direction', sa.String(20), nullable=False),
        sa.Column('sync_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('data_snapshot', sa.JSON(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('user_id', _uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_sync_logs_sync_status', 'sync_logs', ['sync_status'])


def downgrade() -> None:
    op.drop_table('sync_logs')
    op.drop_table('notifications')
    op.drop_table('ministry_headcounts')
    op.drop_table('ministry_attendances')
    op.drop_table('bacenta_offerings')
    op.drop_table('bacenta_attendances')
    op.drop_table('bacenta_meetings')
    op.drop_table('call_logs')
    op.drop_table('attendances')
    op.drop_table('members')
    op.drop_table('ministries')
    op.drop_constraint('fk_users_area_id', 'users', type_='foreignkey')
    op.drop_table('areas')
    op.drop_table('regions')
    op.drop_table('users')
