"""initial_schema

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1b2c3d4e5f6'
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum('STUDENT', 'FACULTY', 'ORGANIZER', 'ADMIN', name='user_role')


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('roll_no', sa.String(length=50), nullable=True),
        sa.Column('division', sa.String(length=10), nullable=True),
        sa.Column('department', sa.String(length=100), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('idx_users_department', 'users', ['department'])
    op.create_index('idx_users_division', 'users', ['division'])

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('department', sa.String(length=100), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('organizer_id', sa.Integer(), nullable=False),
        sa.Column('qr_code', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['organizer_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_events_department', 'events', ['department'])
    op.create_index('idx_events_date', 'events', ['date'])

    # One attendance row per (event, user); concurrent check-ins race on this constraint
    op.create_table(
        'event_attendance',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_event_attendance_event_user'),
    )
    op.create_index('idx_attendance_event_id', 'event_attendance', ['event_id'])
    op.create_index('idx_attendance_user_id', 'event_attendance', ['user_id'])


def downgrade():
    op.drop_index('idx_attendance_user_id', table_name='event_attendance')
    op.drop_index('idx_attendance_event_id', table_name='event_attendance')
    op.drop_table('event_attendance')

    op.drop_index('idx_events_date', table_name='events')
    op.drop_index('idx_events_department', table_name='events')
    op.drop_table('events')

    op.drop_index('idx_users_division', table_name='users')
    op.drop_index('idx_users_department', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    user_role.drop(op.get_bind(), checkfirst=True)
