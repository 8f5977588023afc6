"""Create initial sport events schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    # Enum columns persist member names
    user_role = sa.Enum('ADMIN', 'USER', name='userrole')
    membership_level = sa.Enum('BRONZE', 'SILVER', 'GOLD', 'PLATINUM', name='membershiplevel')
    event_type = sa.Enum('INDOOR', 'OUTDOOR', 'ONLINE', name='eventtype')
    price_type = sa.Enum('FREE', 'MANUAL', 'STABLE', name='pricetype')
    reservation_state = sa.Enum('JOINED', 'WAITLISTED', 'PAID', 'CHECKED_IN', name='reservationstate')

    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table('refresh_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_id', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        *timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token_id'),
    )
    op.create_index(op.f('ix_refresh_tokens_id'), 'refresh_tokens', ['id'], unique=False)
    op.create_index('idx_refresh_token_user', 'refresh_tokens', ['user_id'], unique=False)

    op.create_table('sports',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('group_name', sa.String(length=100), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_index(op.f('ix_sports_id'), 'sports', ['id'], unique=False)

    op.create_table('sport_goals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_index(op.f('ix_sport_goals_id'), 'sport_goals', ['id'], unique=False)

    op.create_table('event_styles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('color', sa.String(length=7), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_index(op.f('ix_event_styles_id'), 'event_styles', ['id'], unique=False)

    op.create_table('facilities',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('is_private', sa.Boolean(), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_facilities_id'), 'facilities', ['id'], unique=False)

    op.create_table('salons',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('facility_id', sa.Integer(), nullable=False),
        sa.Column('sport_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('price_info', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *timestamps(),
        sa.ForeignKeyConstraint(['facility_id'], ['facilities.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sport_id'], ['sports.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_salons_id'), 'salons', ['id'], unique=False)
    op.create_index(op.f('ix_salons_facility_id'), 'salons', ['facility_id'], unique=False)

    op.create_table('participant_profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('main_sport_id', sa.Integer(), nullable=False),
        sa.Column('skill_level', sa.Integer(), nullable=False),
        sa.Column('sport_goal_id', sa.Integer(), nullable=False),
        sa.Column('membership_level', membership_level, nullable=True),
        *timestamps(),
        sa.CheckConstraint('skill_level BETWEEN 1 AND 10', name='ck_participant_skill_level'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['main_sport_id'], ['sports.id']),
        sa.ForeignKeyConstraint(['sport_goal_id'], ['sport_goals.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index(op.f('ix_participant_profiles_id'), 'participant_profiles', ['id'], unique=False)

    op.create_table('coach_profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('membership_level', membership_level, nullable=True),
        *timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index(op.f('ix_coach_profiles_id'), 'coach_profiles', ['id'], unique=False)

    op.create_table('events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('backup_coach_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sport_id', sa.Integer(), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('event_type', event_type, nullable=False),
        sa.Column('event_style_id', sa.Integer(), nullable=False),
        sa.Column('style_name', sa.String(length=100), nullable=False),
        sa.Column('style_color', sa.String(length=7), nullable=False),
        sa.Column('is_private', sa.Boolean(), nullable=False),
        sa.Column('secret_id', sa.String(length=11), nullable=True),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('price_type', price_type, nullable=False),
        sa.Column('participation_fee', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('is_recurring', sa.Boolean(), nullable=False),
        sa.Column('equipment', sa.String(length=500), nullable=True),
        sa.Column('facility_id', sa.Integer(), nullable=True),
        sa.Column('salon_id', sa.Integer(), nullable=True),
        sa.Column('location', sa.String(length=500), nullable=True),
        sa.Column('photo_url', sa.String(length=500), nullable=True),
        *timestamps(),
        sa.CheckConstraint('capacity >= 1', name='ck_event_capacity'),
        sa.CheckConstraint('level BETWEEN 1 AND 10', name='ck_event_level'),
        sa.CheckConstraint('end_time > start_time', name='ck_event_time_order'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id']),
        sa.ForeignKeyConstraint(['backup_coach_id'], ['users.id']),
        sa.ForeignKeyConstraint(['sport_id'], ['sports.id']),
        sa.ForeignKeyConstraint(['event_style_id'], ['event_styles.id']),
        sa.ForeignKeyConstraint(['facility_id'], ['facilities.id']),
        sa.ForeignKeyConstraint(['salon_id'], ['salons.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('secret_id'),
    )
    op.create_index(op.f('ix_events_id'), 'events', ['id'], unique=False)
    op.create_index(op.f('ix_events_owner_id'), 'events', ['owner_id'], unique=False)
    op.create_index(op.f('ix_events_start_time'), 'events', ['start_time'], unique=False)
    op.create_index('idx_event_private_start', 'events', ['is_private', 'start_time'], unique=False)

    op.create_table('event_invites',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('invitee_id', sa.Integer(), nullable=False),
        sa.Column('inviter_id', sa.Integer(), nullable=False),
        *timestamps(),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['invitee_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['inviter_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id', 'invitee_id', name='uq_event_invite'),
    )
    op.create_index(op.f('ix_event_invites_id'), 'event_invites', ['id'], unique=False)

    op.create_table('reservations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('participant_id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('state', reservation_state, nullable=False),
        sa.Column('is_approved', sa.Boolean(), nullable=False),
        sa.Column('check_in_deadline', sa.DateTime(), nullable=False),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('checked_in_at', sa.DateTime(), nullable=True),
        sa.Column('promoted_at', sa.DateTime(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        *timestamps(),
        sa.ForeignKeyConstraint(['participant_id'], ['participant_profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('participant_id', 'event_id', name='uq_reservation_participant_event'),
    )
    op.create_index(op.f('ix_reservations_id'), 'reservations', ['id'], unique=False)
    op.create_index(op.f('ix_reservations_state'), 'reservations', ['state'], unique=False)
    op.create_index('idx_reservation_event_state', 'reservations', ['event_id', 'state'], unique=False)

    op.create_table('reservation_audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('reservation_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('from_state', sa.String(length=20), nullable=True),
        sa.Column('to_state', sa.String(length=20), nullable=True),
        sa.Column('timestamp', sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['reservation_id'], ['reservations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_reservation_audit_logs_id'), 'reservation_audit_logs', ['id'], unique=False)
    op.create_index('idx_reservation_audit_reservation_id', 'reservation_audit_logs', ['reservation_id'], unique=False)
    op.create_index('idx_reservation_audit_action', 'reservation_audit_logs', ['action'], unique=False)


def downgrade():
    op.drop_table('reservation_audit_logs')
    op.drop_table('reservations')
    op.drop_table('event_invites')
    op.drop_table('events')
    op.drop_table('coach_profiles')
    op.drop_table('participant_profiles')
    op.drop_table('salons')
    op.drop_table('facilities')
    op.drop_table('event_styles')
    op.drop_table('sport_goals')
    op.drop_table('sports')
    op.drop_table('refresh_tokens')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_name in ('reservationstate', 'pricetype', 'eventtype', 'membershiplevel', 'userrole'):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
