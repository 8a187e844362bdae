"""walking tracker schema

Revision ID: 3f1c9a7b2d40
Revises:
Create Date: 2026-10-19 09:12:44.318205

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7b2d40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# JSONB on PostgreSQL, plain JSON elsewhere
JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False),
        sa.Column('password', sa.String(length=200), nullable=False),
        sa.Column('phone_number', sa.String(length=20), nullable=True),
        sa.Column('dob', sa.Date(), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)

    op.create_table(
        'user_profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('fitness_goals', JSONType, nullable=True),
        sa.Column('focus_areas', JSONType, nullable=True),
        sa.Column('body_parts_to_tone_up', JSONType, nullable=True),
        sa.Column('fitness_level', sa.String(length=20), nullable=True),
        sa.Column('daily_walking_time', sa.String(length=30), nullable=True),
        sa.Column('activity_level', sa.String(length=30), nullable=True),
        sa.Column('step_goal', sa.Integer(), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('current_weight', sa.Float(), nullable=True),
        sa.Column('target_weight', sa.Float(), nullable=True),
        sa.Column('height', sa.Float(), nullable=True),
        sa.Column('bmi', sa.Float(), nullable=True),
        sa.Column('bmi_category', sa.String(length=20), nullable=True),
        sa.Column('timezone', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('last_physical_update', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index(op.f('ix_user_profiles_id'), 'user_profiles', ['id'], unique=False)

    op.create_table(
        'workouts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('category', sa.String(length=30), nullable=False),
        sa.Column('intensity', sa.String(length=20), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('estimated_calories', sa.Integer(), nullable=False),
        sa.Column('target_distance', sa.Float(), nullable=True),
        sa.Column('includes_warmup', sa.Boolean(), nullable=True),
        sa.Column('includes_cooldown', sa.Boolean(), nullable=True),
        sa.Column('image', sa.String(length=255), nullable=True),
        sa.Column('recommended_for', JSONType, nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_workouts_id'), 'workouts', ['id'], unique=False)
    op.create_index(op.f('ix_workouts_name'), 'workouts', ['name'], unique=False)
    op.create_index(op.f('ix_workouts_type'), 'workouts', ['type'], unique=False)
    op.create_index(op.f('ix_workouts_category'), 'workouts', ['category'], unique=False)
    op.create_index(op.f('ix_workouts_intensity'), 'workouts', ['intensity'], unique=False)

    op.create_table(
        'personalized_workout_plans',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('plan_name', sa.String(length=150), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('duration_weeks', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('fitness_goals_focused', JSONType, nullable=True),
        sa.Column('progressive_overload', sa.Boolean(), nullable=True),
        sa.Column('starting_steps', sa.Integer(), nullable=False),
        sa.Column('weekly_increment', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        # History rows keep a retired plan's id, so SQLite must not hand it out again
        sqlite_autoincrement=True,
    )
    op.create_index(op.f('ix_personalized_workout_plans_id'), 'personalized_workout_plans', ['id'], unique=False)
    op.create_index(op.f('ix_personalized_workout_plans_user_id'), 'personalized_workout_plans', ['user_id'], unique=False)
    op.create_index(op.f('ix_personalized_workout_plans_end_date'), 'personalized_workout_plans', ['end_date'], unique=False)

    op.create_table(
        'plan_workout_assignments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('plan_id', sa.Integer(), nullable=False),
        sa.Column('workout_id', sa.Integer(), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('scheduled_day', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['plan_id'], ['personalized_workout_plans.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['workout_id'], ['workouts.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('plan_id', 'week_number', 'scheduled_day', name='uq_plan_week_day'),
    )
    op.create_index(op.f('ix_plan_workout_assignments_id'), 'plan_workout_assignments', ['id'], unique=False)
    op.create_index(op.f('ix_plan_workout_assignments_plan_id'), 'plan_workout_assignments', ['plan_id'], unique=False)

    op.create_table(
        'workout_plan_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('plan_id', sa.Integer(), nullable=False),
        sa.Column('plan_snapshot', JSONType, nullable=False,
                  comment='Snapshot of a superseded personalized walking plan'),
        sa.Column('change_reason', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_workout_plan_history_id'), 'workout_plan_history', ['id'], unique=False)
    op.create_index(op.f('ix_workout_plan_history_user_id'), 'workout_plan_history', ['user_id'], unique=False)

    op.create_table(
        'workout_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('workout_id', sa.Integer(), nullable=True),
        sa.Column('workout_name', sa.String(length=150), nullable=True),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('total_steps', sa.Integer(), nullable=True),
        sa.Column('total_distance', sa.Float(), nullable=True),
        sa.Column('calories_burned', sa.Float(), nullable=True),
        sa.Column('average_pace', sa.Float(), nullable=True),
        sa.Column('route', JSONType, nullable=True),
        sa.Column('heart_rate_data', JSONType, nullable=True),
        sa.Column('notes', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['workout_id'], ['workouts.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_workout_sessions_id'), 'workout_sessions', ['id'], unique=False)
    op.create_index(op.f('ix_workout_sessions_user_id'), 'workout_sessions', ['user_id'], unique=False)
    op.create_index('ix_workout_sessions_user_status_start', 'workout_sessions', ['user_id', 'status', 'start_time'], unique=False)

    op.create_table(
        'workout_schedules',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('workout_id', sa.Integer(), nullable=True),
        sa.Column('plan_id', sa.Integer(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('target_steps', sa.Integer(), nullable=False),
        sa.Column('actual_steps', sa.Integer(), nullable=True),
        sa.Column('completed_session_id', sa.Integer(), nullable=True),
        sa.Column('cancellation_reason', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['workout_id'], ['workouts.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['plan_id'], ['personalized_workout_plans.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['completed_session_id'], ['workout_sessions.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_workout_schedules_id'), 'workout_schedules', ['id'], unique=False)
    op.create_index(op.f('ix_workout_schedules_user_id'), 'workout_schedules', ['user_id'], unique=False)
    op.create_index(op.f('ix_workout_schedules_date'), 'workout_schedules', ['date'], unique=False)
    op.create_index(
        'uq_workout_schedules_user_day_live', 'workout_schedules', ['user_id', 'date'], unique=True,
        postgresql_where=sa.text("status != 'cancelled'"),
        sqlite_where=sa.text("status != 'cancelled'"),
    )

    op.create_table(
        'daily_workouts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('workout_id', sa.Integer(), nullable=True),
        sa.Column('schedule_id', sa.Integer(), nullable=True),
        sa.Column('target_steps', sa.Integer(), nullable=False),
        sa.Column('active_session_id', sa.Integer(), nullable=True),
        sa.Column('completed_session_id', sa.Integer(), nullable=True),
        sa.Column('completed', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['workout_id'], ['workouts.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['schedule_id'], ['workout_schedules.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['active_session_id'], ['workout_sessions.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['completed_session_id'], ['workout_sessions.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'date', name='uq_daily_workouts_user_date'),
    )
    op.create_index(op.f('ix_daily_workouts_id'), 'daily_workouts', ['id'], unique=False)
    op.create_index(op.f('ix_daily_workouts_user_id'), 'daily_workouts', ['user_id'], unique=False)

    op.create_table(
        'challenges',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('challenge_id', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', sa.String(length=30), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('duration_label', sa.String(length=30), nullable=True),
        sa.Column('difficulty', sa.String(length=20), nullable=True),
        sa.Column('target_value', sa.Float(), nullable=False),
        sa.Column('target_label', sa.String(length=100), nullable=True),
        sa.Column('reward', sa.String(length=100), nullable=True),
        sa.Column('icon_type', sa.String(length=30), nullable=True),
        sa.Column('background_color', sa.String(length=10), nullable=True),
        sa.Column('image_url', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('template_version', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_challenges_id'), 'challenges', ['id'], unique=False)
    op.create_index(op.f('ix_challenges_challenge_id'), 'challenges', ['challenge_id'], unique=True)

    op.create_table(
        'user_challenge_enrollments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('challenge_pk', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('total_progress', sa.Float(), nullable=True),
        sa.Column('completion_percentage', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['challenge_pk'], ['challenges.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_user_challenge_enrollments_id'), 'user_challenge_enrollments', ['id'], unique=False)
    op.create_index(op.f('ix_user_challenge_enrollments_user_id'), 'user_challenge_enrollments', ['user_id'], unique=False)
    op.create_index(
        'uq_enrollments_user_challenge_active', 'user_challenge_enrollments', ['user_id', 'challenge_pk'], unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )

    op.create_table(
        'challenge_day_progress',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('enrollment_id', sa.Integer(), nullable=False),
        sa.Column('day', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('target_value', sa.Float(), nullable=False),
        sa.Column('achieved_value', sa.Float(), nullable=False),
        sa.Column('is_completed', sa.Boolean(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['enrollment_id'], ['user_challenge_enrollments.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('enrollment_id', 'day', name='uq_challenge_day_progress_day'),
    )
    op.create_index(op.f('ix_challenge_day_progress_id'), 'challenge_day_progress', ['id'], unique=False)
    op.create_index(op.f('ix_challenge_day_progress_enrollment_id'), 'challenge_day_progress', ['enrollment_id'], unique=False)

    op.create_table(
        'free_walk_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(length=64), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('paused_at', sa.DateTime(), nullable=True),
        sa.Column('paused_seconds', sa.Integer(), nullable=True),
        sa.Column('target_steps', sa.Integer(), nullable=True),
        sa.Column('actual_steps', sa.Integer(), nullable=True),
        sa.Column('target_distance', sa.Float(), nullable=True),
        sa.Column('actual_distance', sa.Float(), nullable=True),
        sa.Column('calories_burned', sa.Float(), nullable=True),
        sa.Column('average_pace', sa.String(length=20), nullable=True),
        sa.Column('location_tracking', JSONType, nullable=True),
        sa.Column('route', JSONType, nullable=True),
        sa.Column('real_time_data', JSONType, nullable=True),
        sa.Column('weather', JSONType, nullable=True),
        sa.Column('milestones_reached', JSONType, nullable=True),
        sa.Column('difficulty', sa.String(length=20), nullable=True),
        sa.Column('user_rating', sa.Integer(), nullable=True),
        sa.Column('notes', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_free_walk_sessions_id'), 'free_walk_sessions', ['id'], unique=False)
    op.create_index(op.f('ix_free_walk_sessions_session_id'), 'free_walk_sessions', ['session_id'], unique=True)
    op.create_index('ix_free_walk_sessions_user_start', 'free_walk_sessions', ['user_id', 'start_time'], unique=False)
    op.create_index('ix_free_walk_sessions_user_status_start', 'free_walk_sessions', ['user_id', 'status', 'start_time'], unique=False)


def downgrade() -> None:
    op.drop_table('free_walk_sessions')
    op.drop_table('challenge_day_progress')
    op.drop_table('user_challenge_enrollments')
    op.drop_table('challenges')
    op.drop_table('daily_workouts')
    op.drop_table('workout_schedules')
    op.drop_table('workout_sessions')
    op.drop_table('workout_plan_history')
    op.drop_table('plan_workout_assignments')
    op.drop_table('personalized_workout_plans')
    op.drop_table('workouts')
    op.drop_table('user_profiles')
    op.drop_table('users')
