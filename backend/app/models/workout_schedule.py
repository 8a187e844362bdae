from sqlalchemy import Column, Integer, String, Date, ForeignKey, DateTime, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database import Base

SCHEDULE_STATUSES = ("scheduled", "in_progress", "completed", "cancelled")

class WorkoutSchedule(Base):
    """A plan assignment materialized onto a calendar date."""
    __tablename__ = "workout_schedules"
    __table_args__ = (
        # At most one live entry per user and day
        Index(
            "uq_workout_schedules_user_day_live",
            "user_id", "date",
            unique=True,
            postgresql_where=text("status != 'cancelled'"),
            sqlite_where=text("status != 'cancelled'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    workout_id = Column(Integer, ForeignKey("workouts.id", ondelete="SET NULL"), nullable=True)
    plan_id = Column(Integer, ForeignKey("personalized_workout_plans.id", ondelete="SET NULL"), nullable=True)

    date = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False, default="scheduled")
    target_steps = Column(Integer, nullable=False, default=0)
    actual_steps = Column(Integer, nullable=True)

    completed_session_id = Column(Integer, ForeignKey("workout_sessions.id", ondelete="SET NULL"), nullable=True)
    cancellation_reason = Column(String(255), nullable=True)
    notes = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    workout = relationship("Workout")
    completed_session = relationship("WorkoutSession", foreign_keys=[completed_session_id])
