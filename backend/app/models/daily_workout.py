from sqlalchemy import Column, Integer, Boolean, Date, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database import Base

class DailyWorkout(Base):
    """
    The workout a user reads for one calendar day.
    `date` is a Date column, so equality is always at day granularity.
    """
    __tablename__ = "daily_workouts"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_workouts_user_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)

    workout_id = Column(Integer, ForeignKey("workouts.id", ondelete="SET NULL"), nullable=True)
    schedule_id = Column(Integer, ForeignKey("workout_schedules.id", ondelete="SET NULL"), nullable=True)
    target_steps = Column(Integer, nullable=False, default=0)

    active_session_id = Column(Integer, ForeignKey("workout_sessions.id", ondelete="SET NULL"), nullable=True)
    completed_session_id = Column(Integer, ForeignKey("workout_sessions.id", ondelete="SET NULL"), nullable=True)
    completed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    workout = relationship("Workout")
    schedule = relationship("WorkoutSchedule")
    active_session = relationship("WorkoutSession", foreign_keys=[active_session_id])
    completed_session = relationship("WorkoutSession", foreign_keys=[completed_session_id])
