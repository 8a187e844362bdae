from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database import Base

FREE_WALK_STATUSES = ("active", "paused", "completed", "cancelled")

class FreeWalkSession(Base):
    """An ad-hoc walk that is not tied to a plan workout."""
    __tablename__ = "free_walk_sessions"
    __table_args__ = (
        Index("ix_free_walk_sessions_user_start", "user_id", "start_time"),
        Index("ix_free_walk_sessions_user_status_start", "user_id", "status", "start_time"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    session_id = Column(String(64), unique=True, nullable=False, index=True)

    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    duration = Column(Integer, default=0)  # minutes of walking, pauses excluded
    status = Column(String(20), nullable=False, default="active")
    paused_at = Column(DateTime, nullable=True)      # set while paused
    paused_seconds = Column(Integer, default=0)      # closed pauses so far

    # Target and actual metrics
    target_steps = Column(Integer, default=4000)
    actual_steps = Column(Integer, default=0)
    target_distance = Column(Float, default=0.0)   # km
    actual_distance = Column(Float, default=0.0)   # km
    calories_burned = Column(Float, default=0.0)
    average_pace = Column(String(20), nullable=True)  # e.g. "5:30/km"

    location_tracking = Column(JSONB, default=dict)  # {"enabled": .., "start_location": .., "end_location": ..}
    route = Column(JSONB, default=list)
    real_time_data = Column(JSONB, default=list)
    weather = Column(JSONB, nullable=True)
    milestones_reached = Column(JSONB, default=list)

    # User experience
    difficulty = Column(String(20), nullable=True)  # easy | moderate | challenging
    user_rating = Column(Integer, nullable=True)    # 1..5
    notes = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)

    user = relationship("User", backref="free_walk_sessions")
