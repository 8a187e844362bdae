from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database import Base

class WorkoutSession(Base):
    """One attempt at a catalog workout."""
    __tablename__ = "workout_sessions"
    __table_args__ = (
        Index("ix_workout_sessions_user_status_start", "user_id", "status", "start_time"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    workout_id = Column(Integer, ForeignKey("workouts.id", ondelete="SET NULL"), nullable=True)
    workout_name = Column(String(150))

    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default="in_progress")  # in_progress | completed

    # Aggregate metrics
    duration = Column(Integer, nullable=True)         # seconds
    total_steps = Column(Integer, nullable=True)
    total_distance = Column(Float, nullable=True)     # meters
    calories_burned = Column(Float, nullable=True)
    average_pace = Column(Float, nullable=True)       # seconds per km
    route = Column(JSONB, nullable=True)              # [{"latitude": .., "longitude": .., "timestamp": ..}]
    heart_rate_data = Column(JSONB, nullable=True)    # [{"timestamp": .., "bpm": ..}]
    notes = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    workout = relationship("Workout")
