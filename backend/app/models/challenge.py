from sqlalchemy import (
    Column, Integer, String, Float, Boolean, Text, Date, DateTime, ForeignKey, Index, UniqueConstraint, text
)
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database import Base

CHALLENGE_TYPES = ("workout_streak", "daily_steps", "unique_workouts", "daily_duration", "total_distance")
ENROLLMENT_STATUSES = ("active", "completed", "failed", "abandoned")

class Challenge(Base):
    __tablename__ = "challenges"

    id = Column(Integer, primary_key=True, index=True)
    challenge_id = Column(String(50), unique=True, nullable=False, index=True)  # business key, e.g. "daily_steps-28"
    name = Column(String(150), nullable=False)
    description = Column(Text)
    type = Column(String(30), nullable=False)

    duration = Column(Integer, nullable=False)       # days
    duration_label = Column(String(30))
    difficulty = Column(String(20))
    target_value = Column(Float, nullable=False)
    target_label = Column(String(100))

    # Reward / presentation
    reward = Column(String(100))
    icon_type = Column(String(30))
    background_color = Column(String(10))
    image_url = Column(String(255), default="")

    is_active = Column(Boolean, default=True)
    template_version = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class UserChallengeEnrollment(Base):
    __tablename__ = "user_challenge_enrollments"
    __table_args__ = (
        # One active enrollment per user and challenge
        Index(
            "uq_enrollments_user_challenge_active",
            "user_id", "challenge_pk",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    challenge_pk = Column(Integer, ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)  # start + duration - 1

    total_progress = Column(Float, default=0.0)
    completion_percentage = Column(Integer, default=0)
    status = Column(String(20), nullable=False, default="active")
    completed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    challenge = relationship("Challenge")
    daily_progress = relationship(
        "ChallengeDayProgress",
        back_populates="enrollment",
        order_by="ChallengeDayProgress.day",
        cascade="all, delete-orphan",
    )


class ChallengeDayProgress(Base):
    __tablename__ = "challenge_day_progress"
    __table_args__ = (
        UniqueConstraint("enrollment_id", "day", name="uq_challenge_day_progress_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    enrollment_id = Column(Integer, ForeignKey("user_challenge_enrollments.id", ondelete="CASCADE"), nullable=False, index=True)
    day = Column(Integer, nullable=False)  # 1..duration
    date = Column(Date, nullable=False)
    target_value = Column(Float, nullable=False)
    achieved_value = Column(Float, nullable=False, default=0.0)
    is_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)

    enrollment = relationship("UserChallengeEnrollment", back_populates="daily_progress")
