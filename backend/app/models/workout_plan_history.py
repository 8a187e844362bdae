from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, ForeignKey, DateTime
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from app.database import Base

class WorkoutPlanHistory(Base):
    __tablename__ = "workout_plan_history"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Id of the superseded plan; the plan row itself is deleted
    plan_id = Column(Integer, nullable=False)

    # Full snapshot of the superseded plan, assignments included
    plan_snapshot = Column(
        JSONB,
        nullable=False,
        comment="Snapshot of a superseded personalized walking plan"
    )

    change_reason = Column(String(100), nullable=False)  # e.g. "New plan requested by user"
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship(
        "User",
        backref="workout_plan_history"
    )
