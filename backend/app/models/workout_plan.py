from sqlalchemy import Column, Integer, String, Boolean, Text, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database import Base

class PersonalizedWorkoutPlan(Base):
    __tablename__ = "personalized_workout_plans"
    # History rows keep a retired plan's id, so SQLite must not hand it out again
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=False, index=True)

    plan_name = Column(String(150))
    description = Column(Text)
    duration_weeks = Column(Integer, nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False, index=True)  # start + weeks * 7 days

    fitness_goals_focused = Column(JSONB, default=list)
    progressive_overload = Column(Boolean, default=True)

    # Step target progression
    starting_steps = Column(Integer, nullable=False)
    weekly_increment = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)

    workouts = relationship(
        "PlanWorkoutAssignment",
        back_populates="plan",
        order_by="PlanWorkoutAssignment.position",
        cascade="all, delete-orphan",
    )

    def is_active(self, now: datetime) -> bool:
        return self.end_date >= now


class PlanWorkoutAssignment(Base):
    """One (week, day) slot of a plan pointing at a catalog workout."""
    __tablename__ = "plan_workout_assignments"
    __table_args__ = (
        UniqueConstraint("plan_id", "week_number", "scheduled_day", name="uq_plan_week_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    plan_id = Column(Integer, ForeignKey('personalized_workout_plans.id', ondelete="CASCADE"), nullable=False, index=True)
    workout_id = Column(Integer, ForeignKey('workouts.id'), nullable=False)
    week_number = Column(Integer, nullable=False)    # 1..weeks
    scheduled_day = Column(Integer, nullable=False)  # 1..5, Monday = 1
    position = Column(Integer, nullable=False)       # linear slot number, generation order

    plan = relationship("PersonalizedWorkoutPlan", back_populates="workouts")
    workout = relationship("Workout")
