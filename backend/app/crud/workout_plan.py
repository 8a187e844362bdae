from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from app.models.workout_plan import PersonalizedWorkoutPlan
from app.models.workout_plan_history import WorkoutPlanHistory

"""
Workout Plan CRUD
-----------------
Pure Database Access Object for Personalized Workout Plans.
Business logic for generation lives in app.services.workout_service.
"""

def get_active_plan(db: Session, user_id: int, now: datetime) -> Optional[PersonalizedWorkoutPlan]:
    """
    The user's active plan (end_date still ahead of `now`), newest first.
    """
    return (
        db.query(PersonalizedWorkoutPlan)
        .filter(
            PersonalizedWorkoutPlan.user_id == user_id,
            PersonalizedWorkoutPlan.end_date >= now,
        )
        .order_by(PersonalizedWorkoutPlan.start_date.desc())
        .first()
    )

def get_plan_history(db: Session, user_id: int, skip: int = 0, limit: int = 20):
    return (
        db.query(WorkoutPlanHistory)
        .filter(WorkoutPlanHistory.user_id == user_id)
        .order_by(WorkoutPlanHistory.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
