import logging
import math
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy.orm import Session

from app.models.challenge import Challenge, UserChallengeEnrollment, ChallengeDayProgress
from app.models.user_profile import UserProfile
from app.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

"""
Challenge Service
-----------------
Multi-day walking challenges. An enrollment carries one progress row per
challenge day; a day completes once its achieved value reaches the target
and never un-completes. The enrollment completes when every day has.
"""

AUTO_ASSIGN_DURATIONS = (3, 7, 28)
OVERRIDE_STATUSES = ("completed", "failed", "abandoned")

# Bump when the template definitions below change
CHALLENGE_TEMPLATE_VERSION = 1

WALKING_CHALLENGE_TEMPLATES = [
    {
        "challenge_id": "workout_streak-7",
        "name": "7-Day Walking Workout Streak",
        "description": "Do a walking workout every day for 7 days.",
        "type": "workout_streak",
        "duration": 7,
        "duration_label": "7 day",
        "difficulty": "medium",
        "target_value": 1,
        "target_label": "1 walking workout daily",
        "reward": "Silver Medal",
        "icon_type": "medal",
        "background_color": "#4CAF50",
    },
    {
        "challenge_id": "daily_steps-28",
        "name": "28-Day Step Challenge",
        "description": "Walk at least 10,000 steps daily for 28 days.",
        "type": "daily_steps",
        "duration": 28,
        "duration_label": "28 day",
        "difficulty": "hard",
        "target_value": 10000,
        "target_label": "10,000 steps daily",
        "reward": "Gold Medal",
        "icon_type": "trophy",
        "background_color": "#FFD700",
    },
    {
        "challenge_id": "unique_workouts-7",
        "name": "Variety Walker",
        "description": "Complete 5 different walking exercises this week.",
        "type": "unique_workouts",
        "duration": 7,
        "duration_label": "7 day",
        "difficulty": "medium",
        "target_value": 5,
        "target_label": "5 unique walking workouts",
        "reward": "Bronze Medal",
        "icon_type": "star",
        "background_color": "#FF6B47",
    },
    {
        "challenge_id": "beginner-3",
        "name": "Beginner Walker",
        "description": "Walk for at least 15 minutes each day for 3 days.",
        "type": "daily_duration",
        "duration": 3,
        "duration_label": "3 day",
        "difficulty": "easy",
        "target_value": 15,
        "target_label": "15 minutes daily",
        "reward": "Starter Badge",
        "icon_type": "badge",
        "background_color": "#2196F3",
    },
    {
        "challenge_id": "distance-14",
        "name": "Distance Challenger",
        "description": "Walk a total of 30km over 14 days.",
        "type": "total_distance",
        "duration": 14,
        "duration_label": "14 day",
        "difficulty": "medium",
        "target_value": 30,
        "target_label": "30km total distance",
        "reward": "Distance Master Badge",
        "icon_type": "badge",
        "background_color": "#9C27B0",
    },
]


def get_all_challenges(db: Session) -> List[Challenge]:
    return db.query(Challenge).filter(Challenge.is_active.is_(True)).order_by(Challenge.id).all()


def get_challenge(db: Session, challenge_id: str) -> Optional[Challenge]:
    return db.query(Challenge).filter(Challenge.challenge_id == challenge_id).first()


def get_user_challenges(db: Session, user_id: int, status: str = "active") -> List[UserChallengeEnrollment]:
    return (
        db.query(UserChallengeEnrollment)
        .filter(UserChallengeEnrollment.user_id == user_id, UserChallengeEnrollment.status == status)
        .order_by(UserChallengeEnrollment.start_date.desc(), UserChallengeEnrollment.id.desc())
        .all()
    )


def get_active_enrollment(db: Session, user_id: int, challenge: Challenge) -> Optional[UserChallengeEnrollment]:
    return (
        db.query(UserChallengeEnrollment)
        .filter(
            UserChallengeEnrollment.user_id == user_id,
            UserChallengeEnrollment.challenge_pk == challenge.id,
            UserChallengeEnrollment.status == "active",
        )
        .first()
    )


def _build_enrollment(user_id: int, challenge: Challenge, now: datetime) -> UserChallengeEnrollment:
    start = now.date()
    return UserChallengeEnrollment(
        user_id=user_id,
        challenge=challenge,
        start_date=start,
        end_date=start + timedelta(days=challenge.duration - 1),
        total_progress=0.0,
        completion_percentage=0,
        status="active",
        daily_progress=[
            ChallengeDayProgress(
                day=day,
                date=start + timedelta(days=day - 1),
                target_value=challenge.target_value,
                achieved_value=0.0,
                is_completed=False,
            )
            for day in range(1, challenge.duration + 1)
        ],
    )


def enroll_user_in_challenge(db: Session, user_id: int, challenge_id: str, now: datetime) -> UserChallengeEnrollment:
    challenge = get_challenge(db, challenge_id)
    if not challenge or not challenge.is_active:
        raise NotFoundError("Challenge not found")

    if get_active_enrollment(db, user_id, challenge):
        raise ConflictError("Already enrolled in this challenge")

    enrollment = _build_enrollment(user_id, challenge, now)
    db.add(enrollment)
    db.commit()
    db.refresh(enrollment)
    logger.info(f"User {user_id} enrolled in challenge {challenge_id} ({challenge.duration} days)")
    return enrollment


def _completion_percentage(completed_days: int, duration: int) -> int:
    # Half-up rounding: 2/3 days -> 67, 1/8 days -> 13
    return math.floor(100 * completed_days / duration + 0.5)


def update_daily_progress(
    db: Session, user_id: int, challenge_id: str, day: int, achieved_value: float, now: datetime
) -> UserChallengeEnrollment:
    """
    Records the achieved value for one challenge day of the active
    enrollment and recomputes the aggregates.
    """
    challenge = get_challenge(db, challenge_id)
    enrollment = get_active_enrollment(db, user_id, challenge) if challenge else None
    if not enrollment:
        raise NotFoundError("Enrollment not found")

    progress = next((p for p in enrollment.daily_progress if p.day == day), None)
    if progress is None:
        raise NotFoundError("Day not found")

    progress.achieved_value = achieved_value
    if not progress.is_completed and achieved_value >= progress.target_value:
        progress.is_completed = True
        progress.completed_at = now

    days = enrollment.daily_progress
    completed_days = sum(1 for p in days if p.is_completed)
    enrollment.total_progress = sum(p.achieved_value or 0 for p in days)
    enrollment.completion_percentage = _completion_percentage(completed_days, len(days))

    if completed_days == len(days):
        enrollment.status = "completed"
        enrollment.completed_at = now
        logger.info(f"User {user_id} completed challenge {challenge_id}")

    db.commit()
    db.refresh(enrollment)
    return enrollment


def mark_challenge_status(db: Session, user_id: int, challenge_id: str, status: str, now: datetime) -> UserChallengeEnrollment:
    """Explicit override of the user's most recent enrollment in a challenge."""
    if status not in OVERRIDE_STATUSES:
        raise ValueError(f"status must be one of {', '.join(OVERRIDE_STATUSES)}")

    challenge = get_challenge(db, challenge_id)
    enrollment = None
    if challenge:
        enrollment = (
            db.query(UserChallengeEnrollment)
            .filter(
                UserChallengeEnrollment.user_id == user_id,
                UserChallengeEnrollment.challenge_pk == challenge.id,
            )
            .order_by(UserChallengeEnrollment.start_date.desc(), UserChallengeEnrollment.id.desc())
            .first()
        )
    if not enrollment:
        raise NotFoundError("Enrollment not found")

    enrollment.status = status
    if status in ("failed", "abandoned"):
        enrollment.completed_at = now

    db.commit()
    db.refresh(enrollment)
    logger.info(f"Challenge {challenge_id} for user {user_id} marked {status}")
    return enrollment


def auto_assign_challenges_for_user(db: Session, user_id: int, now: datetime) -> List[UserChallengeEnrollment]:
    """Enrolls a user into every active 3, 7 and 28 day challenge they are not already in."""
    if not db.query(UserProfile).filter(UserProfile.user_id == user_id).first():
        raise NotFoundError("User profile not found")

    challenges = (
        db.query(Challenge)
        .filter(Challenge.duration.in_(AUTO_ASSIGN_DURATIONS), Challenge.is_active.is_(True))
        .order_by(Challenge.id)
        .all()
    )
    results = []
    for challenge in challenges:
        try:
            results.append(enroll_user_in_challenge(db, user_id, challenge.challenge_id, now))
        except ConflictError:
            logger.info(f"User {user_id} already enrolled in {challenge.challenge_id}, skipping")
    return results


def _ensure_challenge(db: Session, template: dict) -> Challenge:
    challenge = get_challenge(db, template["challenge_id"])
    if challenge is None:
        challenge = Challenge(
            **template,
            image_url="",
            is_active=True,
            template_version=CHALLENGE_TEMPLATE_VERSION,
        )
        db.add(challenge)
        db.flush()
        logger.info(f"Created challenge definition {challenge.challenge_id}")
    return challenge


def generate_and_assign_walking_challenges(db: Session, user_id: int, now: datetime) -> List[UserChallengeEnrollment]:
    """
    Makes sure every built-in walking challenge exists and that the user has
    an active enrollment in each. Existing active enrollments are returned
    as they are.
    """
    results = []
    for template in WALKING_CHALLENGE_TEMPLATES:
        challenge = _ensure_challenge(db, template)
        existing = get_active_enrollment(db, user_id, challenge)
        if existing:
            results.append(existing)
            continue

        enrollment = _build_enrollment(user_id, challenge, now)
        db.add(enrollment)
        results.append(enrollment)

    db.commit()
    for enrollment in results:
        db.refresh(enrollment)
    return results
