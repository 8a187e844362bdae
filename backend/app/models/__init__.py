# Import all models here
from app.models.user import User
from app.models.user_profile import UserProfile
from app.models.workout import Workout
from app.models.workout_plan import PersonalizedWorkoutPlan, PlanWorkoutAssignment
from app.models.workout_plan_history import WorkoutPlanHistory
from app.models.workout_session import WorkoutSession
from app.models.workout_schedule import WorkoutSchedule
from app.models.daily_workout import DailyWorkout
from app.models.challenge import Challenge, UserChallengeEnrollment, ChallengeDayProgress
from app.models.free_walk_session import FreeWalkSession
