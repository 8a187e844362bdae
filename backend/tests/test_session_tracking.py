import unittest
from datetime import datetime, timedelta
from unittest.mock import patch

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles

from app.database import Base
import app.models  # noqa: F401
from app.models.user import User
from app.models.workout import Workout
from app.models.workout_schedule import WorkoutSchedule
from app.models.workout_session import WorkoutSession
from app.services.daily_workout_service import get_todays_workout
from app.services.errors import InvalidStateError, NotFoundError
from app.services.session_service import (
    start_workout_session, complete_workout_session, update_workout_session, list_workout_sessions,
)

# Fix JSONB for SQLite
@compiles(JSONB, 'sqlite')
def compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"

engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

START = datetime(2026, 10, 14, 18, 0)


class TestSessionTracking(unittest.TestCase):
    def setUp(self):
        Base.metadata.create_all(bind=engine)
        self.db = TestingSessionLocal()

        user = User(name="Walker", email="walker@example.com", password="x")
        other = User(name="Other", email="other@example.com", password="x")
        self.workout = Workout(name="Evening Stress Relief Walk", type="walk", category="beginner", intensity="light", duration=35)
        self.db.add_all([user, other, self.workout])
        self.db.commit()
        self.user_id = user.id
        self.other_id = other.id

        self.entry = WorkoutSchedule(
            user_id=self.user_id, workout_id=self.workout.id, date=START.date(), status="scheduled", target_steps=6000,
        )
        self.db.add(self.entry)
        self.db.commit()
        # Materialize today's row so write-back has something to mirror onto
        self.daily = get_todays_workout(self.db, self.user_id, START)

    def tearDown(self):
        self.db.close()
        Base.metadata.drop_all(bind=engine)

    def test_start_marks_schedule_in_progress(self):
        result = start_workout_session(self.db, self.user_id, self.workout.id, START)

        self.assertEqual(result.session.status, "in_progress")
        self.assertEqual(result.session.workout_name, "Evening Stress Relief Walk")
        self.assertTrue(result.write_back.succeeded)

        self.db.refresh(self.entry)
        self.db.refresh(self.daily)
        self.assertEqual(self.entry.status, "in_progress")
        self.assertEqual(self.daily.active_session_id, result.session.id)

    def test_start_unknown_workout(self):
        with self.assertRaises(NotFoundError):
            start_workout_session(self.db, self.user_id, 9999, START)

    def test_complete_derives_duration_and_pace(self):
        started = start_workout_session(self.db, self.user_id, self.workout.id, START)
        result = complete_workout_session(
            self.db, self.user_id, started.session.id,
            {"total_steps": 700, "total_distance": 500.0},
            START + timedelta(seconds=90, milliseconds=400),
        )

        session = result.session
        self.assertEqual(session.status, "completed")
        self.assertEqual(session.duration, 90)
        self.assertEqual(session.average_pace, 180.0)
        self.assertTrue(result.write_back.attempted)
        self.assertTrue(result.write_back.succeeded)

        self.db.refresh(self.entry)
        self.db.refresh(self.daily)
        self.assertEqual(self.entry.status, "completed")
        self.assertEqual(self.entry.completed_session_id, session.id)
        self.assertEqual(self.entry.actual_steps, 700)
        self.assertTrue(self.daily.completed)
        self.assertIsNone(self.daily.active_session_id)
        self.assertEqual(self.daily.completed_session_id, session.id)

    def test_supplied_duration_wins(self):
        started = start_workout_session(self.db, self.user_id, self.workout.id, START)
        result = complete_workout_session(
            self.db, self.user_id, started.session.id,
            {"duration": 600, "total_distance": 1000.0},
            START + timedelta(minutes=30),
        )
        self.assertEqual(result.session.duration, 600)
        self.assertEqual(result.session.average_pace, 600.0)

    def test_completion_matches_start_day(self):
        # Ends after midnight, still counts for the day it started
        late_start = START.replace(hour=23, minute=50)
        started = start_workout_session(self.db, self.user_id, self.workout.id, late_start)
        complete_workout_session(self.db, self.user_id, started.session.id, {}, late_start + timedelta(minutes=20))

        self.db.refresh(self.entry)
        self.assertEqual(self.entry.status, "completed")

    def test_write_back_failure_keeps_session(self):
        started = start_workout_session(self.db, self.user_id, self.workout.id, START)
        with patch("app.services.session_service._propagate_completion", side_effect=RuntimeError("schedule locked")):
            result = complete_workout_session(
                self.db, self.user_id, started.session.id, {"total_steps": 4000}, START + timedelta(minutes=30)
            )

        self.assertTrue(result.write_back.attempted)
        self.assertFalse(result.write_back.succeeded)
        self.assertEqual(result.write_back.error, "schedule locked")

        stored = self.db.get(WorkoutSession, started.session.id)
        self.assertEqual(stored.status, "completed")
        self.assertEqual(stored.total_steps, 4000)

        self.db.refresh(self.entry)
        self.assertEqual(self.entry.status, "in_progress")

    def test_complete_twice(self):
        started = start_workout_session(self.db, self.user_id, self.workout.id, START)
        complete_workout_session(self.db, self.user_id, started.session.id, {}, START + timedelta(minutes=5))
        with self.assertRaises(InvalidStateError):
            complete_workout_session(self.db, self.user_id, started.session.id, {}, START + timedelta(minutes=6))

    def test_complete_someone_elses_session(self):
        started = start_workout_session(self.db, self.user_id, self.workout.id, START)
        with self.assertRaises(InvalidStateError):
            complete_workout_session(self.db, self.other_id, started.session.id, {}, START + timedelta(minutes=5))

    def test_complete_unknown_session(self):
        with self.assertRaises(NotFoundError):
            complete_workout_session(self.db, self.user_id, 9999, {}, START)

    def test_unscheduled_workout_skips_write_back(self):
        extra = Workout(name="Long Distance Walk", type="walk", category="advanced", intensity="intense", duration=60)
        self.db.add(extra)
        self.db.commit()

        started = start_workout_session(self.db, self.user_id, extra.id, START)
        self.assertTrue(started.write_back.succeeded)
        self.db.refresh(self.entry)
        self.assertEqual(self.entry.status, "scheduled")

    def test_update_live_metrics(self):
        started = start_workout_session(self.db, self.user_id, self.workout.id, START)
        result = update_workout_session(
            self.db, self.user_id, started.session.id, {"total_steps": 1200, "notes": "windy"}, START
        )
        self.assertEqual(result.session.total_steps, 1200)
        self.assertEqual(result.session.status, "in_progress")
        self.assertFalse(result.write_back.attempted)

    def test_update_with_completed_status_completes(self):
        started = start_workout_session(self.db, self.user_id, self.workout.id, START)
        result = update_workout_session(
            self.db, self.user_id, started.session.id, {"status": "completed"}, START + timedelta(minutes=2)
        )
        self.assertEqual(result.session.status, "completed")
        self.assertEqual(result.session.duration, 120)

    def test_update_completed_session(self):
        started = start_workout_session(self.db, self.user_id, self.workout.id, START)
        complete_workout_session(self.db, self.user_id, started.session.id, {}, START + timedelta(minutes=5))
        with self.assertRaises(InvalidStateError):
            update_workout_session(self.db, self.user_id, started.session.id, {"total_steps": 10}, START)

    def test_list_sessions_pages_newest_first(self):
        for i in range(3):
            start_workout_session(self.db, self.user_id, self.workout.id, START + timedelta(hours=i))
        start_workout_session(self.db, self.other_id, self.workout.id, START)

        sessions, total = list_workout_sessions(self.db, self.user_id, page=1, limit=2)
        self.assertEqual(total, 3)
        self.assertEqual([s.start_time for s in sessions], [START + timedelta(hours=2), START + timedelta(hours=1)])

        sessions, total = list_workout_sessions(self.db, self.user_id, status="completed")
        self.assertEqual((sessions, total), ([], 0))

if __name__ == '__main__':
    unittest.main()
