import unittest
from datetime import date, datetime

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles

from app.database import Base
import app.models  # noqa: F401
from app.crud.daily_workout import upsert_daily_workout, insert_daily_workout_if_absent
from app.models.user import User
from app.models.workout import Workout
from app.models.workout_schedule import WorkoutSchedule
from app.models.workout_session import WorkoutSession
from app.models.daily_workout import DailyWorkout
from app.services.daily_workout_service import get_todays_workout, resolve_daily_workout, NOTHING_SCHEDULED
from app.services.errors import NotFoundError

# Fix JSONB for SQLite
@compiles(JSONB, 'sqlite')
def compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"

engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

NOW = datetime(2026, 10, 14, 7, 0)
TODAY = NOW.date()


class TestDailyWorkout(unittest.TestCase):
    def setUp(self):
        Base.metadata.create_all(bind=engine)
        self.db = TestingSessionLocal()

        user = User(name="Walker", email="walker@example.com", password="x")
        self.workout = Workout(name="Morning Energy Walk", type="walk", category="beginner", intensity="light", duration=25)
        self.db.add_all([user, self.workout])
        self.db.commit()
        self.user_id = user.id

    def tearDown(self):
        self.db.close()
        Base.metadata.drop_all(bind=engine)

    def add_entry(self, day=TODAY, status="scheduled", target_steps=6000, workout_id=None):
        entry = WorkoutSchedule(
            user_id=self.user_id,
            workout_id=workout_id or self.workout.id,
            date=day,
            status=status,
            target_steps=target_steps,
        )
        self.db.add(entry)
        self.db.commit()
        return entry

    def test_first_read_creates_row_from_schedule(self):
        entry = self.add_entry()
        daily = get_todays_workout(self.db, self.user_id, NOW)

        self.assertEqual(daily.date, TODAY)
        self.assertEqual(daily.workout_id, self.workout.id)
        self.assertEqual(daily.schedule_id, entry.id)
        self.assertEqual(daily.target_steps, 6000)
        self.assertFalse(daily.completed)

    def test_repeated_reads_return_the_same_row(self):
        self.add_entry()
        first = get_todays_workout(self.db, self.user_id, NOW)
        second = get_todays_workout(self.db, self.user_id, NOW)

        self.assertEqual(first.id, second.id)
        self.assertEqual(self.db.query(DailyWorkout).count(), 1)

    def test_nothing_scheduled(self):
        with self.assertRaises(NotFoundError) as ctx:
            get_todays_workout(self.db, self.user_id, NOW)
        self.assertEqual(ctx.exception.message, NOTHING_SCHEDULED)

    def test_cancelled_entry_does_not_count(self):
        self.add_entry(status="cancelled")
        with self.assertRaises(NotFoundError):
            get_todays_workout(self.db, self.user_id, NOW)

    def test_completed_entry_is_copied(self):
        session = WorkoutSession(user_id=self.user_id, workout_id=self.workout.id, start_time=NOW, status="completed")
        self.db.add(session)
        self.db.commit()
        entry = self.add_entry(status="completed")
        entry.completed_session_id = session.id
        self.db.commit()

        daily = get_todays_workout(self.db, self.user_id, NOW)
        self.assertTrue(daily.completed)
        self.assertEqual(daily.completed_session_id, session.id)

    def test_in_progress_entry_links_active_session(self):
        session = WorkoutSession(user_id=self.user_id, workout_id=self.workout.id, start_time=NOW, status="in_progress")
        self.db.add(session)
        self.add_entry(status="in_progress")

        daily = get_todays_workout(self.db, self.user_id, NOW)
        self.assertEqual(daily.active_session_id, session.id)

    def test_dangling_workout_is_repaired(self):
        entry = self.add_entry()
        self.db.add(DailyWorkout(user_id=self.user_id, date=TODAY, workout_id=9999, target_steps=6000))
        self.db.commit()

        daily = get_todays_workout(self.db, self.user_id, NOW)
        self.assertEqual(daily.workout_id, self.workout.id)
        self.assertEqual(daily.schedule_id, entry.id)

    def test_dangling_workout_without_schedule(self):
        self.db.add(DailyWorkout(user_id=self.user_id, date=TODAY, workout_id=None, target_steps=6000))
        self.db.commit()

        with self.assertRaises(NotFoundError):
            resolve_daily_workout(self.db, self.user_id, TODAY)

    def test_other_days_are_independent(self):
        self.add_entry(day=date(2026, 10, 15), target_steps=6300)
        with self.assertRaises(NotFoundError):
            get_todays_workout(self.db, self.user_id, NOW)

        daily = resolve_daily_workout(self.db, self.user_id, date(2026, 10, 15))
        self.assertEqual(daily.target_steps, 6300)

    def test_upsert_keeps_completion_fields(self):
        daily = insert_daily_workout_if_absent(
            self.db, self.user_id, TODAY, workout_id=self.workout.id, target_steps=5000, completed=True,
        )
        self.db.commit()

        other = Workout(name="Hill Walking Challenge", type="walk", category="intermediate", intensity="moderate", duration=40)
        self.db.add(other)
        self.db.commit()

        updated = upsert_daily_workout(self.db, self.user_id, TODAY, other.id, None, 7000)
        self.db.commit()

        self.assertEqual(updated.id, daily.id)
        self.assertEqual(updated.workout_id, other.id)
        self.assertEqual(updated.target_steps, 7000)
        self.assertTrue(updated.completed)

    def test_insert_if_absent_does_not_overwrite(self):
        insert_daily_workout_if_absent(self.db, self.user_id, TODAY, workout_id=self.workout.id, target_steps=5000, completed=False)
        row = insert_daily_workout_if_absent(self.db, self.user_id, TODAY, workout_id=None, target_steps=1, completed=False)
        self.db.commit()

        self.assertEqual(row.target_steps, 5000)
        self.assertEqual(self.db.query(DailyWorkout).count(), 1)

if __name__ == '__main__':
    unittest.main()
