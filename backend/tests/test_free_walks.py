import unittest
from datetime import datetime, timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles

from app.database import Base
import app.models  # noqa: F401
from app.models.user import User
from app.models.user_profile import UserProfile
from app.services.errors import ConflictError, InvalidStateError, NotFoundError
from app.services.free_walk_service import (
    start_free_walk, update_free_walk, complete_free_walk, cancel_free_walk, get_free_walk, list_free_walks,
)

# Fix JSONB for SQLite
@compiles(JSONB, 'sqlite')
def compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"

engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

START = datetime(2026, 10, 14, 17, 0)
PARK = {"latitude": 52.52, "longitude": 13.405, "address": "Tiergarten"}


class TestFreeWalks(unittest.TestCase):
    def setUp(self):
        Base.metadata.create_all(bind=engine)
        self.db = TestingSessionLocal()

        user = User(name="Walker", email="walker@example.com", password="x")
        other = User(name="Other", email="other@example.com", password="x")
        self.db.add_all([user, other])
        self.db.commit()
        self.user_id = user.id
        self.other_id = other.id

        self.db.add(UserProfile(user_id=self.user_id, current_weight=80.0, height=180.0))
        self.db.commit()

    def tearDown(self):
        self.db.close()
        Base.metadata.drop_all(bind=engine)

    def test_start_defaults(self):
        walk = start_free_walk(self.db, self.user_id, START, start_location=PARK)

        self.assertEqual(walk.status, "active")
        self.assertEqual(walk.target_steps, 4000)
        self.assertEqual(len(walk.session_id), 32)
        self.assertEqual(walk.location_tracking, {"enabled": True, "start_location": PARK})
        self.assertEqual(walk.route, [])

    def test_only_one_open_walk(self):
        walk = start_free_walk(self.db, self.user_id, START)
        update_free_walk(self.db, self.user_id, walk.session_id, {"status": "paused"}, START + timedelta(minutes=1))

        with self.assertRaises(ConflictError):
            start_free_walk(self.db, self.user_id, START + timedelta(minutes=2))

        # Another user is unaffected
        start_free_walk(self.db, self.other_id, START)

    def test_live_updates(self):
        walk = start_free_walk(self.db, self.user_id, START)
        point = {"latitude": 52.52, "longitude": 13.40, "timestamp": START.isoformat()}

        update_free_walk(self.db, self.user_id, walk.session_id,
                         {"actual_steps": 1200, "actual_distance": 0.9, "route_points": [point]},
                         START + timedelta(minutes=10))
        walk = update_free_walk(self.db, self.user_id, walk.session_id,
                                {"actual_steps": 2600, "route_points": [point], "heart_rate": 110, "status": "paused"},
                                START + timedelta(minutes=20))

        self.assertEqual(walk.status, "paused")
        self.assertEqual(len(walk.route), 2)
        self.assertEqual(len(walk.real_time_data), 2)
        self.assertEqual(walk.real_time_data[-1]["heart_rate"], 110)
        self.assertEqual([m["value"] for m in walk.milestones_reached], [1000, 2500])

    def test_complete(self):
        walk = start_free_walk(self.db, self.user_id, START)
        walk = complete_free_walk(
            self.db, self.user_id, walk.session_id,
            {"actual_steps": 3200, "actual_distance": 2.5, "end_location": PARK, "user_rating": 4},
            START + timedelta(minutes=30, seconds=20),
        )

        self.assertEqual(walk.status, "completed")
        self.assertEqual(walk.duration, 30)
        self.assertEqual(walk.average_pace, "12:00/km")
        # 30 min * 80 kg * 0.05
        self.assertEqual(walk.calories_burned, 120)
        self.assertEqual(walk.location_tracking["end_location"], PARK)
        self.assertEqual(walk.user_rating, 4)
        self.assertIsNotNone(walk.completed_at)

    def test_pauses_do_not_count_as_walking(self):
        walk = start_free_walk(self.db, self.user_id, START)
        update_free_walk(self.db, self.user_id, walk.session_id, {"status": "paused"}, START + timedelta(minutes=10))
        update_free_walk(self.db, self.user_id, walk.session_id, {"status": "active"}, START + timedelta(minutes=25))
        walk = complete_free_walk(self.db, self.user_id, walk.session_id, {"actual_distance": 2.5}, START + timedelta(minutes=40))

        self.assertEqual(walk.paused_seconds, 15 * 60)
        self.assertEqual(walk.duration, 25)
        self.assertEqual(walk.average_pace, "10:00/km")
        # 25 min * 80 kg * 0.05
        self.assertEqual(walk.calories_burned, 100)

    def test_complete_while_paused_ends_at_the_pause(self):
        walk = start_free_walk(self.db, self.user_id, START)
        update_free_walk(self.db, self.user_id, walk.session_id, {"status": "paused"}, START + timedelta(minutes=10))
        walk = complete_free_walk(self.db, self.user_id, walk.session_id, {}, START + timedelta(minutes=30))

        self.assertEqual(walk.duration, 10)
        self.assertIsNone(walk.paused_at)

    def test_supplied_calories_are_kept(self):
        walk = start_free_walk(self.db, self.user_id, START)
        walk = complete_free_walk(self.db, self.user_id, walk.session_id, {"calories_burned": 50.0}, START + timedelta(minutes=10))
        self.assertEqual(walk.calories_burned, 50.0)

    def test_closed_walks_reject_changes(self):
        walk = start_free_walk(self.db, self.user_id, START)
        cancel_free_walk(self.db, self.user_id, walk.session_id, START + timedelta(minutes=1))

        with self.assertRaises(InvalidStateError):
            update_free_walk(self.db, self.user_id, walk.session_id, {"actual_steps": 10}, START)
        with self.assertRaises(InvalidStateError):
            complete_free_walk(self.db, self.user_id, walk.session_id, {}, START)

        # A cancelled walk no longer blocks a new one
        start_free_walk(self.db, self.user_id, START + timedelta(minutes=5))

    def test_walks_are_private(self):
        walk = start_free_walk(self.db, self.user_id, START)
        with self.assertRaises(NotFoundError):
            get_free_walk(self.db, self.other_id, walk.session_id)

    def test_list_newest_first(self):
        for i in range(3):
            walk = start_free_walk(self.db, self.user_id, START + timedelta(hours=i))
            complete_free_walk(self.db, self.user_id, walk.session_id, {}, START + timedelta(hours=i, minutes=15))

        walks, total = list_free_walks(self.db, self.user_id, page=1, limit=2)
        self.assertEqual(total, 3)
        self.assertEqual(walks[0].start_time, START + timedelta(hours=2))

        walks, total = list_free_walks(self.db, self.user_id, status="cancelled")
        self.assertEqual(total, 0)

if __name__ == '__main__':
    unittest.main()
