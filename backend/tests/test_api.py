import unittest
from unittest.mock import patch

from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles

from app.api.auth import get_current_user
from app.api.deps import to_http_exception
from app.database import Base, get_db
from app.main import app
from app.models.challenge import ChallengeDayProgress
from app.models.free_walk_session import FreeWalkSession
from app.models.user import User
from app.services.errors import ConflictError, InvalidStateError, NotFoundError, UpstreamUnavailableError
from app.services.exercise_api_service import exercise_api_service

# Fix JSONB for SQLite
@compiles(JSONB, 'sqlite')
def compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"

engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PROFILE = {
    "fitness_goals": ["lose_weight"],
    "fitness_level": "beginner",
    "daily_walking_time": "20_60_mins",
    "step_goal": 6000,
    "current_weight": 80.0,
    "height": 175.0,
}


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class TestAPI(unittest.TestCase):
    def setUp(self):
        Base.metadata.create_all(bind=engine)
        db = TestingSessionLocal()
        user = User(name="Walker", email="walker@example.com", password="x")
        db.add(user)
        db.commit()
        self.user_id = user.id
        db.close()

        def override_current_user(db: Session = Depends(get_db)):
            return db.get(User, self.user_id)

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_current_user] = override_current_user
        # No lifespan: the schema comes from create_all above
        self.client = TestClient(app)

        # Keep plan generation off the network
        self.offline = patch.object(
            exercise_api_service, "fetch_walking_exercises",
            side_effect=UpstreamUnavailableError("Exercise API key is not configured"),
        )
        self.offline.start()

    def tearDown(self):
        self.offline.stop()
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)

    def create_profile(self):
        response = self.client.post("/user-profiles/", json=PROFILE)
        self.assertEqual(response.status_code, 201)
        return response.json()

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_profile_computes_bmi(self):
        profile = self.create_profile()
        self.assertEqual(profile["bmi"], 26.1)
        self.assertEqual(profile["bmi_category"], "overweight")

        response = self.client.post("/user-profiles/", json=PROFILE)
        self.assertEqual(response.status_code, 400)

    def test_timezone_is_validated(self):
        self.create_profile()
        response = self.client.patch("/user-profiles/timezone", json={"timezone": "Mars/Olympus"})
        self.assertEqual(response.status_code, 400)

        response = self.client.patch("/user-profiles/timezone", json={"timezone": "Asia/Kolkata"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["timezone"], "Asia/Kolkata")

    def test_plan_without_profile(self):
        response = self.client.post("/workouts/plan/generate", json={"weeks": 1})
        self.assertEqual(response.status_code, 404)

        response = self.client.get("/workouts/plan/current")
        self.assertEqual(response.status_code, 404)

    def test_plan_generation_flow(self):
        self.create_profile()

        response = self.client.post("/workouts/plan/generate", json={"weeks": 1})
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body["created"])
        self.assertEqual(body["data"]["starting_steps"], 6000)
        self.assertEqual(body["data"]["weekly_increment"], 300)
        self.assertEqual(len(body["data"]["workouts"]), 5)

        # Asking again returns the plan that is already active
        response = self.client.post("/workouts/plan/generate", json={"weeks": 2})
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["created"])
        self.assertEqual(response.json()["data"]["id"], body["data"]["id"])

        response = self.client.get("/workouts/plan/current")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["id"], body["data"]["id"])

        response = self.client.get("/workouts/available")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()), 5)

        response = self.client.post("/workouts/plan/generate", json={"weeks": 1, "force_regenerate": True})
        self.assertEqual(response.status_code, 201)
        # Retired plan ids are never handed to a new plan
        self.assertNotEqual(response.json()["data"]["id"], body["data"]["id"])

        history = self.client.get("/workouts/plan/history").json()
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0]["plan_id"], body["data"]["id"])

    def test_plan_weeks_validated(self):
        self.create_profile()
        response = self.client.post("/workouts/plan/generate", json={"weeks": 0})
        self.assertEqual(response.status_code, 422)

    def test_profile_update_regenerates_active_plan(self):
        self.create_profile()
        self.client.post("/workouts/plan/generate", json={"weeks": 1})

        response = self.client.put("/user-profiles/me", json={"step_goal": 9000})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["plan_regenerated"])

        plan = self.client.get("/workouts/plan/current").json()
        self.assertEqual(plan["starting_steps"], 9000)

    def test_profile_update_without_plan(self):
        self.create_profile()
        response = self.client.put("/user-profiles/me", json={"step_goal": 9000})
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["plan_regenerated"])

    def test_delete_profile_retires_plan(self):
        self.assertEqual(self.client.delete("/user-profiles/me").status_code, 404)

        self.create_profile()
        plan = self.client.post("/workouts/plan/generate", json={"weeks": 1}).json()["data"]

        response = self.client.delete("/user-profiles/me")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["retired_plan_id"], plan["id"])

        self.assertEqual(self.client.get("/user-profiles/me").status_code, 404)
        self.assertEqual(self.client.get("/workouts/plan/current").status_code, 404)
        history = self.client.get("/workouts/plan/history").json()
        self.assertEqual([h["change_reason"] for h in history], ["Profile deleted"])

        # A new profile can be created afterwards
        self.create_profile()

    def test_session_flow(self):
        self.create_profile()
        plan = self.client.post("/workouts/plan/generate", json={"weeks": 1}).json()["data"]
        workout_id = plan["workouts"][0]["workout_id"]

        response = self.client.post("/workouts/sessions/start", json={"workout_id": workout_id})
        self.assertEqual(response.status_code, 201)
        session_id = response.json()["session"]["id"]
        self.assertEqual(response.json()["session"]["status"], "in_progress")

        response = self.client.put(
            f"/workouts/sessions/{session_id}/complete",
            json={"duration": 90, "total_distance": 500, "total_steps": 700},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["session"]["average_pace"], 180.0)
        self.assertTrue(body["write_back"]["succeeded"])

        response = self.client.put(f"/workouts/sessions/{session_id}/complete", json={})
        self.assertEqual(response.status_code, 400)

        page = self.client.get("/workouts/sessions", params={"status": "completed"}).json()
        self.assertEqual(page["total"], 1)
        self.assertEqual(page["pages"], 1)

    def test_unknown_workout(self):
        self.assertEqual(self.client.get("/workouts/9999").status_code, 404)
        response = self.client.post("/workouts/sessions/start", json={"workout_id": 9999})
        self.assertEqual(response.status_code, 404)

    def test_challenge_flow(self):
        response = self.client.post("/challenges/generate-auto-walking-challenges")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(response.json()), 5)

        response = self.client.post("/challenges/enroll", json={"challenge_id": "beginner-3"})
        self.assertEqual(response.status_code, 409)

        response = self.client.put("/challenges/progress", json={"challenge_id": "beginner-3", "day": 1, "achieved_value": 20})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["completion_percentage"], 33)

        response = self.client.put("/challenges/progress", json={"challenge_id": "beginner-3", "day": 9, "achieved_value": 20})
        self.assertEqual(response.status_code, 404)

        response = self.client.put("/challenges/status", json={"challenge_id": "beginner-3", "status": "abandoned"})
        self.assertEqual(response.status_code, 200)

        abandoned = self.client.get("/challenges/user", params={"status": "abandoned"}).json()
        self.assertEqual([e["challenge"]["challenge_id"] for e in abandoned], ["beginner-3"])

    def test_auto_assign_without_profile(self):
        response = self.client.post("/challenges/auto-assign")
        self.assertEqual(response.status_code, 404)

    def test_free_walk_flow(self):
        self.create_profile()
        response = self.client.post("/free-walks/start", json={"target_steps": 5000})
        self.assertEqual(response.status_code, 201)
        session_id = response.json()["session_id"]

        self.assertEqual(self.client.post("/free-walks/start", json={}).status_code, 409)

        response = self.client.put(f"/free-walks/{session_id}", json={
            "actual_steps": 1500,
            "route_points": [{"latitude": 52.52, "longitude": 13.40, "timestamp": "2026-10-14T17:05:00"}],
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()["route"]), 1)

        response = self.client.put(f"/free-walks/{session_id}/complete", json={"actual_distance": 1.2, "user_rating": 5})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "completed")

        self.assertEqual(self.client.put(f"/free-walks/{session_id}/cancel").status_code, 400)
        self.assertEqual(self.client.get("/free-walks/").json()["total"], 1)
        self.assertEqual(self.client.get("/free-walks/unknown").status_code, 404)


class TestAuth(unittest.TestCase):
    def setUp(self):
        Base.metadata.create_all(bind=engine)
        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)

    def test_signup_sets_cookie(self):
        response = self.client.post("/users/signup", json={
            "name": "Walker", "email": "Walker@Example.com", "password": "secret123",
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["user"]["email"], "walker@example.com")

        me = self.client.get("/users/me")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["name"], "Walker")

    def test_login(self):
        self.client.post("/users/signup", json={"name": "Walker", "email": "walker@example.com", "password": "secret123"})
        self.client.cookies.clear()

        response = self.client.post("/login/json", json={"email": "walker@example.com", "password": "wrong-password"})
        self.assertEqual(response.status_code, 401)

        response = self.client.post("/login/json", json={"email": "walker@example.com", "password": "secret123"})
        self.assertEqual(response.status_code, 200)
        self.assertIn("access_token", response.json())

    def test_duplicate_signup(self):
        payload = {"name": "Walker", "email": "walker@example.com", "password": "secret123"}
        self.client.post("/users/signup", json=payload)
        response = self.client.post("/users/signup", json={**payload, "email": "WALKER@example.com"})
        self.assertEqual(response.status_code, 409)

    def test_change_password(self):
        self.client.post("/users/signup", json={"name": "Walker", "email": "walker@example.com", "password": "secret123"})

        response = self.client.put("/users/me/password", json={"old_password": "nope", "new_password": "walk-more"})
        self.assertEqual(response.status_code, 400)

        response = self.client.put("/users/me/password", json={"old_password": "secret123", "new_password": "walk-more"})
        self.assertEqual(response.status_code, 200)

        self.client.cookies.clear()
        response = self.client.post("/login/json", json={"email": "walker@example.com", "password": "walk-more"})
        self.assertEqual(response.status_code, 200)

    def test_delete_account_removes_walking_data(self):
        self.client.post("/users/signup", json={"name": "Walker", "email": "walker@example.com", "password": "secret123"})
        self.client.post("/user-profiles/", json=PROFILE)
        self.client.post("/free-walks/start", json={})
        self.client.post("/challenges/generate-auto-walking-challenges")
        self.assertTrue(self.client.get("/users/me").json()["has_profile"])

        response = self.client.delete("/users/me")
        self.assertEqual(response.status_code, 200)

        db = TestingSessionLocal()
        try:
            self.assertEqual(db.query(User).count(), 0)
            self.assertEqual(db.query(FreeWalkSession).count(), 0)
            self.assertEqual(db.query(ChallengeDayProgress).count(), 0)
        finally:
            db.close()

    def test_requires_cookie(self):
        self.assertIn(self.client.get("/workouts/plan/current").status_code, (401, 403))

        self.client.cookies.set("access_token", "not-a-jwt")
        self.assertEqual(self.client.get("/users/me").status_code, 401)


class TestErrorMapping(unittest.TestCase):

    def test_status_codes(self):
        self.assertEqual(to_http_exception(NotFoundError("x")).status_code, 404)
        self.assertEqual(to_http_exception(ConflictError("x")).status_code, 409)
        self.assertEqual(to_http_exception(InvalidStateError("x")).status_code, 400)
        self.assertEqual(to_http_exception(UpstreamUnavailableError("x")).status_code, 503)
        self.assertEqual(to_http_exception(ValueError("bad weeks")).detail, "bad weeks")

if __name__ == '__main__':
    unittest.main()
