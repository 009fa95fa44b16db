from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from app.main import app
from app.models.exercise import ExerciseRecord
from app.models.profile import UserProfile
from app.models.workout import Workout, WorkoutSet
from app.settings import settings
from app.utils import auth as auth_utils
from app.utils import dates, db
from app.utils.taxonomy import MuscleGroup
from tests.test_data import (
    TEST_DATE_1,
    TEST_WORKOUT_ID_1,
    USER_EMAIL,
    USER_SUB,
    USERNAME,
)


@pytest.fixture(autouse=True)
def disable_rate_limiting_for_tests():
    settings.RATE_LIMIT_ENABLED = False
    yield
    settings.RATE_LIMIT_ENABLED = True


@pytest.fixture
def fixed_now(monkeypatch) -> datetime:
    now = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    monkeypatch.setattr(dates, "now", lambda: now)
    return now


# --------------- Request ---------------


@pytest.fixture
def make_request_with_headers():
    """
    Fixture returning a function that builds a FastAPI Request with given headers.
    Example:
        request = make_request_with_headers({"authorization": "Bearer abc"})
    """

    def _build(headers: dict) -> Request:
        scope = {
            "type": "http",
            "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
        }
        return Request(scope)

    return _build


# --------------- Test Clients ---------------


@pytest.fixture(scope="session")
def app_instance():
    return app


@pytest.fixture
def client(app_instance):
    """Plain client, real dependencies."""
    return TestClient(app_instance, raise_server_exceptions=False)


@pytest.fixture
def claims() -> dict:
    return {"sub": USER_SUB, "cognito:username": USERNAME, "email": USER_EMAIL}


@pytest.fixture
def authenticated_client(app_instance, claims):
    """
    Client with auth.require_auth overridden to return the `claims` fixture.
    Tests can mutate `claims` before making requests.
    """

    def fake_require_auth(request: Request):
        return claims

    app_instance.dependency_overrides[auth_utils.require_auth] = fake_require_auth
    client = TestClient(app_instance, raise_server_exceptions=False)

    try:
        yield client
    finally:
        app_instance.dependency_overrides.pop(auth_utils.require_auth, None)


# --------------- Item Factories ---------------


@pytest.fixture
def exercise_factory() -> Callable[..., ExerciseRecord]:
    def _make(muscle_group: MuscleGroup | None = MuscleGroup.CHEST, **overrides: Any):
        base = {
            "name": "Bench Press",
            "muscle_group": muscle_group,
            "weight": Decimal("60"),
            "sets": 3,
            "reps": 10,
        }
        return ExerciseRecord(**{**base, **overrides})

    return _make


@pytest.fixture
def workout_factory(fixed_now) -> Callable[..., Workout]:
    def _make(**overrides: Any) -> Workout:
        base = Workout(
            PK=db.build_user_pk(USER_SUB),
            SK=db.build_workout_sk(TEST_DATE_1, TEST_WORKOUT_ID_1),
            type="workout",
            date=TEST_DATE_1,
            name="Push Day",
            user_sub=USER_SUB,
            notes="Processed by AI (OpenAI)",
            audio_path=f"{USER_SUB}/rec.m4a",
            duration_seconds=1800,
            created_at=fixed_now,
            updated_at=fixed_now,
        )
        return base.model_copy(update=overrides)

    return _make


@pytest.fixture
def set_factory(fixed_now) -> Callable[..., WorkoutSet]:
    def _make(**overrides: Any) -> WorkoutSet:
        base = WorkoutSet(
            PK=db.build_user_pk(USER_SUB),
            SK=db.build_set_sk(TEST_DATE_1, TEST_WORKOUT_ID_1, 1),
            type="set",
            exercise_name="Bench Press",
            muscle_group=MuscleGroup.CHEST,
            weight=Decimal("60"),
            sets=3,
            reps=10,
            order_index=0,
            created_at=fixed_now,
            updated_at=fixed_now,
        )
        return base.model_copy(update=overrides)

    return _make


@pytest.fixture
def profile_factory() -> Callable[..., UserProfile]:
    def _make(**overrides: Any) -> UserProfile:
        base = {
            "PK": db.build_user_pk(USER_SUB),
            "SK": "PROFILE",
            "email": USER_EMAIL,
            "full_name": "Test Lifter",
            "role": "athlete",
            "plan": "free",
        }
        return UserProfile(**{**base, **overrides})

    return _make
