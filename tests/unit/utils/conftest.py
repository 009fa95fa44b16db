import pytest

from app.models.exercise import ExerciseRecord
from app.utils import auth as auth_utils
from app.utils import db
from tests.test_data import USER_SUB

# ─────────────────────────────────────────
# Auth
# ─────────────────────────────────────────


class FakeVerifier:
    """Stands in for TokenVerifier; returns `claims` or raises `error`."""

    def __init__(self, claims=None, error: Exception | None = None):
        self.claims = claims or {"sub": USER_SUB, "exp": 1700000000, "token_use": "id"}
        self.error = error
        self.tokens: list[str] = []

    def verify(self, token: str) -> dict:
        self.tokens.append(token)
        if self.error is not None:
            raise self.error
        return self.claims


@pytest.fixture
def use_verifier(monkeypatch):
    """Install a FakeVerifier as auth.get_verifier() and return it."""

    def _use(**kwargs) -> FakeVerifier:
        verifier = FakeVerifier(**kwargs)
        monkeypatch.setattr(auth_utils, "get_verifier", lambda: verifier)
        return verifier

    return _use


_get_verifier = auth_utils.get_verifier


@pytest.fixture(autouse=True)
def clear_verifier_cache():
    _get_verifier.cache_clear()
    yield
    _get_verifier.cache_clear()


# ─────────────────────────────────────────
# Rate limit table
# ─────────────────────────────────────────


@pytest.fixture
def frozen_time(monkeypatch):
    """
    Freeze db.time.time() to a known timestamp.
    now=125 -> window_id=2, retry_after=55
    """
    now = 125
    monkeypatch.setattr(db.time, "time", lambda: now)
    return now


class FakeCounterTable:
    def __init__(self, count: int):
        self.count = count
        self.last_kwargs = None

    def update_item(self, **kwargs):
        self.last_kwargs = kwargs
        return {"Attributes": {"count": self.count}}


@pytest.fixture
def fake_table_factory():
    def _make(count: int) -> FakeCounterTable:
        return FakeCounterTable(count=count)

    return _make


@pytest.fixture
def use_table(monkeypatch):
    """
    Install a specific fake table as db.get_table() and return it.
    """

    def _use(table):
        monkeypatch.setattr(db, "get_table", lambda: table)
        return table

    return _use


# ─────────────────────────────────────────
# Exercises
# ─────────────────────────────────────────


@pytest.fixture
def exercises() -> list[ExerciseRecord]:
    return [
        ExerciseRecord(name="Bench Press", muscle_group="Chest", weight=60),
        ExerciseRecord(name="Lateral Raises", weight=10),
        ExerciseRecord(name="Tricep Pushdowns", muscle_group="Triceps"),
    ]
