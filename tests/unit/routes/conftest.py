import pytest

from app.routes import account as account_routes
from app.routes import admin as admin_routes
from app.routes import workout as workout_routes
from app.utils.account import AccountEraser
from app.utils.workout_processing import WorkoutPipeline
from tests.unit._fakes import (
    FakeAudioStore,
    FakeBlocklist,
    FakeClientRepo,
    FakeIdentity,
    FakeModel,
    FakeProfileRepo,
    RecordingWorkoutRepo,
)

# ---------------- Workout --------------------


@pytest.fixture
def install_pipeline(app_instance):
    """
    Override get_workout_pipeline() with one built from in-memory fakes.

    Usage:
        repo = install_pipeline(FakeModel("..."), clients=["c-1"])
    """

    def _install(model: FakeModel, *, clients=None) -> RecordingWorkoutRepo:
        repo = RecordingWorkoutRepo()
        pipeline = WorkoutPipeline(
            audio_store=FakeAudioStore(),
            transcriber=model,
            extractor=model,
            workout_repo=repo,
            client_repo=FakeClientRepo(clients=clients),
        )
        app_instance.dependency_overrides[workout_routes.get_workout_pipeline] = (
            lambda: pipeline
        )
        return repo

    try:
        yield _install
    finally:
        app_instance.dependency_overrides.pop(workout_routes.get_workout_pipeline, None)


@pytest.fixture
def broken_pipeline(app_instance):
    """
    Override get_workout_pipeline() with a pipeline whose process() raises.
    """

    def _install(exc: Exception) -> None:
        class Broken:
            def process(self, request, user_sub):
                raise exc

        app_instance.dependency_overrides[workout_routes.get_workout_pipeline] = (
            lambda: Broken()
        )

    try:
        yield _install
    finally:
        app_instance.dependency_overrides.pop(workout_routes.get_workout_pipeline, None)


# ---------------- Account --------------------


@pytest.fixture
def fake_eraser(app_instance, profile_factory):
    """
    Override get_account_eraser() with an eraser over in-memory fakes.
    """
    workout_repo = RecordingWorkoutRepo()
    events = workout_repo.events
    eraser = AccountEraser(
        workout_repo=workout_repo,
        profile_repo=FakeProfileRepo(profile_factory(), events),
        client_repo=FakeClientRepo(events=events),
        identity=FakeIdentity(events),
        blocklist=FakeBlocklist(events),
    )
    app_instance.dependency_overrides[account_routes.get_account_eraser] = (
        lambda: eraser
    )
    try:
        yield eraser
    finally:
        app_instance.dependency_overrides.pop(account_routes.get_account_eraser, None)


# ---------------- Admin --------------------


class FakeGiftRepo:
    def __init__(self, profiles=None, gifted=None, error: Exception | None = None):
        self.profiles = {p.email: p for p in profiles or []}
        self.gifted = gifted or []
        self.error = error
        self.grants = []

    def _check(self):
        if self.error:
            raise self.error

    def get_by_email(self, email):
        self._check()
        return self.profiles.get(email)

    def list_gifted(self):
        self._check()
        return self.gifted

    def grant_pro(self, profile, *, expires_at, message):
        self._check()
        self.grants.append((profile.email, expires_at))
        return profile


@pytest.fixture
def fake_gift_repo(app_instance):
    """
    Override the admin routes' get_profile_repo() for the duration of a test.
    """

    def _make(**kwargs) -> FakeGiftRepo:
        repo = FakeGiftRepo(**kwargs)
        app_instance.dependency_overrides[admin_routes.get_profile_repo] = (
            lambda: repo
        )
        return repo

    try:
        yield _make
    finally:
        app_instance.dependency_overrides.pop(admin_routes.get_profile_repo, None)
