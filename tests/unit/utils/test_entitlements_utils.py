from datetime import datetime, timedelta, timezone

import pytest

from app.utils import entitlements
from tests.test_data import USER_EMAIL


class FakeEntitlementRepo:
    def __init__(self, profiles=None, gifted=None):
        self.profiles = {p.email: p for p in profiles or []}
        self.gifted = gifted or []
        self.grants = []

    def get_by_email(self, email):
        return self.profiles.get(email.strip().lower())

    def list_gifted(self):
        return self.gifted

    def grant_pro(self, profile, *, expires_at, message):
        self.grants.append((profile.email, expires_at, message))
        return profile.model_copy(
            update={"plan": "pro", "pro_expires_at": expires_at, "pro_gift_message": message}
        )


# ─────────────────────────────────────────
# list / search
# ─────────────────────────────────────────


def test_list_gifted_shapes_each_user(profile_factory):
    expiry = datetime(2025, 3, 1, tzinfo=timezone.utc)
    repo = FakeEntitlementRepo(
        gifted=[profile_factory(plan="pro", pro_expires_at=expiry)]
    )

    result = entitlements.list_gifted(repo)

    assert result == {
        "users": [
            {
                "full_name": "Test Lifter",
                "email": USER_EMAIL,
                "plan": "pro",
                "pro_expires_at": "2025-03-01T00:00:00Z",
            }
        ]
    }


def test_list_gifted_empty():
    assert entitlements.list_gifted(FakeEntitlementRepo()) == {"users": []}


def test_search_found(profile_factory):
    repo = FakeEntitlementRepo(profiles=[profile_factory()])

    result = entitlements.search(repo, "LIFTER@example.com")

    assert result["found"] is True
    assert result["profile"] == {
        "name": "Test Lifter",
        "email": USER_EMAIL,
        "plan": "free",
        "pro_expires_at": None,
    }


def test_search_not_found():
    result = entitlements.search(FakeEntitlementRepo(), "nobody@example.com")

    assert result == {"found": False, "message": "Could not find email"}


# ─────────────────────────────────────────
# gift
# ─────────────────────────────────────────


def test_gift_pro_grants_one_month(profile_factory, fixed_now):
    repo = FakeEntitlementRepo(profiles=[profile_factory()])

    result = entitlements.gift_pro(repo, USER_EMAIL)

    expected_expiry = datetime(2025, 2, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert result == {
        "success": True,
        "message": f"Pro plan gifted to {USER_EMAIL}",
        "expires_at": "2025-02-02T03:04:05Z",
    }
    ((email, expires_at, message),) = repo.grants
    assert email == USER_EMAIL
    assert expires_at == expected_expiry
    assert message == entitlements.settings.PRO_GIFT_MESSAGE


def test_gift_pro_refuses_active_plan(profile_factory, fixed_now):
    profile = profile_factory(plan="pro", pro_expires_at=fixed_now + timedelta(days=10))
    repo = FakeEntitlementRepo(profiles=[profile])

    result = entitlements.gift_pro(repo, USER_EMAIL)

    assert result == {
        "error": "This user already has an active Pro plan (expires 2025-01-12)",
        "already_pro": True,
    }
    assert repo.grants == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"plan": "pro", "pro_expires_at": datetime(2024, 12, 1, tzinfo=timezone.utc)},
        {"plan": "free", "pro_expires_at": datetime(2030, 1, 1, tzinfo=timezone.utc)},
        {"plan": "pro", "pro_expires_at": None},
    ],
)
def test_gift_pro_allowed_when_plan_not_active(profile_factory, fixed_now, overrides):
    repo = FakeEntitlementRepo(profiles=[profile_factory(**overrides)])

    result = entitlements.gift_pro(repo, USER_EMAIL)

    assert result["success"] is True
    assert len(repo.grants) == 1


def test_gift_pro_unknown_email():
    repo = FakeEntitlementRepo()

    assert entitlements.gift_pro(repo, "ghost@example.com") == entitlements.NOT_FOUND
    assert repo.grants == []


def test_gift_expiry_clamps_to_month_end():
    start = datetime(2025, 1, 31, 9, 0, tzinfo=timezone.utc)

    assert entitlements.gift_expiry(start) == datetime(2025, 2, 28, 9, 0, tzinfo=timezone.utc)
