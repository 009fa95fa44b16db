from datetime import datetime

from app.models.profile import UserProfile
from app.repositories.profile import ProfileRepository
from app.settings import settings
from app.utils import dates
from app.utils.log import logger

NOT_FOUND = {"found": False, "message": "Could not find email"}


def gift_expiry(start: datetime | None = None) -> datetime:
    return dates.add_months(start or dates.now(), settings.PRO_GIFT_MONTHS)


def list_gifted(repo: ProfileRepository) -> dict:
    profiles = repo.list_gifted()
    return {
        "users": [
            {
                "full_name": p.full_name,
                "email": p.email,
                "plan": p.plan,
                "pro_expires_at": p.summary()["pro_expires_at"],
            }
            for p in profiles
        ]
    }


def search(repo: ProfileRepository, email: str) -> dict:
    profile = repo.get_by_email(email)
    if profile is None:
        return NOT_FOUND
    return {"found": True, "profile": profile.summary()}


def already_pro_response(profile: UserProfile) -> dict:
    expiry = profile.pro_expires_at.date().isoformat()  # type: ignore[union-attr]
    return {
        "error": f"This user already has an active Pro plan (expires {expiry})",
        "already_pro": True,
    }


def gift_pro(repo: ProfileRepository, email: str) -> dict:
    """
    Give the user Pro for PRO_GIFT_MONTHS, unless they already have an unexpired plan.
    """
    profile = repo.get_by_email(email)
    if profile is None:
        return NOT_FOUND

    now = dates.now()
    if profile.has_active_pro(now):
        logger.info(f"{email} already has active pro until {profile.pro_expires_at}")
        return already_pro_response(profile)

    expires_at = gift_expiry(now)
    repo.grant_pro(profile, expires_at=expires_at, message=settings.PRO_GIFT_MESSAGE)

    logger.info(f"Pro gifted to {email}, expires {dates.dt_to_iso(expires_at)}")
    return {
        "success": True,
        "message": f"Pro plan gifted to {email}",
        "expires_at": dates.dt_to_iso(expires_at),
    }
