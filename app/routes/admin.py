from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError

from app.models.profile import GiftProRequest
from app.repositories.errors import RepoError
from app.repositories.profile import DynamoProfileRepository, ProfileRepository
from app.settings import settings
from app.utils import auth, entitlements
from app.utils.log import logger

router = APIRouter(tags=["admin"])


def get_profile_repo() -> ProfileRepository:  # pragma: no cover
    return DynamoProfileRepository()


def require_admin(claims=Depends(auth.require_auth)):
    email = claims.get("email")
    if not settings.is_admin(email):
        logger.warning(f"Non-admin {claims.get('sub')} called an admin endpoint")
        raise HTTPException(status_code=403, detail="Unauthorized")
    return claims


@router.post("/gift-pro")
def gift_pro(
    payload: dict | None = Body(default=None),
    claims=Depends(require_admin),
    repo: ProfileRepository = Depends(get_profile_repo),
):
    """Admin tools for Pro gifts: list, search by email, gift."""
    try:
        body = GiftProRequest.model_validate(payload or {})
    except ValidationError:
        raise HTTPException(status_code=400, detail="Bad request")

    logger.info(f"Admin {claims.get('sub')} gift-pro action={body.action}")

    try:
        if body.action == "list":
            return entitlements.list_gifted(repo)
        if body.action == "search":
            return entitlements.search(repo, body.email)  # type: ignore[arg-type]
        return entitlements.gift_pro(repo, body.email)  # type: ignore[arg-type]
    except RepoError:
        logger.exception(f"Error running gift-pro action {body.action}")
        raise HTTPException(status_code=500, detail="Something went wrong")
