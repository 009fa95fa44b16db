from fastapi import APIRouter, Depends, HTTPException

from app.repositories.blocked_email import DynamoBlockedEmailRepository
from app.repositories.client import DynamoClientRepository
from app.repositories.profile import DynamoProfileRepository
from app.repositories.workout import DynamoWorkoutRepository
from app.utils import auth
from app.utils.account import AccountEraser, AccountErasureError
from app.utils.identity import CognitoIdentityProvider
from app.utils.log import logger

router = APIRouter(tags=["account"])


def get_account_eraser() -> AccountEraser:  # pragma: no cover
    return AccountEraser(
        workout_repo=DynamoWorkoutRepository(),
        profile_repo=DynamoProfileRepository(),
        client_repo=DynamoClientRepository(),
        identity=CognitoIdentityProvider(),
        blocklist=DynamoBlockedEmailRepository(),
    )


def _erasure_failed(e: AccountErasureError) -> HTTPException:
    return HTTPException(
        status_code=500,
        detail={"error": "Failed to delete account", "details": str(e)},
    )


@router.post("/delete-account")
def delete_account(
    claims=Depends(auth.require_auth),
    eraser: AccountEraser = Depends(get_account_eraser),
):
    """Delete the caller's account and everything it owns."""
    user_sub = claims["sub"]
    logger.info(f"Deleting account for user {user_sub}")

    try:
        eraser.erase(user_sub, auth.username_from_claims(claims))
    except AccountErasureError as e:
        logger.exception(f"Error deleting account {user_sub}")
        raise _erasure_failed(e)

    return {"success": True, "message": "Account deleted successfully"}


@router.post("/block-account")
def block_account(
    claims=Depends(auth.require_auth),
    eraser: AccountEraser = Depends(get_account_eraser),
):
    """Blocklist the caller's email, then delete the account."""
    user_sub = claims["sub"]
    email = claims.get("email")
    logger.info(f"Blocking account for user {user_sub}")

    try:
        eraser.block(user_sub, auth.username_from_claims(claims), email)
    except AccountErasureError as e:
        logger.exception(f"Error blocking account {user_sub}")
        raise _erasure_failed(e)

    logger.info(f"Account blocked and deleted: {user_sub}")
    return {"success": True, "message": "Account blocked and deleted"}
