from typing import Protocol

import boto3
from botocore.exceptions import ClientError

from app.settings import settings
from app.utils.log import logger


class IdentityError(Exception):
    """Raised when the identity provider refuses an admin operation."""

    pass


class IdentityProvider(Protocol):
    def delete_user(self, username: str) -> None: ...


def get_cognito_client():
    return boto3.client("cognito-idp", region_name=settings.REGION)


class CognitoIdentityProvider:
    """Admin operations against the Cognito user pool."""

    def __init__(self, client=None, user_pool_id: str | None = None):
        self._client = client or get_cognito_client()
        self._user_pool_id = user_pool_id or settings.COGNITO_USER_POOL_ID

    def delete_user(self, username: str) -> None:
        """
        Delete the identity record. A user that is already gone counts as deleted.
        """
        try:
            self._client.admin_delete_user(
                UserPoolId=self._user_pool_id, Username=username
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code == "UserNotFoundException":
                logger.info(f"Identity {username} already deleted")
                return
            logger.exception(f"Cognito admin_delete_user failed: {code}")
            raise IdentityError(
                e.response.get("Error", {}).get("Message") or "Failed to delete user"
            ) from e
