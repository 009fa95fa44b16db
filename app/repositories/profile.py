from datetime import datetime
from typing import List, Protocol

from boto3.dynamodb.conditions import Attr, Key

from app.models.profile import UserProfile
from app.repositories.base import DynamoRepository
from app.repositories.errors import ProfileRepoError, RepoError
from app.settings import settings
from app.utils import db
from app.utils.dates import dt_to_iso
from app.utils.log import logger

PROFILE_SK = "PROFILE"


class ProfileRepository(Protocol):
    def get_for_user(self, user_sub: str) -> UserProfile | None: ...
    def get_by_email(self, email: str) -> UserProfile | None: ...
    def list_gifted(self) -> List[UserProfile]: ...
    def grant_pro(
        self, profile: UserProfile, *, expires_at: datetime, message: str
    ) -> UserProfile: ...
    def delete_for_user(self, user_sub: str) -> None: ...


class DynamoProfileRepository(DynamoRepository[UserProfile]):
    """
    Repository for the user profile
    """

    def _to_model(self, item: dict) -> UserProfile:
        try:
            return UserProfile.model_validate(item)
        except Exception as e:
            logger.error(f"_to_model failed for profile: {e}")
            raise ProfileRepoError("Failed to create profile model from item") from e

    def get_for_user(self, user_sub: str) -> UserProfile | None:
        key = {"PK": db.build_user_pk(user_sub), "SK": PROFILE_SK}

        try:
            item = self._safe_get(Key=key, ConsistentRead=True)
        except RepoError as e:
            logger.error(f"Repo error fetching profile for {user_sub}: {e}")
            raise ProfileRepoError("Failed to fetch profile from database") from e

        if not item:
            logger.warning(f"User profile not found for user_sub={user_sub}")
            return None

        return self._to_model(item)

    def get_by_email(self, email: str) -> UserProfile | None:
        """Case-insensitive lookup via the email GSI (emails are stored lower-cased)."""
        target = email.strip().lower()

        try:
            items = self._safe_query(
                IndexName=settings.DDB_EMAIL_INDEX,
                KeyConditionExpression=Key("email").eq(target),
            )
        except RepoError as e:
            logger.error(f"Repo error searching profile by email: {e}")
            raise ProfileRepoError("Failed to search profiles") from e

        profiles = [i for i in items if i.get("SK") == PROFILE_SK]
        if not profiles:
            return None
        if len(profiles) > 1:
            logger.warning(f"{len(profiles)} profiles share one email, using the first")

        return self._to_model(profiles[0])

    def list_gifted(self) -> List[UserProfile]:
        """Profiles that have ever had a Pro expiry set, latest expiry first."""
        try:
            items = self._safe_scan(
                FilterExpression=Attr("SK").eq(PROFILE_SK)
                & Attr("pro_expires_at").exists()
            )
        except RepoError as e:
            logger.error(f"Repo error listing gifted profiles: {e}")
            raise ProfileRepoError("Failed to list gifted profiles") from e

        profiles = [self._to_model(i) for i in items]
        profiles = [p for p in profiles if p.pro_expires_at is not None]
        profiles.sort(key=lambda p: p.pro_expires_at, reverse=True)  # type: ignore[arg-type, return-value]
        return profiles

    def grant_pro(
        self, profile: UserProfile, *, expires_at: datetime, message: str
    ) -> UserProfile:
        try:
            resp = self._safe_update(
                Key={"PK": profile.PK, "SK": PROFILE_SK},
                UpdateExpression="SET #plan = :plan, pro_expires_at = :exp, pro_gift_message = :msg",
                ExpressionAttributeNames={"#plan": "plan"},
                ExpressionAttributeValues={
                    ":plan": "pro",
                    ":exp": dt_to_iso(expires_at),
                    ":msg": message,
                },
                ConditionExpression="attribute_exists(PK) AND attribute_exists(SK)",
                ReturnValues="ALL_NEW",
            )
        except RepoError as e:
            logger.error(f"Repo error granting pro to {profile.email}: {e}")
            raise ProfileRepoError("Failed to grant pro plan") from e

        attrs = resp.get("Attributes")
        if not attrs:
            raise ProfileRepoError("Pro grant returned no attributes")

        return self._to_model(attrs)

    def delete_for_user(self, user_sub: str) -> None:
        try:
            self._safe_batch_delete([{"PK": db.build_user_pk(user_sub), "SK": PROFILE_SK}])
        except RepoError as e:
            logger.error(f"Repo error deleting profile for {user_sub}: {e}")
            raise ProfileRepoError("Failed to delete profile") from e
