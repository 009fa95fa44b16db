from typing import Protocol

from app.models.client import BlockedEmail
from app.repositories.base import DynamoRepository
from app.repositories.errors import BlockedEmailRepoError, RepoError
from app.utils import db
from app.utils.log import logger


class BlockedEmailRepository(Protocol):
    def block(self, blocked: BlockedEmail) -> None: ...
    def is_blocked(self, email: str) -> bool: ...


class DynamoBlockedEmailRepository(DynamoRepository[BlockedEmail]):
    """
    Emails barred from signing up again. Writes are upserts keyed by the
    lower-cased email, so blocking twice just refreshes blocked_at.
    """

    def block(self, blocked: BlockedEmail) -> None:
        email = blocked.email.strip().lower()
        item = blocked.model_copy(update={"email": email}).to_ddb_item(
            db.build_blocked_email_pk(email)
        )

        try:
            self._safe_put(item)
        except RepoError as e:
            logger.error(f"Repo error blocking email: {e}")
            raise BlockedEmailRepoError("Failed to block email") from e

    def is_blocked(self, email: str) -> bool:
        key = {"PK": db.build_blocked_email_pk(email), "SK": "BLOCKED"}

        try:
            return self._safe_get(Key=key) is not None
        except RepoError as e:
            logger.error(f"Repo error checking blocklist: {e}")
            raise BlockedEmailRepoError("Failed to check blocklist") from e
