from dataclasses import dataclass

from app.models.client import BlockedEmail
from app.repositories.blocked_email import BlockedEmailRepository
from app.repositories.client import ClientRepository
from app.repositories.errors import RepoError
from app.repositories.profile import ProfileRepository
from app.repositories.workout import WorkoutRepository
from app.settings import settings
from app.utils import dates, db
from app.utils.identity import IdentityError, IdentityProvider
from app.utils.log import logger


class AccountErasureError(Exception):
    """Raised when an account could not be fully erased after every attempt."""

    pass


@dataclass
class AccountEraser:
    """
    Cascade-deletes a user in foreign-key order:

        own workouts (sets first) -> clients' workouts (sets first)
        -> clients -> profile -> identity

    Each step only deletes what is still there, so a retry after a partial
    failure picks up where the last attempt stopped.
    """

    workout_repo: WorkoutRepository
    profile_repo: ProfileRepository
    client_repo: ClientRepository
    identity: IdentityProvider
    blocklist: BlockedEmailRepository | None = None

    def _erase_once(self, user_sub: str, username: str) -> None:
        self.workout_repo.delete_all_for_owner(db.build_user_pk(user_sub))

        # client items sit in the user's own partition whatever their role
        clients = self.client_repo.list_for_coach(user_sub)
        if clients:
            profile = self.profile_repo.get_for_user(user_sub)
            if profile is None or not profile.is_coach:
                logger.warning(f"Non-coach {user_sub} has {len(clients)} clients")
            logger.debug(f"User {user_sub} has {len(clients)} clients to remove")
        for client in clients:
            self.workout_repo.delete_all_for_owner(db.build_client_pk(client.client_id))
        self.client_repo.delete_all_for_coach(user_sub)

        self.profile_repo.delete_for_user(user_sub)
        self.identity.delete_user(username)

    def erase(self, user_sub: str, username: str) -> None:
        attempts = max(1, settings.ACCOUNT_ERASE_ATTEMPTS)

        for attempt in range(1, attempts + 1):
            try:
                self._erase_once(user_sub, username)
            except (RepoError, IdentityError) as e:
                logger.warning(
                    f"Erasing account {user_sub} failed on attempt {attempt}/{attempts}: {e}"
                )
                if attempt == attempts:
                    raise AccountErasureError(str(e)) from e
                continue

            logger.info(f"Account {user_sub} erased")
            return

    def block(self, user_sub: str, username: str, email: str | None) -> None:
        """Add the email to the blocklist, then erase the account."""
        if email and self.blocklist is not None:
            try:
                self.blocklist.block(
                    BlockedEmail(
                        email=email.strip().lower(),
                        blocked_at=dates.now(),
                        reason=settings.BLOCK_REASON,
                    )
                )
            except RepoError as e:
                raise AccountErasureError(str(e)) from e
        elif not email:
            logger.warning(f"User {user_sub} has no email, skipping blocklist")

        self.erase(user_sub, username)
