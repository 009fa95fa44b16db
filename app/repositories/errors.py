class RepoError(Exception):
    """Base class for repository-level errors."""

    pass


# ------------------------- WORKOUT -------------------------


class WorkoutRepoError(RepoError):
    """Generic workout repository error."""

    pass


# ------------------------- PROFILE -------------------------


class ProfileRepoError(RepoError):
    pass


# ------------------------- CLIENT -------------------------


class ClientRepoError(RepoError):
    pass


class ClientNotFoundError(ClientRepoError):
    """Raised when a coach has no client with the given id."""

    pass


# ------------------------- BLOCKLIST -------------------------


class BlockedEmailRepoError(RepoError):
    pass
