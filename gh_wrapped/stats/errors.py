class StatsError(Exception):
    """Base class for failures while deriving wrapped statistics."""


class UserNotFoundError(StatsError):
    """Raised when the payload carries no user.

    GitHub answers with a null user when the login does not exist or the
    token cannot see it. This is not the same as a user with no activity.
    """


class MalformedPayloadError(StatsError):
    """Raised when the raw payload breaks the expected GraphQL contract."""
