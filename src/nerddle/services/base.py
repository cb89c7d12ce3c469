"""Exceptions shared by the domain services."""


class NerddleError(Exception):
    """Base exception for rejected operations.

    Every rejection is raised before anything is written, so the stored
    state is left as it was.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(NerddleError):
    """Raised when input is missing, blank or malformed."""


class AuthenticationError(NerddleError):
    """Raised when credentials are rejected or no one is logged in."""

    def __init__(self, message: str = "Invalid username or password") -> None:
        super().__init__(message)


class AuthorizationError(NerddleError):
    """Raised when the acting user lacks the role for an operation."""

    def __init__(self, message: str = "Admin access required") -> None:
        super().__init__(message)


class RateLimitError(NerddleError):
    """Raised when an author posts again before the cooldown elapsed."""

    def __init__(
        self,
        message: str = "You may only post one blog per hour",
        retry_after: int | None = None,
    ) -> None:
        super().__init__(message)
        self.retry_after = retry_after
