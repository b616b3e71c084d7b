"""RepoShare SDK exception classes."""


class RepoShareError(Exception):
    """Base exception for all RepoShare SDK errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        server_message: str | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        # Only set when the backend answered with an {"error": "..."} body
        self.server_message = server_message
        if status_code is None:
            super().__init__(message)
        else:
            super().__init__(f"[{status_code}] {message}")


class ConfigurationError(RepoShareError):
    """Raised when SDK configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class AuthenticationError(RepoShareError):
    """Raised when the session is missing or expired."""

    pass


class AuthorizationError(RepoShareError):
    """Raised when access is denied (private repository, CSRF failure)."""

    @property
    def is_csrf_failure(self) -> bool:
        return "csrf" in (self.server_message or "").lower()


class NotFoundError(RepoShareError):
    """Raised when a repository, path or user is not found."""

    pass


class ConflictError(RepoShareError):
    """Raised on conflicts (duplicate repository name, etc.)."""

    pass


class RateLimitedError(RepoShareError):
    """Raised when rate limited."""

    def __init__(
        self,
        message: str,
        retry_after: int,
        status_code: int | None = 429,
        server_message: str | None = None,
    ) -> None:
        super().__init__(message, status_code, server_message)
        self.retry_after = retry_after


class ValidationError(RepoShareError):
    """Raised on validation errors."""

    pass


class ServerError(RepoShareError):
    """Raised on server errors (5xx) and connection failures."""

    pass
