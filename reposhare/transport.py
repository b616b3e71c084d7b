"""
HTTP Transport for RepoShare SDK.

Handles HTTP communication with the session cookie jar, CSRF header injection,
automatic retry of idempotent reads, and error handling.
"""

import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import IO, Any

import httpx

from reposhare.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RateLimitedError,
    RepoShareError,
    ServerError,
    ValidationError,
)
from reposhare.logging import get_logger, log_http_request, log_http_response

CSRF_COOKIE = "csrf_token"
CSRF_HEADER = "X-CSRF-Token"
CSRF_PRIME_PATH = "/health"

_SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

logger = get_logger("http")


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior (GET requests only)."""

    max_retries: int = 3
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 502, 503, 504])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


def get_backoff_time(
    config: RetryConfig, attempt: int, retry_after: str | None
) -> float:
    """
    Calculate backoff time for retry.

    Uses exponential backoff with jitter, respecting Retry-After header
    if present.

    Args:
        config: Retry configuration
        attempt: Current attempt number (0-indexed)
        retry_after: Value of Retry-After header (if present)

    Returns:
        Time to wait in seconds
    """
    if retry_after and config.respect_retry_after:
        try:
            return float(retry_after)
        except ValueError:
            pass  # Fall through to exponential backoff

    base_wait = config.backoff_factor ** attempt

    jitter_range = base_wait * config.jitter
    jitter = random.uniform(-jitter_range, jitter_range)
    wait_time = base_wait + jitter

    return min(wait_time, config.max_backoff)


def should_retry(
    config: RetryConfig, method: str, status_code: int, attempt: int
) -> bool:
    """Retry only idempotent reads, only on retryable statuses, and only while attempts remain."""
    if method.upper() not in _SAFE_METHODS:
        return False
    if attempt >= config.max_retries:
        return False
    return status_code in config.retry_on


def parse_error_response(response: httpx.Response) -> RepoShareError:
    """
    Parse an error response into a typed exception.

    The backend reports failures as ``{"error": "<message>"}``. When that
    message is present it is kept verbatim as ``server_message``.

    Args:
        response: HTTP response with error status

    Returns:
        Appropriate RepoShareError subclass
    """
    try:
        data = response.json()
    except ValueError:
        data = None

    server_message = None
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        server_message = data["error"] or None

    status_code = response.status_code
    message = server_message or f"HTTP {status_code}"

    if status_code == 401:
        return AuthenticationError(message, status_code, server_message)
    elif status_code == 403:
        return AuthorizationError(message, status_code, server_message)
    elif status_code == 404:
        return NotFoundError(message, status_code, server_message)
    elif status_code == 409:
        return ConflictError(message, status_code, server_message)
    elif status_code == 429:
        retry_after_str = response.headers.get("Retry-After", "60")
        try:
            retry_after = int(retry_after_str)
        except ValueError:
            retry_after = 60
        return RateLimitedError(message, retry_after, status_code, server_message)
    elif status_code >= 500:
        return ServerError(message, status_code, server_message)
    else:
        return ValidationError(message, status_code, server_message)


def parse_body(response: httpx.Response) -> Any:
    """Decode a successful JSON response; an empty body decodes to None."""
    if not response.content:
        return None
    return response.json()


class HTTPTransport:
    """
    HTTP transport layer with session cookies, CSRF handling and retry logic.

    Handles:
    - Cookie-based session kept across requests
    - ``X-CSRF-Token`` header on state-changing requests
    - Exponential backoff with jitter for retried GETs
    - Error response parsing into typed exceptions
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
    ) -> None:
        """
        Initialize HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "http://localhost:8080/api")
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def ensure_csrf_token(self) -> str | None:
        """
        Return the CSRF token from the cookie jar, fetching it if needed.

        The backend sets the ``csrf_token`` cookie on any response, so a
        cheap ``GET /health`` primes it.

        Returns:
            Token string, or None if the backend did not provide one
        """
        token = self._client.cookies.get(CSRF_COOKIE)
        if token:
            return token

        try:
            self._client.get(CSRF_PRIME_PATH)
        except httpx.RequestError as e:
            logger.warning("Could not initialise CSRF token: %s", e)
            return None

        token = self._client.cookies.get(CSRF_COOKIE)
        if not token:
            logger.warning("Backend did not set a CSRF token cookie")
        return token

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make a request, adding the CSRF header for state-changing methods.

        Args:
            method: HTTP method
            path: API path relative to the base URL
            params: Query parameters
            body: JSON body (for POST/PUT)
            data: Form fields (for multipart uploads)
            files: Files for multipart uploads

        Returns:
            Parsed JSON response, or None for an empty body

        Raises:
            RepoShareError: On API errors
        """
        method = method.upper()
        headers: dict[str, str] = {}
        if method not in _SAFE_METHODS:
            token = self.ensure_csrf_token()
            if token:
                headers[CSRF_HEADER] = token

        def make_request() -> httpx.Response:
            log_http_request(method, path, headers=headers, body=body or data)
            return self._client.request(
                method,
                path,
                params=params,
                json=body,
                data=data,
                files=files,
                headers=headers or None,
            )

        return self._execute_with_retry(method, path, make_request)

    def download(self, path: str, sink: IO[bytes]) -> int:
        """
        Stream a binary response into ``sink``.

        Args:
            path: API path relative to the base URL
            sink: Writable binary file object

        Returns:
            Number of bytes written

        Raises:
            RepoShareError: On API errors
        """
        log_http_request("GET", path)
        try:
            with self._client.stream("GET", path) as response:
                if response.status_code >= 400:
                    response.read()
                    raise self._parse_error_response(response)
                written = 0
                for chunk in response.iter_bytes():
                    sink.write(chunk)
                    written += len(chunk)
        except httpx.RequestError as e:
            raise ServerError(str(e) or "Connection failed") from e

        log_http_response(response.status_code, path)
        return written

    def _execute_with_retry(
        self, method: str, path: str, request_fn: Callable[[], httpx.Response]
    ) -> Any:
        """
        Execute a request with automatic retry on retryable errors.

        Args:
            method: HTTP method, used to decide if retrying is safe
            path: API path, for logging
            request_fn: Function that makes the HTTP request

        Returns:
            Parsed JSON response

        Raises:
            RepoShareError: On non-retryable errors or after max retries
        """
        last_error: Exception | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                started = time.monotonic()
                response = request_fn()
                elapsed_ms = (time.monotonic() - started) * 1000

                if response.status_code < 400:
                    result = parse_body(response)
                    log_http_response(response.status_code, path, result, elapsed_ms)
                    return result

                log_http_response(response.status_code, path, elapsed_ms=elapsed_ms)
                error = self._parse_error_response(response)

                if not self._should_retry(method, response.status_code, attempt):
                    raise error

                last_error = error

                retry_after = response.headers.get("Retry-After")
                wait_time = self._get_backoff_time(attempt, retry_after)
                time.sleep(wait_time)

            except httpx.RequestError as e:
                # Network errors are retried for reads only
                if method not in _SAFE_METHODS or attempt >= self.retry_config.max_retries:
                    raise ServerError(str(e) or "Connection failed") from e

                last_error = e
                wait_time = self._get_backoff_time(attempt, None)
                time.sleep(wait_time)

        if last_error:
            if isinstance(last_error, RepoShareError):
                raise last_error
            raise ServerError(str(last_error))

        raise ServerError("Request failed with no error details")

    def _should_retry(self, method: str, status_code: int, attempt: int) -> bool:
        return should_retry(self.retry_config, method, status_code, attempt)

    def _get_backoff_time(self, attempt: int, retry_after: str | None) -> float:
        return get_backoff_time(self.retry_config, attempt, retry_after)

    def _parse_error_response(self, response: httpx.Response) -> RepoShareError:
        error = parse_error_response(response)
        if isinstance(error, AuthorizationError) and error.is_csrf_failure:
            # Drop the stale token so the next request re-primes it
            self._client.cookies.delete(CSRF_COOKIE)
            logger.warning("CSRF validation failed; token will be refreshed")
        return error
