"""
Async HTTP Transport for RepoShare SDK.

Handles async HTTP communication with the session cookie jar, CSRF header
injection, automatic retry of idempotent reads, and error handling using the
httpx async client.
"""

import asyncio
import time
from collections.abc import Callable, Coroutine
from typing import IO, Any

import httpx

from reposhare.exceptions import AuthorizationError, RepoShareError, ServerError
from reposhare.logging import get_logger, log_http_request, log_http_response
from reposhare.transport import (
    _SAFE_METHODS,
    CSRF_COOKIE,
    CSRF_HEADER,
    CSRF_PRIME_PATH,
    RetryConfig,
    get_backoff_time,
    parse_body,
    parse_error_response,
    should_retry,
)

logger = get_logger("http")


class AsyncHTTPTransport:
    """
    Async HTTP transport layer with session cookies, CSRF handling and retry logic.

    Handles:
    - Cookie-based session kept across requests
    - ``X-CSRF-Token`` header on state-changing requests
    - Exponential backoff with jitter for retried GETs
    - Error response parsing into typed exceptions
    - Cancellation: a cancelled request task propagates ``CancelledError``
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "http://localhost:8080/api")
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()
        self._csrf_lock = asyncio.Lock()

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def ensure_csrf_token(self) -> str | None:
        """
        Return the CSRF token from the cookie jar, fetching it if needed.

        Concurrent callers share one priming request.

        Returns:
            Token string, or None if the backend did not provide one
        """
        token = self._client.cookies.get(CSRF_COOKIE)
        if token:
            return token

        async with self._csrf_lock:
            token = self._client.cookies.get(CSRF_COOKIE)
            if token:
                return token
            try:
                await self._client.get(CSRF_PRIME_PATH)
            except httpx.RequestError as e:
                logger.warning("Could not initialise CSRF token: %s", e)
                return None

        token = self._client.cookies.get(CSRF_COOKIE)
        if not token:
            logger.warning("Backend did not set a CSRF token cookie")
        return token

    async def request(
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
            token = await self.ensure_csrf_token()
            if token:
                headers[CSRF_HEADER] = token

        async def make_request() -> httpx.Response:
            log_http_request(method, path, headers=headers, body=body or data)
            return await self._client.request(
                method,
                path,
                params=params,
                json=body,
                data=data,
                files=files,
                headers=headers or None,
            )

        return await self._execute_with_retry(method, path, make_request)

    async def download(self, path: str, sink: IO[bytes]) -> int:
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
            async with self._client.stream("GET", path) as response:
                if response.status_code >= 400:
                    await response.aread()
                    raise self._parse_error_response(response)
                written = 0
                async for chunk in response.aiter_bytes():
                    sink.write(chunk)
                    written += len(chunk)
        except httpx.RequestError as e:
            raise ServerError(str(e) or "Connection failed") from e

        log_http_response(response.status_code, path)
        return written

    async def _execute_with_retry(
        self,
        method: str,
        path: str,
        request_fn: Callable[[], Coroutine[Any, Any, httpx.Response]],
    ) -> Any:
        """
        Execute a request with automatic retry on retryable errors.

        Args:
            method: HTTP method, used to decide if retrying is safe
            path: API path, for logging
            request_fn: Async function that makes the HTTP request

        Returns:
            Parsed JSON response

        Raises:
            RepoShareError: On non-retryable errors or after max retries
        """
        last_error: Exception | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                started = time.monotonic()
                response = await request_fn()
                elapsed_ms = (time.monotonic() - started) * 1000

                if response.status_code < 400:
                    result = parse_body(response)
                    log_http_response(response.status_code, path, result, elapsed_ms)
                    return result

                log_http_response(response.status_code, path, elapsed_ms=elapsed_ms)
                error = self._parse_error_response(response)

                if not should_retry(self.retry_config, method, response.status_code, attempt):
                    raise error

                last_error = error

                retry_after = response.headers.get("Retry-After")
                wait_time = get_backoff_time(self.retry_config, attempt, retry_after)
                await asyncio.sleep(wait_time)

            except httpx.RequestError as e:
                if method not in _SAFE_METHODS or attempt >= self.retry_config.max_retries:
                    raise ServerError(str(e) or "Connection failed") from e

                last_error = e
                wait_time = get_backoff_time(self.retry_config, attempt, None)
                await asyncio.sleep(wait_time)

        if last_error:
            if isinstance(last_error, RepoShareError):
                raise last_error
            raise ServerError(str(last_error))

        raise ServerError("Request failed with no error details")

    def _parse_error_response(self, response: httpx.Response) -> RepoShareError:
        error = parse_error_response(response)
        if isinstance(error, AuthorizationError) and error.is_csrf_failure:
            self._client.cookies.delete(CSRF_COOKIE)
            logger.warning("CSRF validation failed; token will be refreshed")
        return error
