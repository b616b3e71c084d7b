"""
RepoShare SDK main client.

Provides the primary interface for interacting with the RepoShare API.
"""

import os
from typing import Any

from reposhare.clients import AuthClient, FilesClient, RepositoriesClient
from reposhare.exceptions import ConfigurationError
from reposhare.transport import HTTPTransport, RetryConfig

DEFAULT_BASE_URL = "http://localhost:8080/api"
DEFAULT_TIMEOUT = 30.0


def settings_from_env(default_timeout: float) -> tuple[str, float]:
    """
    Read the base URL and timeout from the environment.

    Environment variables:
        REPOSHARE_API_URL: Base URL for API (optional, default: http://localhost:8080/api)
        REPOSHARE_TIMEOUT: Request timeout in seconds (optional)

    Raises:
        ConfigurationError: If a variable is set to an invalid value
    """
    base_url = os.environ.get("REPOSHARE_API_URL") or DEFAULT_BASE_URL
    if not base_url.startswith(("http://", "https://")):
        raise ConfigurationError(
            f"Invalid REPOSHARE_API_URL: {base_url}. Must start with http:// or https://"
        )

    timeout_str = os.environ.get("REPOSHARE_TIMEOUT")
    if not timeout_str:
        return base_url, default_timeout
    try:
        timeout = float(timeout_str)
    except ValueError:
        raise ConfigurationError(
            f"Invalid REPOSHARE_TIMEOUT: {timeout_str}. Must be a number of seconds"
        ) from None
    if timeout <= 0:
        raise ConfigurationError("REPOSHARE_TIMEOUT must be positive")
    return base_url, timeout


class RepoShareClient:
    """
    Main client for interacting with the RepoShare API.

    Aggregates all resource clients over one cookie session.

    Example:
        ```python
        from reposhare import RepoShareClient

        with RepoShareClient.from_env() as client:
            client.auth.login("alice", "correct horse")
            for repo in client.repositories.list():
                print(repo.name, repo.public)

            contents = client.files.get_contents("alice", repo.uuid)
        ```
    """

    DEFAULT_BASE_URL = DEFAULT_BASE_URL
    DEFAULT_TIMEOUT = DEFAULT_TIMEOUT

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> None:
        """
        Initialize the RepoShare client.

        Args:
            base_url: Base URL for API requests (default: http://localhost:8080/api)
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
        """
        self.base_url = base_url
        self.timeout = timeout

        # Create transport layer
        self._transport = HTTPTransport(
            base_url=base_url,
            timeout=timeout,
            retry_config=retry_config,
        )

        # Initialize resource clients
        self.auth = AuthClient(self._transport)
        self.files = FilesClient(self._transport)
        self.repositories = RepositoriesClient(self._transport)

    @classmethod
    def from_env(
        cls,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> "RepoShareClient":
        """
        Create a client from environment variables.

        See ``settings_from_env`` for the variables read.

        Raises:
            ConfigurationError: If an environment variable is invalid
        """
        base_url, timeout = settings_from_env(timeout)
        return cls(base_url=base_url, timeout=timeout, retry_config=retry_config)

    @property
    def transport(self) -> HTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    def close(self) -> None:
        """Close the client and release resources."""
        self._transport.close()

    def __enter__(self) -> "RepoShareClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit - closes the client."""
        self.close()
