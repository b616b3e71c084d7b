"""
RepoShare SDK async client.

Provides the async interface for interacting with the RepoShare API and
builds repository viewers on top of it.
"""

from typing import Any

from reposhare.async_clients import (
    AsyncAuthClient,
    AsyncFilesClient,
    AsyncRepositoriesClient,
)
from reposhare.async_transport import AsyncHTTPTransport
from reposhare.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, settings_from_env
from reposhare.transport import RetryConfig
from reposhare.types.repos import User
from reposhare.viewer import RepositoryViewState


class AsyncRepoShareClient:
    """
    Async client for interacting with the RepoShare API.

    Aggregates all async resource clients over one cookie session.
    Uses httpx for async HTTP operations.

    Example:
        ```python
        import asyncio
        from reposhare import AsyncRepoShareClient

        async def main():
            async with AsyncRepoShareClient.from_env() as client:
                user = await client.auth.login("alice", "correct horse")
                view = client.viewer(current_user=user)
                await view.navigate("alice", "3f2c...", "docs")

        asyncio.run(main())
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
        Initialize the async RepoShare client.

        Args:
            base_url: Base URL for API requests (default: http://localhost:8080/api)
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
        """
        self.base_url = base_url
        self.timeout = timeout

        # Create async transport layer
        self._transport = AsyncHTTPTransport(
            base_url=base_url,
            timeout=timeout,
            retry_config=retry_config,
        )

        # Initialize async resource clients
        self.auth = AsyncAuthClient(self._transport)
        self.files = AsyncFilesClient(self._transport)
        self.repositories = AsyncRepositoriesClient(self._transport)

    @classmethod
    def from_env(
        cls,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> "AsyncRepoShareClient":
        """
        Create an async client from environment variables.

        Raises:
            ConfigurationError: If an environment variable is invalid
        """
        base_url, timeout = settings_from_env(timeout)
        return cls(base_url=base_url, timeout=timeout, retry_config=retry_config)

    def viewer(self, current_user: User | None = None) -> RepositoryViewState:
        """Create a repository viewer backed by this client's files API."""
        return RepositoryViewState(self.files, current_user=current_user)

    @property
    def transport(self) -> AsyncHTTPTransport:
        """Get the underlying async HTTP transport (for advanced use cases)."""
        return self._transport

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._transport.close()

    async def __aenter__(self) -> "AsyncRepoShareClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit - closes the client."""
        await self.close()
