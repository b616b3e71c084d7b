"""RepoShare SDK async resource clients."""

from reposhare.async_clients.auth import AsyncAuthClient
from reposhare.async_clients.files import AsyncFilesClient
from reposhare.async_clients.repositories import AsyncRepositoriesClient

__all__ = [
    "AsyncAuthClient",
    "AsyncFilesClient",
    "AsyncRepositoriesClient",
]
