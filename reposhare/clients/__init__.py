"""RepoShare SDK resource clients."""

from reposhare.clients.auth import AuthClient
from reposhare.clients.files import FilesClient
from reposhare.clients.repositories import RepositoriesClient

__all__ = [
    "AuthClient",
    "FilesClient",
    "RepositoriesClient",
]
