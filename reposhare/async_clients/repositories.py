"""Async repositories resource client."""

from typing import TYPE_CHECKING
from urllib.parse import quote

from reposhare.clients.repositories import parse_repository
from reposhare.types.repos import Repository

if TYPE_CHECKING:
    from reposhare.async_transport import AsyncHTTPTransport


class AsyncRepositoriesClient:
    """Async client for the signed-in user's repositories."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the async repositories client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def list(self) -> list[Repository]:
        """List repositories owned by the signed-in user."""
        response = await self.transport.request(method="GET", path="/repositories")
        return [parse_repository(repo) for repo in response or []]

    async def create(self, name: str, public: bool = False) -> Repository:
        """
        Create an empty repository.

        Args:
            name: Repository name
            public: Whether the repository is publicly visible

        Returns:
            The created Repository
        """
        response = await self.transport.request(
            method="POST",
            path="/repositories",
            body={"name": name, "public": public},
        )
        return parse_repository(response)

    async def update_visibility(self, uuid: str, public: bool) -> Repository:
        """Make a repository public or private."""
        response = await self.transport.request(
            method="PUT",
            path=f"/repositories/{quote(uuid, safe='')}/visibility",
            body={"public": public},
        )
        return parse_repository(response)

    async def delete(self, uuid: str) -> None:
        """Delete a repository and all of its files."""
        await self.transport.request(
            method="DELETE",
            path=f"/repositories/{quote(uuid, safe='')}",
        )
