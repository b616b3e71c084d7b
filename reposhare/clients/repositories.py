"""Repositories resource client."""

from datetime import datetime
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from reposhare.types.repos import Repository

if TYPE_CHECKING:
    from reposhare.transport import HTTPTransport


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.rstrip("Z"))


def parse_repository(data: dict[str, Any]) -> Repository:
    """Parse repository data as returned by the repositories endpoints."""
    return Repository(
        uuid=data["uuid"],
        name=data["name"],
        public=bool(data.get("public", False)),
        id=data.get("id"),
        owner_id=data.get("owner_id"),
        created_at=_parse_timestamp(data.get("created_at")),
        updated_at=_parse_timestamp(data.get("updated_at")),
    )


class RepositoriesClient:
    """Client for the signed-in user's repositories."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the repositories client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def list(self) -> list[Repository]:
        """
        List repositories owned by the signed-in user.

        Returns:
            List of Repository objects

        Raises:
            AuthenticationError: If not signed in
        """
        response = self.transport.request(method="GET", path="/repositories")
        return [parse_repository(repo) for repo in response or []]

    def create(self, name: str, public: bool = False) -> Repository:
        """
        Create an empty repository.

        Args:
            name: Repository name
            public: Whether the repository is publicly visible

        Returns:
            The created Repository

        Raises:
            ConflictError: If a repository with that name exists
        """
        response = self.transport.request(
            method="POST",
            path="/repositories",
            body={"name": name, "public": public},
        )
        return parse_repository(response)

    def update_visibility(self, uuid: str, public: bool) -> Repository:
        """
        Make a repository public or private.

        Private repositories never allow downloads by other users.

        Args:
            uuid: Repository UUID
            public: New visibility

        Returns:
            The updated Repository
        """
        response = self.transport.request(
            method="PUT",
            path=f"/repositories/{quote(uuid, safe='')}/visibility",
            body={"public": public},
        )
        return parse_repository(response)

    def delete(self, uuid: str) -> None:
        """
        Delete a repository and all of its files.

        Args:
            uuid: Repository UUID

        Raises:
            NotFoundError: If the repository does not exist
        """
        self.transport.request(
            method="DELETE",
            path=f"/repositories/{quote(uuid, safe='')}",
        )
