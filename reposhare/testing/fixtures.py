"""
Pytest fixtures for RepoShare SDK testing.

Provides common fixtures and factory helpers for testing applications that
use the RepoShare SDK.
"""

from datetime import datetime
from typing import Any, Generator

import pytest

from reposhare.testing.mock import MockRepoShareClient
from reposhare.types.contents import DirectoryContents, DirectoryEntry, FileContents
from reposhare.types.repos import Repository, User


# ============================================================================
# Mock Client Fixtures
# ============================================================================


@pytest.fixture
def mock_client() -> Generator[MockRepoShareClient, None, None]:
    """
    Provide a MockRepoShareClient signed in as "test-owner".

    Example:
        ```python
        def test_my_view(mock_client, sample_directory):
            mock_client.files.configure_get_contents(response=sample_directory)
            view = mock_client.viewer()
            state = asyncio.run(view.navigate("test-owner", "repo", ""))
        ```
    """
    client = MockRepoShareClient(username="test-owner")
    yield client
    client.reset()


@pytest.fixture
def mock_owner() -> str:
    """Provide the username that owns test repositories."""
    return "test-owner"


@pytest.fixture
def mock_repository_id() -> str:
    """Provide a test repository ID."""
    return "test-repo-uuid"


@pytest.fixture
def owner_user() -> User:
    """The signed-in owner of the test repository."""
    return create_mock_user(username="test-owner")


@pytest.fixture
def visitor_user() -> User:
    """A signed-in user who does not own the test repository."""
    return create_mock_user(username="test-visitor")


# ============================================================================
# Content Fixtures
# ============================================================================


@pytest.fixture
def sample_directory() -> DirectoryContents:
    """A repository root with one file and one sub-directory."""
    return create_mock_directory(entries=["README.md", "docs/"])


@pytest.fixture
def sample_file() -> FileContents:
    """A small Python file."""
    return create_mock_file(filepath="src/main.py", data="print('hello')\n")


@pytest.fixture
def sample_repository() -> Repository:
    """Provide a sample Repository object."""
    return create_mock_repository()


# ============================================================================
# Helper Functions (non-fixture)
# ============================================================================


def create_mock_user(username: str = "test-user", **kwargs: Any) -> User:
    """Create a mock User with optional overrides."""
    return User(
        username=username,
        id=kwargs.get("id", f"{username}-id"),
        email=kwargs.get("email", f"{username}@example.com"),
    )


def create_mock_directory(
    entries: list[Any] | None = None,
    repository_name: str | None = "test-repo",
    download_allowed: bool = False,
    directory: str = "",
) -> DirectoryContents:
    """
    Create a mock directory listing.

    Args:
        entries: Wire-form names ("docs/" for directories) or DirectoryEntry objects
        repository_name: Display name of the repository
        download_allowed: Whether non-owners may download
        directory: Path of the listed directory

    Returns:
        DirectoryContents object
    """
    parsed = [
        entry if isinstance(entry, DirectoryEntry) else DirectoryEntry.from_wire(entry)
        for entry in (entries or [])
    ]
    return DirectoryContents(
        repository_name=repository_name,
        entries=parsed,
        download_allowed=download_allowed,
        directory=directory,
    )


def create_mock_file(
    filepath: str = "README.md",
    data: str = "# test\n",
    repository_name: str | None = "test-repo",
    download_allowed: bool = False,
) -> FileContents:
    """Create a mock file result with optional overrides."""
    return FileContents(
        repository_name=repository_name,
        filepath=filepath,
        data=data,
        download_allowed=download_allowed,
    )


def create_mock_repository(
    uuid: str = "test-repo-uuid",
    name: str = "test-repo",
    public: bool = True,
    **kwargs: Any,
) -> Repository:
    """
    Create a mock Repository with optional overrides.

    Args:
        uuid: Repository UUID
        name: Repository name
        public: Visibility
        **kwargs: Additional fields (id, owner_id, created_at, updated_at)

    Returns:
        Repository object
    """
    return Repository(
        uuid=uuid,
        name=name,
        public=public,
        id=kwargs.get("id", 1),
        owner_id=kwargs.get("owner_id", 1),
        created_at=kwargs.get("created_at", datetime.now()),
        updated_at=kwargs.get("updated_at"),
    )
