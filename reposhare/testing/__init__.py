"""RepoShare SDK testing utilities.

Provides mock clients and fixtures for testing applications that use the RepoShare SDK.
"""

from reposhare.testing.fixtures import (
    create_mock_directory,
    create_mock_file,
    create_mock_repository,
    create_mock_user,
)
from reposhare.testing.mock import (
    MockCall,
    MockFilesClient,
    MockRepoShareClient,
    MockResponse,
)

__all__ = [
    # Mock client
    "MockRepoShareClient",
    "MockFilesClient",
    "MockCall",
    "MockResponse",
    # Helper functions
    "create_mock_directory",
    "create_mock_file",
    "create_mock_repository",
    "create_mock_user",
]
