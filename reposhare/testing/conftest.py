"""
Pytest plugin for RepoShare SDK testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
automatically discovered by pytest when this package is installed.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["reposhare.testing.conftest"]

Or import the fixtures directly:

    from reposhare.testing.fixtures import mock_client, sample_directory
"""

# Re-export all fixtures for pytest auto-discovery
from reposhare.testing.fixtures import (
    mock_client,
    mock_owner,
    mock_repository_id,
    owner_user,
    sample_directory,
    sample_file,
    sample_repository,
    visitor_user,
)

__all__ = [
    "mock_client",
    "mock_owner",
    "mock_repository_id",
    "owner_user",
    "visitor_user",
    "sample_directory",
    "sample_file",
    "sample_repository",
]
