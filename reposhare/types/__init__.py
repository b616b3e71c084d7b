"""RepoShare SDK type definitions.

This module exports all data model types used by the SDK.
"""

from reposhare.types.contents import (
    ContentResult,
    DirectoryContents,
    DirectoryEntry,
    EntryKind,
    FileContents,
    RepositoryRef,
)
from reposhare.types.repos import Repository, UploadResult, User

__all__ = [
    # Content types
    "RepositoryRef",
    "EntryKind",
    "DirectoryEntry",
    "DirectoryContents",
    "FileContents",
    "ContentResult",
    # Repository and account types
    "Repository",
    "User",
    "UploadResult",
]
