"""RepoShare SDK - Python client and repository viewer for RepoShare."""

from reposhare.async_client import AsyncRepoShareClient
from reposhare.client import RepoShareClient
from reposhare.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    RateLimitedError,
    RepoShareError,
    ServerError,
    ValidationError,
)
from reposhare.highlight import HighlightedSource, detect_language, highlight_source
from reposhare.logging import configure_logging, get_logger
from reposhare.paths import (
    Breadcrumb,
    breadcrumbs,
    canonicalize,
    child_path,
    parent_of,
    repository_url,
)
from reposhare.transport import HTTPTransport, RetryConfig
from reposhare.types import (
    DirectoryContents,
    DirectoryEntry,
    EntryKind,
    FileContents,
    Repository,
    RepositoryRef,
    UploadResult,
    User,
)
from reposhare.viewer import (
    Empty,
    Error,
    Loaded,
    Loading,
    RepositoryViewState,
    can_download,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main Clients
    "RepoShareClient",
    "AsyncRepoShareClient",
    # Viewer
    "RepositoryViewState",
    "Loading",
    "Error",
    "Empty",
    "Loaded",
    "can_download",
    # Paths
    "Breadcrumb",
    "canonicalize",
    "parent_of",
    "child_path",
    "breadcrumbs",
    "repository_url",
    # Highlighting
    "HighlightedSource",
    "detect_language",
    "highlight_source",
    # Types
    "RepositoryRef",
    "EntryKind",
    "DirectoryEntry",
    "DirectoryContents",
    "FileContents",
    "Repository",
    "User",
    "UploadResult",
    # Exceptions
    "RepoShareError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitedError",
    "ValidationError",
    "ServerError",
    "ConfigurationError",
    # Transport
    "HTTPTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
