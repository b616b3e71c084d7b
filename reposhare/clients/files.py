"""Repository contents, archive download and upload client."""

from pathlib import Path
from typing import IO, TYPE_CHECKING, Any
from urllib.parse import quote

from reposhare.paths import canonicalize, split_path
from reposhare.types.contents import (
    ContentResult,
    DirectoryContents,
    DirectoryEntry,
    FileContents,
)
from reposhare.types.repos import UploadResult

if TYPE_CHECKING:
    from reposhare.transport import HTTPTransport


def _get(data: dict[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    """Get value from dict, trying camelCase first then snake_case."""
    return data.get(camel) if camel in data else data.get(snake, default)


def contents_path(owner: str, repository_id: str, path: str = "") -> str:
    """API path of ``GET /{owner}/{repository_id}/{path}`` with each segment quoted."""
    segments = [quote(segment, safe="") for segment in split_path(path)]
    return f"/{quote(owner, safe='')}/{quote(repository_id, safe='')}/{canonicalize(segments)}"


def archive_path(owner: str, repository_id: str) -> str:
    """API path of ``GET /{owner}/zip/{repository_id}``."""
    return f"/{quote(owner, safe='')}/zip/{quote(repository_id, safe='')}"


def partial_path(destination: Path) -> Path:
    """Sibling file an archive is streamed into before it is renamed into place."""
    return destination.with_name(f".{destination.name}.part")


def classify_contents(payload: Any) -> ContentResult | None:
    """
    Turn a contents response body into a typed result.

    The ``isDirectory`` flag sent by the backend decides the variant. A
    missing or empty body yields None. Permission is granted only by a
    literal ``true`` in ``download_allowed``.

    Args:
        payload: Decoded JSON body

    Returns:
        DirectoryContents, FileContents, or None

    Raises:
        ValueError: If a file body carries non-string ``data`` or ``filepath``
    """
    if not payload or not isinstance(payload, dict):
        return None

    repository_name = _get(payload, "repoName", "repo_name")
    if repository_name is not None and not isinstance(repository_name, str):
        repository_name = str(repository_name)
    download_allowed = _get(payload, "downloadAllowed", "download_allowed", False) is True

    if _get(payload, "isDirectory", "is_directory", False) is True:
        return DirectoryContents(
            repository_name=repository_name,
            entries=[DirectoryEntry.from_wire(raw) for raw in payload.get("entries") or []],
            download_allowed=download_allowed,
            directory=canonicalize(split_path(payload.get("directory"))),
        )

    filepath = payload.get("filepath") or ""
    data = payload.get("data") or ""
    if not isinstance(filepath, str) or not isinstance(data, str):
        raise ValueError("Malformed file contents: filepath and data must be strings")

    return FileContents(
        repository_name=repository_name,
        filepath=filepath,
        data=data,
        download_allowed=download_allowed,
    )


def upload_form(repository_name: str, public: bool) -> dict[str, str]:
    return {
        "repository_name": repository_name,
        "public": "true" if public else "false",
    }


def parse_upload_result(data: Any) -> UploadResult:
    data = data or {}
    return UploadResult(repository_uuid=_get(data, "repoUuid", "repo_uuid", ""))


class FilesClient:
    """Client for browsing, downloading and uploading repository files."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the files client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def get_contents(
        self, owner: str, repository_id: str, path: str = ""
    ) -> ContentResult | None:
        """
        Get a directory listing or a file's content.

        Args:
            owner: Username of the repository owner
            repository_id: Repository UUID
            path: Path inside the repository ("" for the root)

        Returns:
            DirectoryContents or FileContents, or None if the body was empty

        Raises:
            NotFoundError: If the repository or path does not exist
            AuthorizationError: If the repository is private
        """
        response = self.transport.request(
            method="GET",
            path=contents_path(owner, repository_id, path),
        )
        return classify_contents(response)

    def download_archive(
        self,
        owner: str,
        repository_id: str,
        destination: str | Path | IO[bytes],
    ) -> int:
        """
        Download the whole repository as a zip archive.

        A file path is only created once the whole archive has arrived; a
        failed download leaves nothing behind.

        Args:
            owner: Username of the repository owner
            repository_id: Repository UUID
            destination: File path or writable binary file object

        Returns:
            Number of bytes written

        Raises:
            AuthorizationError: If downloading is not allowed
        """
        path = archive_path(owner, repository_id)
        if not isinstance(destination, (str, Path)):
            return self.transport.download(path, destination)

        target = Path(destination)
        partial = partial_path(target)
        try:
            with partial.open("wb") as sink:
                written = self.transport.download(path, sink)
        except BaseException:
            partial.unlink(missing_ok=True)
            raise
        partial.replace(target)
        return written

    def upload_file(
        self, file_path: str | Path, repository_name: str, public: bool = False
    ) -> UploadResult:
        """
        Upload a single file as a new repository.

        Args:
            file_path: Local file to upload
            repository_name: Name of the repository to create
            public: Whether the repository is publicly visible

        Returns:
            UploadResult with the new repository's UUID
        """
        return self._upload("file", file_path, repository_name, public)

    def upload_zip(
        self, zip_path: str | Path, repository_name: str, public: bool = False
    ) -> UploadResult:
        """
        Upload a zip archive; the backend expands it into a repository.

        Args:
            zip_path: Local .zip file to upload
            repository_name: Name of the repository to create
            public: Whether the repository is publicly visible

        Returns:
            UploadResult with the new repository's UUID
        """
        return self._upload("zip_file", zip_path, repository_name, public)

    def _upload(
        self, field: str, file_path: str | Path, repository_name: str, public: bool
    ) -> UploadResult:
        file_path = Path(file_path)
        with file_path.open("rb") as handle:
            response = self.transport.request(
                method="POST",
                path="/files/upload",
                data=upload_form(repository_name, public),
                files={field: (file_path.name, handle)},
            )
        return parse_upload_result(response)
