"""Async repository contents, archive download and upload client."""

from pathlib import Path
from typing import IO, TYPE_CHECKING

from reposhare.clients.files import (
    archive_path,
    classify_contents,
    contents_path,
    parse_upload_result,
    partial_path,
    upload_form,
)
from reposhare.types.contents import ContentResult
from reposhare.types.repos import UploadResult

if TYPE_CHECKING:
    from reposhare.async_transport import AsyncHTTPTransport


class AsyncFilesClient:
    """Async client for browsing, downloading and uploading repository files."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the async files client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def get_contents(
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
        """
        response = await self.transport.request(
            method="GET",
            path=contents_path(owner, repository_id, path),
        )
        return classify_contents(response)

    async def download_archive(
        self,
        owner: str,
        repository_id: str,
        destination: str | Path | IO[bytes],
    ) -> int:
        """
        Download the whole repository as a zip archive.

        Args:
            owner: Username of the repository owner
            repository_id: Repository UUID
            destination: File path or writable binary file object

        Returns:
            Number of bytes written
        """
        path = archive_path(owner, repository_id)
        if not isinstance(destination, (str, Path)):
            return await self.transport.download(path, destination)

        target = Path(destination)
        partial = partial_path(target)
        try:
            with partial.open("wb") as sink:
                written = await self.transport.download(path, sink)
        except BaseException:
            # Includes cancellation of the viewer's download
            partial.unlink(missing_ok=True)
            raise
        partial.replace(target)
        return written

    async def upload_file(
        self, file_path: str | Path, repository_name: str, public: bool = False
    ) -> UploadResult:
        """Upload a single file as a new repository."""
        return await self._upload("file", file_path, repository_name, public)

    async def upload_zip(
        self, zip_path: str | Path, repository_name: str, public: bool = False
    ) -> UploadResult:
        """Upload a zip archive; the backend expands it into a repository."""
        return await self._upload("zip_file", zip_path, repository_name, public)

    async def _upload(
        self, field: str, file_path: str | Path, repository_name: str, public: bool
    ) -> UploadResult:
        file_path = Path(file_path)
        response = await self.transport.request(
            method="POST",
            path="/files/upload",
            data=upload_form(repository_name, public),
            files={field: (file_path.name, file_path.read_bytes())},
        )
        return parse_upload_result(response)
