"""Repository content data models.

The contents endpoint answers with one JSON shape for directories and another
for files, told apart by its ``isDirectory`` flag. They are modelled as two
distinct classes so file-only fields never exist on a directory result.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

DIRECTORY_MARKER = "/"


@dataclass(frozen=True)
class RepositoryRef:
    """Addressable identity of a repository: owner plus opaque id."""

    owner: str
    repository_id: str


class EntryKind(Enum):
    """Kind of a directory listing entry."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class DirectoryEntry:
    """One child of a directory listing, stripped of any directory marker."""

    name: str
    kind: EntryKind

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @classmethod
    def from_wire(cls, raw: Any) -> "DirectoryEntry":
        """
        Build an entry from the backend representation.

        Two wire forms are accepted: a plain name where a trailing ``/`` marks
        a sub-directory, or an object ``{"name": ..., "isDirectory": bool}``.
        The kind is never inferred from the shape of the name itself.

        Args:
            raw: A string name or a dict entry

        Returns:
            DirectoryEntry with the marker removed from ``name``
        """
        if isinstance(raw, dict):
            name = str(raw.get("name", ""))
            is_dir = bool(raw.get("isDirectory", raw.get("is_directory", False)))
            if name.endswith(DIRECTORY_MARKER):
                is_dir = True
        else:
            name = str(raw)
            is_dir = name.endswith(DIRECTORY_MARKER)

        if is_dir:
            name = name.rstrip(DIRECTORY_MARKER)
            return cls(name=name, kind=EntryKind.DIRECTORY)
        return cls(name=name, kind=EntryKind.FILE)


@dataclass(frozen=True)
class DirectoryContents:
    """Listing of one directory inside a repository."""

    repository_name: str | None
    entries: list[DirectoryEntry] = field(default_factory=list)
    download_allowed: bool = False
    directory: str = ""

    @property
    def is_directory(self) -> bool:
        return True


@dataclass(frozen=True)
class FileContents:
    """Raw text of one file inside a repository."""

    repository_name: str | None
    filepath: str
    data: str
    download_allowed: bool = False

    @property
    def is_directory(self) -> bool:
        return False

    @property
    def filename(self) -> str:
        return self.filepath.rstrip("/").rsplit("/", 1)[-1]


ContentResult = Union[DirectoryContents, FileContents]
