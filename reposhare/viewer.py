"""
Repository viewer state machine.

``RepositoryViewState`` turns navigation events into render-ready view
states. Each distinct ``(owner, repository_id, path)`` key starts a fresh
``Loading`` cycle that ends in ``Loaded``, ``Empty`` or ``Error``. Only the
fetch for the current key may complete the cycle: a newer navigation cancels
the older fetch, and any result that still arrives for a superseded key is
dropped.

Example:
    ```python
    import asyncio
    from reposhare import AsyncRepoShareClient

    async def main():
        async with AsyncRepoShareClient.from_env() as client:
            view = client.viewer(current_user=await client.auth.me())
            state = await view.navigate("alice", "3f2c...", ["src", "main.py"])
            print(type(state).__name__, [c.label for c in state.breadcrumbs])

    asyncio.run(main())
    ```
"""

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import IO, Any, NamedTuple, Protocol, Union

from reposhare.exceptions import RepoShareError
from reposhare.highlight import HighlightedSource, highlight_source
from reposhare.logging import get_logger, log_navigation
from reposhare.paths import (
    Breadcrumb,
    breadcrumbs,
    canonicalize,
    child_path,
    parent_of,
    split_path,
)
from reposhare.types.contents import (
    ContentResult,
    DirectoryEntry,
    FileContents,
    RepositoryRef,
)
from reposhare.types.repos import User

DEFAULT_ERROR_MESSAGE = "Failed to load content"

logger = get_logger("viewer")


class ContentsSource(Protocol):
    """What the viewer needs from a files client."""

    async def get_contents(
        self, owner: str, repository_id: str, path: str = ""
    ) -> ContentResult | None: ...

    async def download_archive(
        self, owner: str, repository_id: str, destination: Any
    ) -> int: ...


class ViewKey(NamedTuple):
    owner: str
    repository_id: str
    path: str


@dataclass(frozen=True)
class Loading:
    """A fetch for the current key is in flight."""


@dataclass(frozen=True)
class Error:
    """The fetch failed; ``message`` is shown to the user."""

    message: str


@dataclass(frozen=True)
class Empty:
    """The fetch succeeded but the backend returned no content."""


@dataclass(frozen=True)
class Loaded:
    """Fully resolved view of a directory or a file."""

    content: ContentResult
    breadcrumbs: list[Breadcrumb]
    parent_path: str
    can_download: bool
    highlighted: HighlightedSource | None = None

    @property
    def is_directory(self) -> bool:
        return self.content.is_directory

    @property
    def language(self) -> str | None:
        return self.highlighted.language if self.highlighted else None


ViewState = Union[Loading, Error, Empty, Loaded]

Listener = Callable[[ViewState], None]


def can_download(
    current_user: User | None, owner: str, content: ContentResult
) -> bool:
    """The owner may always download; anyone else only if the backend allows it."""
    if current_user is not None and current_user.username == owner:
        return True
    return content.download_allowed is True


def _is_plain_filename(name: str | None) -> bool:
    if not name or name in (".", ".."):
        return False
    return not any(sep in name for sep in ("/", "\\", "\x00"))


def archive_filename(repository_name: str | None, repository_id: str) -> str:
    """
    Default local name for a downloaded archive.

    The repository name comes from the server, so it is used only when it
    is a bare file name; otherwise the id is tried, then "repository".
    """
    for candidate in (repository_name, repository_id):
        if _is_plain_filename(candidate):
            return f"{candidate}.zip"
    return "repository.zip"


def _normalize_path(path: str | Iterable[str | None] | None) -> str:
    if path is None or isinstance(path, str):
        return canonicalize(split_path(path))
    return canonicalize(path)


class RepositoryViewState:
    """
    State machine behind the repository file viewer.

    Args:
        files: Async files client (or anything with the same two methods)
        current_user: Signed-in user, used only to derive download permission
        highlighter: Renders file content; called on every transition to
            ``Loaded`` with a file
    """

    def __init__(
        self,
        files: ContentsSource,
        current_user: User | None = None,
        highlighter: Callable[[str, str], HighlightedSource] = highlight_source,
    ) -> None:
        self._files = files
        self._current_user = current_user
        self._highlighter = highlighter
        self._key: ViewKey | None = None
        self._state: ViewState = Loading()
        self._fetch_task: asyncio.Task[None] | None = None
        self._downloading = False
        self._listeners: list[Listener] = []

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def key(self) -> ViewKey | None:
        return self._key

    @property
    def ref(self) -> RepositoryRef | None:
        if self._key is None:
            return None
        return RepositoryRef(owner=self._key.owner, repository_id=self._key.repository_id)

    @property
    def path(self) -> str:
        return self._key.path if self._key else ""

    @property
    def is_downloading(self) -> bool:
        return self._downloading

    @property
    def current_user(self) -> User | None:
        return self._current_user

    @current_user.setter
    def current_user(self, user: User | None) -> None:
        """Swap the signed-in user and refresh the download permission."""
        self._current_user = user
        if isinstance(self._state, Loaded) and self._key is not None:
            allowed = can_download(user, self._key.owner, self._state.content)
            if allowed != self._state.can_download:
                self._transition(replace(self._state, can_download=allowed))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked with every new state.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def navigate(
        self,
        owner: str,
        repository_id: str,
        path: str | Iterable[str | None] | None = None,
    ) -> ViewState:
        """
        Show ``path`` inside a repository.

        A new key resets the view to ``Loading`` and fetches. Navigating to
        the key already shown does not fetch again.

        Args:
            owner: Username of the repository owner
            repository_id: Repository UUID
            path: Slash-separated path or list of route segments

        Returns:
            The state after this navigation settled, which may already
            belong to a later navigation
        """
        key = ViewKey(owner, repository_id, _normalize_path(path))

        if key == self._key and self._fetch_task is not None:
            task = self._fetch_task
        else:
            if self._fetch_task is not None and not self._fetch_task.done():
                self._fetch_task.cancel()
            self._key = key
            self._transition(Loading())
            task = asyncio.ensure_future(self._load(key))
            self._fetch_task = task

        await asyncio.wait({task})
        if not task.cancelled():
            task.result()
        return self._state

    async def go_to_parent(self) -> ViewState:
        """Navigate one level up; at the root nothing happens."""
        if self._key is None or not self._key.path:
            return self._state
        return await self.navigate(
            self._key.owner, self._key.repository_id, parent_of(self._key.path)
        )

    async def go_to_entry(self, entry: DirectoryEntry | str) -> ViewState:
        """
        Navigate into a directory entry.

        Args:
            entry: A DirectoryEntry, or a raw listing name such as "docs/"

        Returns:
            The resulting state
        """
        if self._key is None:
            logger.debug("go_to_entry called before any navigation")
            return self._state
        if isinstance(entry, str):
            entry = DirectoryEntry.from_wire(entry)
        return await self.navigate(
            self._key.owner,
            self._key.repository_id,
            child_path(self._key.path, entry.name),
        )

    async def request_download(
        self, destination: str | Path | IO[bytes] | None = None
    ) -> int | None:
        """
        Download the repository archive if the current view allows it.

        Calls made while a download is already running are ignored.

        Args:
            destination: File path or binary file object; defaults to
                ``archive_filename(...)`` in the working directory

        Returns:
            Bytes written, or None when nothing was downloaded
        """
        state = self._state
        if not isinstance(state, Loaded) or not state.can_download or self._key is None:
            return None
        if self._downloading:
            logger.debug("Download already in progress; ignoring request")
            return None

        owner, repository_id, _ = self._key
        if destination is None:
            destination = Path(archive_filename(state.content.repository_name, repository_id))

        self._downloading = True
        try:
            return await self._files.download_archive(owner, repository_id, destination)
        finally:
            self._downloading = False

    def close(self) -> None:
        """Drop the current view: cancel any fetch and forget listeners."""
        if self._fetch_task is not None and not self._fetch_task.done():
            self._fetch_task.cancel()
        self._fetch_task = None
        self._listeners.clear()

    async def _load(self, key: ViewKey) -> None:
        try:
            content = await self._files.get_contents(key.owner, key.repository_id, key.path)
        except RepoShareError as exc:
            if self._is_stale(key):
                return
            logger.warning("Failed to load /%s/%s/%s: %s", *key, exc)
            self._transition(Error(exc.server_message or DEFAULT_ERROR_MESSAGE))
            return
        except (ValueError, TypeError, KeyError) as exc:
            # Malformed body
            if self._is_stale(key):
                return
            logger.warning("Unreadable response for /%s/%s/%s: %s", *key, exc)
            self._transition(Error(DEFAULT_ERROR_MESSAGE))
            return

        if self._is_stale(key):
            return

        try:
            state = self._resolve(key, content)
        except Exception:
            logger.exception("Could not render /%s/%s/%s", *key)
            state = Error(DEFAULT_ERROR_MESSAGE)
        self._transition(state)

    def _resolve(self, key: ViewKey, content: ContentResult | None) -> ViewState:
        if not content:
            return Empty()

        highlighted = None
        if isinstance(content, FileContents):
            highlighted = self._highlighter(content.data, content.filepath or key.path)

        return Loaded(
            content=content,
            breadcrumbs=breadcrumbs(
                key.owner, key.repository_id, content.repository_name, key.path
            ),
            parent_path=parent_of(key.path),
            can_download=can_download(self._current_user, key.owner, content),
            highlighted=highlighted,
        )

    def _is_stale(self, key: ViewKey) -> bool:
        if key == self._key:
            return False
        logger.debug("Discarding response for superseded view %s", "/".join(key))
        return True

    def _transition(self, state: ViewState) -> None:
        self._state = state
        if self._key is not None:
            log_navigation(*self._key, type(state).__name__)
        for listener in list(self._listeners):
            listener(state)


__all__ = [
    "DEFAULT_ERROR_MESSAGE",
    "RepositoryViewState",
    "ViewKey",
    "ViewState",
    "Loading",
    "Error",
    "Empty",
    "Loaded",
    "archive_filename",
    "can_download",
]
