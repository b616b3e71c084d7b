"""
Tests for the repository viewer state machine.

Feature: repository viewer
"""

import asyncio
import io
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from reposhare.clients.files import classify_contents
from reposhare.exceptions import NotFoundError, ServerError
from reposhare.testing import (
    MockRepoShareClient,
    create_mock_directory,
    create_mock_file,
    create_mock_user,
)
from reposhare.types.contents import EntryKind
from reposhare.viewer import (
    DEFAULT_ERROR_MESSAGE,
    Empty,
    Error,
    Loaded,
    Loading,
    RepositoryViewState,
    archive_filename,
    can_download,
)

OWNER = "alice"
REPO = "repo-uuid"

username_strategy = st.text(
    min_size=1,
    max_size=20,
    alphabet=st.characters(whitelist_categories=("L", "N"), whitelist_characters="-_"),
)


def record_states(view: RepositoryViewState) -> list[str]:
    seen: list[str] = []
    view.subscribe(lambda state: seen.append(type(state).__name__))
    return seen


# ============================================================================
# Permission derivation
# ============================================================================


@given(
    owner=username_strategy,
    viewer=username_strategy,
    allowed=st.booleans(),
    is_directory=st.booleans(),
)
@settings(max_examples=100)
def test_can_download_derivation(
    owner: str, viewer: str, allowed: bool, is_directory: bool
) -> None:
    """
    The owner can always download; anyone else exactly when the backend
    allows it. Holds for directory and file results alike.
    """
    if is_directory:
        content = create_mock_directory(download_allowed=allowed)
    else:
        content = create_mock_file(download_allowed=allowed)

    assert can_download(create_mock_user(owner), owner, content) is True
    if viewer != owner:
        assert can_download(create_mock_user(viewer), owner, content) is allowed
    assert can_download(None, owner, content) is allowed


# ============================================================================
# Transitions
# ============================================================================


def test_directory_listing_and_entry_navigation() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents(
        "", response=create_mock_directory(entries=["README.md", "docs/"])
    )
    mock.files.configure_get_contents("docs", response=create_mock_directory(entries=[]))

    async def scenario() -> tuple[RepositoryViewState, object, object]:
        view = mock.viewer()
        root = await view.navigate(OWNER, REPO, "")
        docs = await view.go_to_entry("docs/")
        return view, root, docs

    view, root, docs = asyncio.run(scenario())

    assert isinstance(root, Loaded)
    assert [(e.name, e.kind) for e in root.content.entries] == [
        ("README.md", EntryKind.FILE),
        ("docs", EntryKind.DIRECTORY),
    ]
    assert root.parent_path == ""
    assert len(root.breadcrumbs) == 1

    assert isinstance(docs, Loaded)
    assert view.path == "docs"
    assert mock.get_calls("files.get_contents")[-1].args == (OWNER, REPO, "docs")


def test_initial_navigation_passes_through_loading() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("src/main.py", response=create_mock_file("src/main.py"))

    view = mock.viewer()
    seen = record_states(view)
    state = asyncio.run(view.navigate(OWNER, REPO, ["src", "", "main.py"]))

    assert seen == ["Loading", "Loaded"]
    assert isinstance(state, Loaded)
    assert view.path == "src/main.py"
    assert state.parent_path == "src"
    assert [c.label for c in state.breadcrumbs] == ["alice's test-repo", "src", "main.py"]


def test_file_content_is_highlighted() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents(
        "app.py", response=create_mock_file("app.py", data="def main():\n    return 1\n")
    )

    state = asyncio.run(mock.viewer().navigate(OWNER, REPO, "app.py"))

    assert isinstance(state, Loaded)
    assert state.language == "python"
    assert state.highlighted is not None
    assert "language-python" in state.highlighted.html


def test_directory_is_not_highlighted() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("", response=create_mock_directory(entries=["a.py"]))

    state = asyncio.run(mock.viewer().navigate(OWNER, REPO, ""))

    assert isinstance(state, Loaded)
    assert state.highlighted is None
    assert state.language is None


def test_empty_response_becomes_empty_state() -> None:
    mock = MockRepoShareClient(username=OWNER)

    state = asyncio.run(mock.viewer().navigate(OWNER, REPO, "nothing"))

    assert isinstance(state, Empty)


def test_error_then_recovery_by_navigation() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents(
        "missing", error=NotFoundError("not found", 404, "not found")
    )
    mock.files.configure_get_contents("", response=create_mock_directory(entries=["a"]))

    async def scenario() -> tuple[object, object, list[str]]:
        view = mock.viewer()
        failed = await view.navigate(OWNER, REPO, "missing")
        seen = record_states(view)
        recovered = await view.navigate(OWNER, REPO, "")
        return failed, recovered, seen

    failed, recovered, seen = asyncio.run(scenario())

    assert failed == Error(message="not found")
    assert isinstance(recovered, Loaded)
    assert seen == ["Loading", "Loaded"]


def test_error_without_server_message_uses_fallback() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("", error=ServerError("Connection refused"))

    state = asyncio.run(mock.viewer().navigate(OWNER, REPO, ""))

    assert state == Error(message=DEFAULT_ERROR_MESSAGE)


def test_same_key_does_not_refetch() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("", error=ServerError("boom", 500, "boom"))

    async def scenario() -> object:
        view = mock.viewer()
        await view.navigate(OWNER, REPO, "")
        return await view.navigate(OWNER, REPO, "/")

    state = asyncio.run(scenario())

    assert state == Error(message="boom")
    assert mock.call_count("files.get_contents") == 1


def test_go_to_parent() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("docs", response=create_mock_directory(entries=[]))
    mock.files.configure_get_contents("docs/api.md", response=create_mock_file("docs/api.md"))

    async def scenario() -> tuple[RepositoryViewState, object]:
        view = mock.viewer()
        await view.navigate(OWNER, REPO, "docs/api.md")
        state = await view.go_to_parent()
        return view, state

    view, state = asyncio.run(scenario())

    assert view.path == "docs"
    assert isinstance(state, Loaded)
    assert state.is_directory


def test_go_to_parent_at_root_is_a_no_op() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("", response=create_mock_directory(entries=[]))

    async def scenario() -> tuple[object, object]:
        view = mock.viewer()
        before = await view.navigate(OWNER, REPO, "")
        after = await view.go_to_parent()
        return before, after

    before, after = asyncio.run(scenario())

    assert before is after
    assert mock.call_count("files.get_contents") == 1


def test_go_to_parent_before_navigation() -> None:
    view = MockRepoShareClient().viewer()

    state = asyncio.run(view.go_to_parent())

    assert isinstance(state, Loading)


# ============================================================================
# Stale responses
# ============================================================================


def test_stale_response_never_overwrites_newer_state() -> None:
    """
    Navigating to A and then immediately to B leaves B's result on screen,
    even when A's response is released after B's.
    """
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("a", response=create_mock_file("a", data="A"))
    mock.files.configure_get_contents("b", response=create_mock_file("b", data="B"))

    async def scenario() -> tuple[object, object, object]:
        gate_a = mock.files.hold("a")
        view = mock.viewer()
        first = asyncio.create_task(view.navigate(OWNER, REPO, "a"))
        await asyncio.sleep(0)
        second = await view.navigate(OWNER, REPO, "b")
        gate_a.set()
        first_result = await first
        return second, first_result, view.state

    second, first_result, final = asyncio.run(scenario())

    for state in (second, first_result, final):
        assert isinstance(state, Loaded)
        assert state.content.data == "B"


class UncancellableSource:
    """Files source whose responses arrive even after cancellation."""

    def __init__(self) -> None:
        self.gates: dict[str, asyncio.Event] = {}

    def release(self, path: str) -> None:
        self.gates.setdefault(path, asyncio.Event()).set()

    async def get_contents(self, owner: str, repository_id: str, path: str = ""):
        gate = self.gates.setdefault(path, asyncio.Event())
        try:
            await gate.wait()
        except asyncio.CancelledError:
            await gate.wait()
        return create_mock_file(path, data=path.upper())

    async def download_archive(self, owner: str, repository_id: str, destination) -> int:
        return 0


def test_late_result_for_superseded_key_is_dropped() -> None:
    source = UncancellableSource()

    async def scenario() -> tuple[list[str], object]:
        view = RepositoryViewState(source)
        seen = record_states(view)
        first = asyncio.create_task(view.navigate(OWNER, REPO, "a"))
        await asyncio.sleep(0)
        second = asyncio.create_task(view.navigate(OWNER, REPO, "b"))
        await asyncio.sleep(0)

        source.release("b")
        await second
        source.release("a")
        await first
        return seen, view.state

    seen, final = asyncio.run(scenario())

    assert isinstance(final, Loaded)
    assert final.content.data == "B"
    assert seen == ["Loading", "Loading", "Loaded"]


# ============================================================================
# Downloads
# ============================================================================


def test_visitor_cannot_download_private_repository() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("", response=create_mock_directory(download_allowed=False))

    async def scenario() -> tuple[object, int | None]:
        view = mock.viewer(current_user=create_mock_user("mallory"))
        state = await view.navigate(OWNER, REPO, "")
        return state, await view.request_download(io.BytesIO())

    state, written = asyncio.run(scenario())

    assert isinstance(state, Loaded)
    assert state.can_download is False
    assert written is None
    assert not mock.was_called("files.download_archive")


def test_owner_can_download_even_when_not_allowed() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("", response=create_mock_directory(download_allowed=False))
    sink = io.BytesIO()

    async def scenario() -> int | None:
        view = mock.viewer(current_user=create_mock_user(OWNER))
        await view.navigate(OWNER, REPO, "")
        return await view.request_download(sink)

    written = asyncio.run(scenario())

    assert written == len(mock.files.archive_bytes)
    assert sink.getvalue() == mock.files.archive_bytes
    assert mock.get_calls("files.download_archive")[0].args == (OWNER, REPO)


def test_download_is_single_flight() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("", response=create_mock_directory(download_allowed=True))

    async def scenario() -> tuple[int | None, int | None, bool]:
        view = mock.viewer(current_user=None)
        await view.navigate(OWNER, REPO, "")
        gate = mock.files.hold_download()
        first = asyncio.create_task(view.request_download(io.BytesIO()))
        await asyncio.sleep(0)
        second = await view.request_download(io.BytesIO())
        busy = view.is_downloading
        gate.set()
        return await first, second, busy

    first, second, busy = asyncio.run(scenario())

    assert busy is True
    assert first == len(mock.files.archive_bytes)
    assert second is None
    assert mock.call_count("files.download_archive") == 1


def test_download_does_not_change_view_state() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("", response=create_mock_directory(download_allowed=True))

    async def scenario() -> tuple[object, object]:
        view = mock.viewer()
        before = await view.navigate(OWNER, REPO, "")
        await view.request_download(io.BytesIO())
        return before, view.state

    before, after = asyncio.run(scenario())

    assert before is after


def test_download_not_available_while_loading() -> None:
    view = MockRepoShareClient().viewer()

    assert asyncio.run(view.request_download(io.BytesIO())) is None


def test_changing_user_refreshes_permission() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("", response=create_mock_directory(download_allowed=False))

    async def scenario() -> tuple[bool, bool, list[str]]:
        view = mock.viewer(current_user=None)
        state = await view.navigate(OWNER, REPO, "")
        seen = record_states(view)
        view.current_user = create_mock_user(OWNER)
        return state.can_download, view.state.can_download, seen

    before, after, seen = asyncio.run(scenario())

    assert before is False
    assert after is True
    assert seen == ["Loaded"]


def test_close_cancels_pending_fetch() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("", response=create_mock_directory())

    async def scenario() -> object:
        mock.files.hold("")
        view = mock.viewer()
        pending = asyncio.create_task(view.navigate(OWNER, REPO, ""))
        await asyncio.sleep(0)
        view.close()
        return await pending

    state = asyncio.run(scenario())

    assert isinstance(state, Loading)


# ============================================================================
# Malformed responses
# ============================================================================


class RawBodySource:
    """Files source that classifies a raw JSON body the way the HTTP client does."""

    def __init__(self, body: dict) -> None:
        self.body = body

    async def get_contents(self, owner: str, repository_id: str, path: str = ""):
        return classify_contents(self.body)

    async def download_archive(self, owner: str, repository_id: str, destination) -> int:
        raise AssertionError("not expected")


def test_malformed_file_body_becomes_error() -> None:
    source = RawBodySource({"isDirectory": False, "filepath": "a.py", "data": 123})
    view = RepositoryViewState(source)
    seen = record_states(view)

    state = asyncio.run(view.navigate(OWNER, REPO, "a.py"))

    assert state == Error(DEFAULT_ERROR_MESSAGE)
    assert seen == ["Loading", "Error"]


def test_unrenderable_file_becomes_error() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("a.py", response=create_mock_file("a.py", data=123))  # type: ignore[arg-type]

    state = asyncio.run(mock.viewer().navigate(OWNER, REPO, "a.py"))

    assert state == Error(DEFAULT_ERROR_MESSAGE)


def test_highlighter_failure_becomes_error_and_view_recovers() -> None:
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents("a.py", response=create_mock_file("a.py"))
    mock.files.configure_get_contents("", response=create_mock_directory(entries=["a.py"]))

    def broken_highlighter(source: str, filename: str):
        raise RuntimeError("lexer crashed")

    async def scenario() -> tuple[object, object]:
        view = RepositoryViewState(mock.files, highlighter=broken_highlighter)
        failed = await view.navigate(OWNER, REPO, "a.py")
        recovered = await view.go_to_parent()
        return failed, recovered

    failed, recovered = asyncio.run(scenario())

    assert failed == Error(DEFAULT_ERROR_MESSAGE)
    assert isinstance(recovered, Loaded)


# ============================================================================
# Default archive name
# ============================================================================


@pytest.mark.parametrize(
    ("repository_name", "repository_id", "expected"),
    [
        ("tools", "r1", "tools.zip"),
        (None, "r1", "r1.zip"),
        ("", "r1", "r1.zip"),
        ("../escaped", "r1", "r1.zip"),
        ("a/b", "r1", "r1.zip"),
        ("..", "r1", "r1.zip"),
        ("dir\\evil", "r1", "r1.zip"),
        ("../x", "../y", "repository.zip"),
    ],
)
def test_archive_filename(repository_name: str | None, repository_id: str, expected: str) -> None:
    assert archive_filename(repository_name, repository_id) == expected


@given(name=st.text(max_size=30))
@settings(max_examples=100)
def test_archive_filename_is_always_a_bare_name(name: str) -> None:
    filename = archive_filename(name, "repo-uuid")

    assert Path(filename).name == filename
    assert "/" not in filename and "\\" not in filename
    assert filename not in ("..zip", "...zip")


def test_default_download_stays_in_working_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    mock = MockRepoShareClient(username=OWNER)
    mock.files.configure_get_contents(
        "", response=create_mock_directory(repository_name="../escaped")
    )

    async def scenario() -> int | None:
        view = mock.viewer(current_user=create_mock_user(OWNER))
        await view.navigate(OWNER, REPO, "")
        return await view.request_download()

    written = asyncio.run(scenario())

    destination = mock.get_calls("files.download_archive")[0].kwargs["destination"]
    assert destination == Path(f"{REPO}.zip")
    assert written == len(mock.files.archive_bytes)
    assert (tmp_path / f"{REPO}.zip").exists()
    assert not (tmp_path.parent / "escaped.zip").exists()
