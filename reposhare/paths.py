"""
Path arithmetic for browsing a repository.

Paths are plain strings in canonical form: segments joined by ``/`` with no
leading or trailing slash and no empty segments. The repository root is the
empty string. Nothing here performs I/O or raises; segments that contain a
slash are passed through untouched.
"""

from collections.abc import Iterable
from dataclasses import dataclass

ROOT_PATH = ""
DEFAULT_REPOSITORY_LABEL = "Repository"


@dataclass(frozen=True)
class Breadcrumb:
    """One navigable step from the repository root to the current location."""

    label: str
    target_path: str


def canonicalize(segments: Iterable[str | None] | None) -> str:
    """
    Join route segments into a canonical path.

    Empty and ``None`` segments are dropped, so a route with no segments
    resolves to the root path ``""``.

    Args:
        segments: Raw path segments from a route (may be None)

    Returns:
        Canonical path string
    """
    if segments is None:
        return ROOT_PATH
    return "/".join(segment for segment in segments if segment)


def split_path(path: str | None) -> list[str]:
    """Split a path into its non-empty segments."""
    if not path:
        return []
    return [segment for segment in path.split("/") if segment]


def depth(path: str | None) -> int:
    return len(split_path(path))


def parent_of(path: str | None) -> str:
    """
    Return the parent of a path.

    The parent of the root is the root.

    Args:
        path: Canonical (or loosely slashed) path

    Returns:
        Canonical parent path
    """
    parts = split_path(path)
    return "/".join(parts[:-1])


def child_path(parent: str, name: str) -> str:
    """Path of an entry called ``name`` inside ``parent``."""
    return f"{parent}/{name}" if parent else name


def breadcrumbs(
    owner: str,
    repository_id: str,
    repository_name: str | None,
    path: str | None,
) -> list[Breadcrumb]:
    """
    Build the breadcrumb trail for a location in a repository.

    The first crumb is the repository root, labelled "{owner}'s {name}".
    Each following crumb goes one segment deeper and is labelled with that
    segment's raw text. The last crumb is the current location.

    Args:
        owner: Username of the repository owner
        repository_id: Repository identifier (kept for symmetry with links)
        repository_name: Display name from the server, if it sent one
        path: Current canonical path

    Returns:
        List of Breadcrumb, always ``1 + depth(path)`` long
    """
    label = repository_name or DEFAULT_REPOSITORY_LABEL
    trail = [Breadcrumb(label=f"{owner}'s {label}", target_path=ROOT_PATH)]

    parts = split_path(path)
    for i, part in enumerate(parts):
        trail.append(Breadcrumb(label=part, target_path="/".join(parts[: i + 1])))

    return trail


def repository_url(owner: str, repository_id: str, path: str | None = None) -> str:
    """Route for viewing ``path`` inside a repository."""
    base = f"/{owner}/{repository_id}"
    canonical = canonicalize(split_path(path))
    return f"{base}/{canonical}" if canonical else base


__all__ = [
    "ROOT_PATH",
    "Breadcrumb",
    "canonicalize",
    "split_path",
    "depth",
    "parent_of",
    "child_path",
    "breadcrumbs",
    "repository_url",
]
