#!/usr/bin/env python3
"""
Basic RepoShare SDK usage example.

Walks a repository with the viewer the way the web file viewer does:
root listing, into a directory, open a file, back up to the parent, and
download the archive when allowed.

Run with:
    REPOSHARE_API_URL=http://localhost:8080/api \
        python examples/basic_usage.py <owner> <repository-uuid>
"""

import asyncio
import logging
import sys

from reposhare import AsyncRepoShareClient, RepoShareError
from reposhare.logging import configure_logging
from reposhare.viewer import Empty, Error, Loaded, Loading, ViewState


def describe(state: ViewState) -> str:
    if isinstance(state, Loading):
        return "loading..."
    if isinstance(state, Error):
        return f"error: {state.message}"
    if isinstance(state, Empty):
        return "no content"
    trail = " / ".join(crumb.label for crumb in state.breadcrumbs)
    if state.is_directory:
        names = ", ".join(
            entry.name + ("/" if entry.is_directory else "")
            for entry in state.content.entries
        )
        return f"{trail}\n   entries: {names or '(empty directory)'}"
    return f"{trail}\n   {state.language} file, {len(state.content.data)} chars"


async def main(owner: str, repository_id: str) -> int:
    async with AsyncRepoShareClient.from_env() as client:
        try:
            user = await client.auth.me()
        except RepoShareError:
            user = None
        print(f"Signed in as: {user.username if user else '(anonymous)'}\n")

        view = client.viewer(current_user=user)
        view.subscribe(lambda state: print(f"-> {type(state).__name__}"))

        print("1. Repository root")
        state = await view.navigate(owner, repository_id, "")
        print(f"   {describe(state)}\n")
        if not isinstance(state, Loaded) or not state.is_directory:
            return 1

        directories = [e for e in state.content.entries if e.is_directory]
        files = [e for e in state.content.entries if not e.is_directory]

        if directories:
            print(f"2. Into {directories[0].name}/")
            state = await view.go_to_entry(directories[0])
            print(f"   {describe(state)}\n")

            print("3. Back to parent")
            state = await view.go_to_parent()
            print(f"   {describe(state)}\n")

        if files:
            print(f"4. Open {files[0].name}")
            state = await view.go_to_entry(files[0])
            print(f"   {describe(state)}\n")

        if isinstance(state, Loaded) and state.can_download:
            written = await view.request_download()
            print(f"5. Downloaded archive: {written} bytes")
        else:
            print("5. Download not allowed for this repository")

        view.close()
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    configure_logging(level=logging.WARNING, viewer_level=logging.DEBUG)
    sys.exit(asyncio.run(main(sys.argv[1], sys.argv[2])))
