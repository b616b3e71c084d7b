"""Async session client."""

from typing import TYPE_CHECKING

from reposhare.clients.auth import parse_user
from reposhare.types.repos import User

if TYPE_CHECKING:
    from reposhare.async_transport import AsyncHTTPTransport


class AsyncAuthClient:
    """Async client for the cookie session."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        self.transport = transport

    async def me(self) -> User | None:
        """Get the signed-in user, or None if the backend returned none."""
        return parse_user(await self.transport.request(method="GET", path="/auth/me"))

    async def login(self, username: str, password: str) -> User | None:
        """Sign in; the session cookie is kept by the transport."""
        await self.transport.request(
            method="POST",
            path="/auth/login",
            body={"username": username, "password": password},
        )
        return await self.me()

    async def logout(self) -> None:
        await self.transport.request(method="POST", path="/auth/logout")
