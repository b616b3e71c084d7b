"""Session client: who is signed in."""

from typing import TYPE_CHECKING, Any

from reposhare.types.repos import User

if TYPE_CHECKING:
    from reposhare.transport import HTTPTransport


def parse_user(data: Any) -> User | None:
    if not data or not isinstance(data, dict) or not data.get("username"):
        return None
    return User(
        username=data["username"],
        id=data.get("id"),
        email=data.get("email"),
    )


class AuthClient:
    """Client for the cookie session."""

    def __init__(self, transport: "HTTPTransport") -> None:
        self.transport = transport

    def me(self) -> User | None:
        """
        Get the signed-in user.

        Returns:
            User, or None if the backend returned no user

        Raises:
            AuthenticationError: If there is no valid session
        """
        return parse_user(self.transport.request(method="GET", path="/auth/me"))

    def login(self, username: str, password: str) -> User | None:
        """
        Sign in; the session cookie is kept by the transport.

        Returns:
            The signed-in User as reported by ``/auth/me``
        """
        self.transport.request(
            method="POST",
            path="/auth/login",
            body={"username": username, "password": password},
        )
        return self.me()

    def logout(self) -> None:
        self.transport.request(method="POST", path="/auth/logout")
