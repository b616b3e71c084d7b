"""Repository and account data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Repository:
    """Repository information as listed on the owner's dashboard."""

    uuid: str
    name: str
    public: bool
    id: int | None = None
    owner_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class User:
    """The signed-in user."""

    username: str
    id: str | None = None
    email: str | None = None


@dataclass
class UploadResult:
    """Response from a file or zip upload."""

    repository_uuid: str
