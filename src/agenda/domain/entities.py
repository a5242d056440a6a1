"""Domain entities: User and Contact."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


def normalize_identifier(value: str | None) -> str:
    """Trim and lower-case a username or email before lookups and storage."""
    return (value or "").strip().lower()


def looks_like_email(identifier: str | None) -> bool:
    return "@" in (identifier or "")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    return value if value.strip() else None


@dataclass(frozen=True)
class User:
    """
    A registered account.
    username and email are stored lower-cased; user_id is assigned by the store.
    """

    name: str
    email: str
    username: str
    password: str
    phone: str | None = None
    registration_date: datetime = field(default_factory=_utcnow)
    user_id: str | None = None
    profile_image: str | None = None

    def __post_init__(self):
        name = (self.name or "").strip()
        if not name:
            raise ValueError("User name must be non-empty.")
        object.__setattr__(self, "name", name)

        email = normalize_identifier(self.email)
        if not email:
            raise ValueError("User email must be non-empty.")
        object.__setattr__(self, "email", email)

        username = normalize_identifier(self.username)
        if not username:
            raise ValueError("User username must be non-empty.")
        object.__setattr__(self, "username", username)

        if not self.password:
            raise ValueError("User password must be non-empty.")

        phone = (self.phone or "").strip() or None
        object.__setattr__(self, "phone", phone)
        object.__setattr__(self, "profile_image", _blank_to_none(self.profile_image))


@dataclass(frozen=True)
class Contact:
    """
    One entry in a user's agenda.
    owner_identifier is the owning username or email; it is a filter value only.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = field(default="")
    phone: str | None = None
    address: str | None = None
    age: int | None = None
    hobbies: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    profile_image: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    owner_identifier: str | None = None

    def __post_init__(self):
        name = (self.name or "").strip()
        if not name:
            raise ValueError("Contact name must be non-empty.")
        object.__setattr__(self, "name", name)
        # Phone is kept as typed, only trimmed.
        object.__setattr__(self, "phone", (self.phone or "").strip() or None)
        for attr in ("address", "hobbies", "profile_image", "owner_identifier"):
            object.__setattr__(self, attr, _blank_to_none(getattr(self, attr)))
