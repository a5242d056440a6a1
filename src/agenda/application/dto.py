"""Input DTOs and result types returned by the application services."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class ContactInput:
    """Raw contact form data. Required-field presence is checked again on create."""

    name: str
    phone: str | None = None
    address: str | None = None
    age: int | None = None
    hobbies: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    profile_image: str | None = None


# --- shared failures ---


@dataclass(frozen=True)
class NotAuthenticated:
    """No session identifier is present."""

    pass


@dataclass(frozen=True)
class UserNotFound:
    """The identifier does not resolve to a stored user."""

    identifier: str


@dataclass(frozen=True)
class StoreFailure:
    """The underlying store failed."""

    message: str


@dataclass(frozen=True)
class Invalid:
    """Input is invalid (e.g. missing or empty name)."""

    reason: str


# --- registration results ---


@dataclass(frozen=True)
class Registered:
    """User record stored."""

    user_id: str
    username: str
    email: str


@dataclass(frozen=True)
class UsernameTaken:
    username: str


@dataclass(frozen=True)
class EmailTaken:
    email: str


# --- identity provider results ---


class FailureReason(str, Enum):
    """Domain-level reasons an identity provider call failed."""

    EMAIL_ALREADY_IN_USE = "email-already-in-use"
    INVALID_EMAIL = "invalid-email"
    WEAK_PASSWORD = "weak-password"
    USER_NOT_FOUND = "user-not-found"
    WRONG_PASSWORD = "wrong-password"
    NETWORK_ERROR = "network-error"
    USER_DISABLED = "user-disabled"
    PROVIDER_DISABLED = "provider-disabled"
    INTERNAL_ERROR = "internal-error"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ProviderFailure:
    """The identity provider rejected the call. message is suitable for display."""

    reason: FailureReason
    message: str
    code: str | int | None = None


@dataclass(frozen=True)
class NotVerified:
    """Credentials are correct but the account's email is not verified yet."""

    email: str


@dataclass(frozen=True)
class SignedIn:
    identifier: str


@dataclass(frozen=True)
class VerificationSent:
    email: str


# --- contact results ---


@dataclass(frozen=True)
class ContactCreated:
    contact_id: str
    name: str


@dataclass(frozen=True)
class ContactUpdated:
    contact_id: str


@dataclass(frozen=True)
class ContactDeleted:
    contact_id: str


@dataclass(frozen=True)
class ContactNotFound:
    """No contact with this id in the owner's agenda."""

    contact_id: str
