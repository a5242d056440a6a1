"""Application ports (interfaces). Implemented by infrastructure adapters."""

from dataclasses import dataclass
from typing import Any, Protocol

from agenda.domain import Contact, User


class StoreError(Exception):
    """A store operation failed (network, driver, permission)."""


class StorePermissionError(StoreError):
    """The store refused the operation for lack of permission."""


class DuplicateKeyError(StoreError):
    """A uniqueness constraint rejected a write. field is 'username' or 'email'."""

    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"{field} already exists: {value}")
        self.field = field
        self.value = value


class RecordDecodeError(StoreError):
    """A stored record could not be decoded into a domain entity."""


class ProviderError(Exception):
    """The identity provider rejected a call. code is the provider's raw error code."""

    def __init__(self, code: str | int, message: str = "") -> None:
        super().__init__(message or str(code))
        self.code = code


@dataclass(frozen=True)
class ProviderAccount:
    """Account as reported by the identity provider."""

    uid: str
    email: str
    email_verified: bool = False


class UserRepository(Protocol):
    """Persists user records. Lookups take already-normalized identifiers."""

    async def add(self, user: User) -> str:
        """Store the user and return its id (minted when user.user_id is None)."""
        ...

    async def find_by_username(self, username: str) -> User | None: ...

    async def find_by_email(self, email: str) -> User | None: ...

    async def list_all(self) -> list[User]: ...

    async def set_profile_image(self, user_id: str, image: str | None) -> bool:
        """Set or clear the profile image. Returns False if the user does not exist."""
        ...

    async def clear_all(self) -> int:
        """Delete every user record. Returns the number removed."""
        ...


class ContactRepository(Protocol):
    """Persists contacts. Every query except the migration helpers is owner-scoped."""

    async def add(self, contact: Contact) -> None: ...

    async def get_by_id(self, owner: str, contact_id: str) -> Contact | None: ...

    async def list_by_owner(self, owner: str) -> list[Contact]:
        """Return the owner's contacts ordered by name ascending."""
        ...

    async def update(self, owner: str, contact_id: str, fields: dict[str, Any]) -> bool:
        """Write the given fields in place; None removes a field. False if not found."""
        ...

    async def delete(self, owner: str, contact_id: str) -> bool: ...

    async def find_orphan_ids(self) -> list[str]:
        """Ids of contacts whose owner is missing or empty."""
        ...

    async def find_ids_by_owner_ci(self, owner: str) -> list[str]:
        """Ids of contacts whose owner equals the given value, ignoring case."""
        ...

    async def reassign_owner(self, contact_ids: list[str], owner: str) -> int:
        """Set the owner of every given contact. Returns the number rewritten."""
        ...


class KeyValueStore(Protocol):
    """Durable string-keyed store for session slots and migration flags. Synchronous."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


class IdentityProvider(Protocol):
    """External identity service. Failures raise ProviderError."""

    async def create_account(self, email: str, password: str) -> ProviderAccount:
        """Create the account and make it the provider's current account."""
        ...

    async def sign_in(self, email: str, password: str) -> ProviderAccount: ...

    async def send_email_verification(self) -> None:
        """Send a verification email to the current account."""
        ...

    async def reload(self) -> ProviderAccount | None:
        """Refresh and return the current account, or None when signed out."""
        ...

    async def sign_out(self) -> None: ...
