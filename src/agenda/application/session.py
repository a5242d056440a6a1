"""Current-user session over a durable key-value store."""

from agenda.application.ports import KeyValueStore
from agenda.domain import looks_like_email, normalize_identifier

# Slot names kept from the earlier on-device schemes so existing state is honored.
USERNAME_SLOT = "CurrentUser"
EMAIL_SLOT = "currentUserEmail"


class Session:
    """
    Single active session. Pass the same instance to every service that needs
    the current identifier. The identifier is opaque to callers.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def set_current_user(self, identifier: str) -> str:
        """Store the identifier (email slot if it contains '@', else username slot)."""
        value = normalize_identifier(identifier)
        if not value:
            raise ValueError("identifier must be non-empty")
        if looks_like_email(value):
            self._store.set(EMAIL_SLOT, value)
            self._store.remove(USERNAME_SLOT)
        else:
            self._store.set(USERNAME_SLOT, value)
            self._store.remove(EMAIL_SLOT)
        return value

    def current_identifier(self) -> str | None:
        """Email if present, else username, else None."""
        for slot in (EMAIL_SLOT, USERNAME_SLOT):
            value = self._store.get(slot)
            if isinstance(value, str) and value.strip():
                return value
        return None

    def is_logged_in(self) -> bool:
        return self.current_identifier() is not None

    def logout(self) -> None:
        """Clear both slots so no identifier from an older scheme resurfaces."""
        self._store.remove(EMAIL_SLOT)
        self._store.remove(USERNAME_SLOT)
