"""In-memory implementations of the repository ports (no DB).

Records are kept in their stored shape and decoded on read, so legacy or
malformed documents behave as they would in a real store.
"""

import uuid
from typing import Any

from agenda.application.ports import DuplicateKeyError
from agenda.domain import Contact, User, normalize_identifier
from agenda.infrastructure.records import (
    decode_contact,
    decode_user,
    encode_contact,
    encode_contact_fields,
    encode_user,
)


class InMemoryUserRepository:
    """Users keyed by user_id. Order preserved by insertion."""

    def __init__(self) -> None:
        self._docs: dict[str, dict[str, Any]] = {}

    async def add(self, user: User) -> str:
        for doc in self._docs.values():
            if doc["username"] == user.username:
                raise DuplicateKeyError("username", user.username)
            if doc["email"] == user.email:
                raise DuplicateKeyError("email", user.email)
        user_id = user.user_id or str(uuid.uuid4())
        if user_id in self._docs:
            raise DuplicateKeyError("userId", user_id)
        doc = encode_user(user)
        doc["userId"] = user_id
        self._docs[user_id] = doc
        return user_id

    async def find_by_username(self, username: str) -> User | None:
        return self._first_match("username", normalize_identifier(username))

    async def find_by_email(self, email: str) -> User | None:
        return self._first_match("email", normalize_identifier(email))

    async def list_all(self) -> list[User]:
        return [decode_user(doc) for doc in self._docs.values()]

    async def set_profile_image(self, user_id: str, image: str | None) -> bool:
        doc = self._docs.get(user_id)
        if doc is None:
            return False
        if image:
            doc["profileImage"] = image
        else:
            doc.pop("profileImage", None)
        return True

    async def clear_all(self) -> int:
        removed = len(self._docs)
        self._docs.clear()
        return removed

    def _first_match(self, field: str, value: str) -> User | None:
        for doc in self._docs.values():
            if doc.get(field) == value:
                return decode_user(doc)
        return None


class InMemoryContactRepository:
    """Contacts keyed by id, each carrying its owner identifier."""

    def __init__(self) -> None:
        self._docs: dict[str, dict[str, Any]] = {}

    def put_raw(self, contact_id: str, doc: dict[str, Any]) -> None:
        """Insert a document as-is (e.g. a legacy record without an owner)."""
        self._docs[contact_id] = dict(doc)

    def raw(self, contact_id: str) -> dict[str, Any] | None:
        doc = self._docs.get(contact_id)
        return dict(doc) if doc is not None else None

    async def add(self, contact: Contact) -> None:
        self._docs[contact.id] = encode_contact(contact)

    async def get_by_id(self, owner: str, contact_id: str) -> Contact | None:
        doc = self._docs.get(contact_id)
        if doc is None or doc.get("ownerIdentifier") != owner:
            return None
        return decode_contact(doc, contact_id)

    async def list_by_owner(self, owner: str) -> list[Contact]:
        owned = [
            (cid, doc) for cid, doc in self._docs.items() if doc.get("ownerIdentifier") == owner
        ]
        owned.sort(key=lambda item: str(item[1].get("nombre", "")))
        return [decode_contact(doc, cid) for cid, doc in owned]

    async def update(self, owner: str, contact_id: str, fields: dict[str, Any]) -> bool:
        doc = self._docs.get(contact_id)
        if doc is None or doc.get("ownerIdentifier") != owner:
            return False
        for key, value in encode_contact_fields(fields).items():
            if value is None:
                doc.pop(key, None)
            else:
                doc[key] = value
        return True

    async def delete(self, owner: str, contact_id: str) -> bool:
        doc = self._docs.get(contact_id)
        if doc is None or doc.get("ownerIdentifier") != owner:
            return False
        del self._docs[contact_id]
        return True

    async def find_orphan_ids(self) -> list[str]:
        return [
            cid
            for cid, doc in self._docs.items()
            if not str(doc.get("ownerIdentifier") or "").strip()
        ]

    async def find_ids_by_owner_ci(self, owner: str) -> list[str]:
        wanted = normalize_identifier(owner)
        return [
            cid
            for cid, doc in self._docs.items()
            if normalize_identifier(doc.get("ownerIdentifier")) == wanted
        ]

    async def reassign_owner(self, contact_ids: list[str], owner: str) -> int:
        changed = 0
        for cid in contact_ids:
            doc = self._docs.get(cid)
            if doc is not None:
                doc["ownerIdentifier"] = owner
                changed += 1
        return changed
