"""Owner-scoped contact CRUD. The owner is always the session's current identifier."""

import logging
from collections.abc import Iterable

from agenda.application.credential_service import CredentialService
from agenda.application.dto import (
    ContactCreated,
    ContactDeleted,
    ContactInput,
    ContactNotFound,
    ContactUpdated,
    Invalid,
    NotAuthenticated,
    StoreFailure,
    UserNotFound,
)
from agenda.application.migrations import MigrationRegistry
from agenda.application.ports import ContactRepository, StoreError
from agenda.application.session import Session
from agenda.domain import Contact, ContactGroup, group_by_initial

logger = logging.getLogger(__name__)

# Fields written by update; id, created_at and owner never change.
MUTABLE_FIELDS = (
    "name",
    "phone",
    "address",
    "age",
    "hobbies",
    "latitude",
    "longitude",
    "profile_image",
)


class ContactService:
    """Create, list, update and delete the current user's contacts."""

    def __init__(
        self,
        repository: ContactRepository,
        credentials: CredentialService,
        session: Session,
        migrations: MigrationRegistry | None = None,
    ) -> None:
        self._repo = repository
        self._credentials = credentials
        self._session = session
        self._migrations = migrations

    async def open(self) -> int:
        """Run pending ownership migrations for the current identifier. Returns contacts changed.

        Nothing runs without a session; orphans wait for the first real owner.
        """
        identifier = self._session.current_identifier()
        if self._migrations is None or identifier is None:
            return 0
        return await self._migrations.run_pending(identifier)

    async def list_contacts(self) -> list[Contact] | StoreFailure:
        """Return the current owner's contacts sorted by name. Empty when nobody is logged in."""
        identifier = self._session.current_identifier()
        if identifier is None:
            logger.info("list_contacts without a session; returning no contacts")
            return []
        if self._migrations is not None:
            await self._migrations.run_pending(identifier)
        try:
            return await self._repo.list_by_owner(identifier)
        except StoreError as e:
            logger.warning("Listing contacts for %s failed: %s", identifier, e)
            return StoreFailure(message=str(e))

    async def grouped(self) -> list[ContactGroup] | StoreFailure:
        """Current owner's contacts grouped by initial letter, keys sorted."""
        contacts = await self.list_contacts()
        if isinstance(contacts, StoreFailure):
            return contacts
        return group_by_initial(contacts)

    async def get_contact(self, contact_id: str) -> Contact | None | StoreFailure:
        """Return one of the current owner's contacts by id, or None."""
        identifier = self._session.current_identifier()
        if identifier is None:
            return None
        try:
            return await self._repo.get_by_id(identifier, contact_id)
        except StoreError as e:
            return StoreFailure(message=str(e))

    async def create_contact(
        self, data: ContactInput
    ) -> ContactCreated | Invalid | NotAuthenticated | UserNotFound | StoreFailure:
        """Store a new contact owned by the current identifier."""
        owner = await self._resolve_owner()
        if not isinstance(owner, str):
            return owner
        try:
            contact = Contact(
                name=data.name,
                phone=data.phone,
                address=data.address,
                age=data.age,
                hobbies=data.hobbies,
                latitude=data.latitude,
                longitude=data.longitude,
                profile_image=data.profile_image,
                owner_identifier=owner,
            )
        except ValueError:
            return Invalid(reason="Name is required.")
        try:
            await self._repo.add(contact)
        except StoreError as e:
            logger.warning("Adding contact for %s failed: %s", owner, e)
            return StoreFailure(message=str(e))
        return ContactCreated(contact_id=contact.id, name=contact.name)

    async def update_contact(
        self, contact: Contact, fields: Iterable[str] | None = None
    ) -> ContactUpdated | ContactNotFound | NotAuthenticated | UserNotFound | StoreFailure:
        """Write the contact's mutable fields over the stored record with the same id.

        By default every field in MUTABLE_FIELDS is written, so a None value
        clears the stored one. Pass fields (e.g. ("name", "phone", "address"))
        to write only those and leave the rest untouched.
        """
        names = MUTABLE_FIELDS if fields is None else tuple(fields)
        unknown = set(names) - set(MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"not updatable: {', '.join(sorted(unknown))}")
        owner = await self._resolve_owner()
        if not isinstance(owner, str):
            return owner
        changes = {name: getattr(contact, name) for name in names}
        try:
            found = await self._repo.update(owner, contact.id, changes)
        except StoreError as e:
            logger.warning("Updating contact %s failed: %s", contact.id, e)
            return StoreFailure(message=str(e))
        if not found:
            return ContactNotFound(contact_id=contact.id)
        return ContactUpdated(contact_id=contact.id)

    async def delete_contact(
        self, contact_id: str
    ) -> ContactDeleted | ContactNotFound | NotAuthenticated | UserNotFound | StoreFailure:
        owner = await self._resolve_owner()
        if not isinstance(owner, str):
            return owner
        try:
            found = await self._repo.delete(owner, contact_id)
        except StoreError as e:
            logger.warning("Deleting contact %s failed: %s", contact_id, e)
            return StoreFailure(message=str(e))
        if not found:
            return ContactNotFound(contact_id=contact_id)
        return ContactDeleted(contact_id=contact_id)

    async def _resolve_owner(self) -> str | NotAuthenticated | UserNotFound | StoreFailure:
        """Current identifier, provided it belongs to a stored user."""
        identifier = self._session.current_identifier()
        if identifier is None:
            return NotAuthenticated()
        try:
            user = await self._credentials.resolve(identifier)
        except StoreError as e:
            return StoreFailure(message=str(e))
        if user is None:
            return UserNotFound(identifier=identifier)
        return identifier
