"""Tests for the ownership migrations and their registry."""

import asyncio

import pytest

from agenda.application import (
    AdoptOrphanContacts,
    ContactService,
    CredentialService,
    MigrationRegistry,
    RewriteUsernameOwnerToEmail,
    Session,
    StoreError,
)
from agenda.application.migrations import ADOPT_ORPHANS_KEY, EMAIL_REWRITE_KEY_PREFIX
from agenda.domain import User
from agenda.infrastructure import (
    InMemoryContactRepository,
    InMemoryKeyValueStore,
    InMemoryUserRepository,
)


class _CountingContacts(InMemoryContactRepository):
    """Counts ownership rewrites."""

    def __init__(self) -> None:
        super().__init__()
        self.reassign_calls = 0

    async def reassign_owner(self, contact_ids, owner):
        self.reassign_calls += 1
        return await super().reassign_owner(contact_ids, owner)


class _BrokenContacts(InMemoryContactRepository):
    async def find_orphan_ids(self):
        raise StoreError("store offline")


def _setup(contacts=None):
    flags = InMemoryKeyValueStore()
    contacts = contacts if contacts is not None else _CountingContacts()
    credentials = CredentialService(InMemoryUserRepository())
    asyncio.run(
        credentials.register(
            User(name="Ana", email="ana@x.com", username="ana", password="secret1")
        )
    )
    return MigrationRegistry(flags, contacts, credentials), flags, contacts


def test_migrations_run_in_id_order() -> None:
    registry, _, _ = _setup()
    assert [m.migration_id for m in registry.migrations] == [1, 2]


def test_duplicate_migration_ids_rejected() -> None:
    flags = InMemoryKeyValueStore()
    credentials = CredentialService(InMemoryUserRepository())
    with pytest.raises(ValueError, match="unique"):
        MigrationRegistry(
            flags,
            InMemoryContactRepository(),
            credentials,
            [AdoptOrphanContacts(), AdoptOrphanContacts()],
        )


def test_orphans_adopted_by_current_identifier() -> None:
    registry, flags, contacts = _setup()
    contacts.put_raw("c1", {"nombre": "Bob"})
    contacts.put_raw("c2", {"nombre": "Eve", "ownerIdentifier": ""})
    contacts.put_raw("c3", {"nombre": "Kim", "ownerIdentifier": "carol"})

    changed = asyncio.run(registry.run_pending("ana"))
    assert changed == 2
    assert contacts.raw("c1")["ownerIdentifier"] == "ana"
    assert contacts.raw("c2")["ownerIdentifier"] == "ana"
    assert contacts.raw("c3")["ownerIdentifier"] == "carol"
    assert flags.get(ADOPT_ORPHANS_KEY) is True


def test_orphans_fall_back_to_admin_without_identifier() -> None:
    registry, _, contacts = _setup()
    contacts.put_raw("c1", {"nombre": "Bob"})
    asyncio.run(registry.run_pending(None))
    assert contacts.raw("c1")["ownerIdentifier"] == "admin"


def test_adopt_orphans_runs_once() -> None:
    registry, flags, contacts = _setup()
    contacts.put_raw("c1", {"nombre": "Bob"})
    asyncio.run(registry.run_pending("ana"))
    assert contacts.reassign_calls == 1

    contacts.put_raw("c2", {"nombre": "Late orphan"})
    assert asyncio.run(registry.needs_running(AdoptOrphanContacts(), "ana")) is False
    assert asyncio.run(registry.run_pending("carol")) == 0
    assert contacts.reassign_calls == 1
    assert contacts.raw("c2").get("ownerIdentifier") is None


def test_flag_set_even_when_nothing_to_adopt() -> None:
    registry, flags, contacts = _setup()
    asyncio.run(registry.run_pending("ana"))
    assert flags.get(ADOPT_ORPHANS_KEY) is True
    assert contacts.reassign_calls == 0


def test_username_contacts_rewritten_to_email_once() -> None:
    registry, flags, contacts = _setup()
    contacts.put_raw("c1", {"nombre": "Bob", "ownerIdentifier": "ana"})
    contacts.put_raw("c2", {"nombre": "Zed", "ownerIdentifier": "ANA"})
    contacts.put_raw("c3", {"nombre": "Kim", "ownerIdentifier": "anabel"})

    changed = asyncio.run(registry.run_pending("ana@x.com"))
    assert changed == 2
    assert contacts.raw("c1")["ownerIdentifier"] == "ana@x.com"
    assert contacts.raw("c2")["ownerIdentifier"] == "ana@x.com"
    assert contacts.raw("c3")["ownerIdentifier"] == "anabel"
    assert flags.get(EMAIL_REWRITE_KEY_PREFIX + "ana@x.com") is True

    calls = contacts.reassign_calls
    contacts.put_raw("c4", {"nombre": "Late", "ownerIdentifier": "ana"})
    assert asyncio.run(registry.needs_running(RewriteUsernameOwnerToEmail(), "ana@x.com")) is False
    assert asyncio.run(registry.run_pending("ana@x.com")) == 0
    assert contacts.reassign_calls == calls
    assert contacts.raw("c4")["ownerIdentifier"] == "ana"


def test_rewrite_skipped_for_username_session() -> None:
    registry, flags, contacts = _setup()
    contacts.put_raw("c1", {"nombre": "Bob", "ownerIdentifier": "ana"})
    asyncio.run(registry.run_pending("ana"))
    assert contacts.raw("c1")["ownerIdentifier"] == "ana"
    assert flags.get(EMAIL_REWRITE_KEY_PREFIX + "ana@x.com") is None


def test_rewrite_skipped_for_unknown_email() -> None:
    registry, flags, _ = _setup()
    assert asyncio.run(registry.needs_running(RewriteUsernameOwnerToEmail(), "ghost@x.com")) is False
    asyncio.run(registry.run_pending("ghost@x.com"))
    assert flags.get(EMAIL_REWRITE_KEY_PREFIX + "ghost@x.com") is None


def test_failures_are_swallowed_and_not_flagged() -> None:
    registry, flags, _ = _setup(_BrokenContacts())
    assert asyncio.run(registry.run_pending("ana")) == 0
    assert flags.get(ADOPT_ORPHANS_KEY) is None


class _ReadOnlyFlags(InMemoryKeyValueStore):
    def set(self, key, value):
        raise OSError("disk full")


class _ExplodingMigration:
    migration_id = 3
    name = "exploding"

    async def completion_key(self, ctx):
        return "Exploding"

    async def apply(self, ctx):
        raise RuntimeError("boom")


def test_failing_flag_write_does_not_escape() -> None:
    contacts = InMemoryContactRepository()
    contacts.put_raw("c1", {"nombre": "Bob"})
    registry = MigrationRegistry(
        _ReadOnlyFlags(), contacts, CredentialService(InMemoryUserRepository())
    )
    assert asyncio.run(registry.run_pending("ana")) == 1
    assert contacts.raw("c1")["ownerIdentifier"] == "ana"


def test_unexpected_migration_error_is_logged_and_others_still_run() -> None:
    flags = InMemoryKeyValueStore()
    contacts = InMemoryContactRepository()
    contacts.put_raw("c1", {"nombre": "Bob"})
    registry = MigrationRegistry(
        flags,
        contacts,
        CredentialService(InMemoryUserRepository()),
        [_ExplodingMigration(), AdoptOrphanContacts()],
    )
    assert asyncio.run(registry.run_pending("ana")) == 1
    assert flags.get("Exploding") is None
    assert flags.get(ADOPT_ORPHANS_KEY) is True


def test_list_survives_unwritable_flag_store() -> None:
    users = InMemoryUserRepository()
    credentials = CredentialService(users)
    asyncio.run(
        credentials.register(
            User(name="Ana", email="ana@x.com", username="ana", password="secret1")
        )
    )
    contacts = InMemoryContactRepository()
    contacts.put_raw("c1", {"nombre": "Bob"})
    session = Session(InMemoryKeyValueStore())
    session.set_current_user("ana")
    service = ContactService(
        contacts, credentials, session, MigrationRegistry(_ReadOnlyFlags(), contacts, credentials)
    )
    assert [c.name for c in asyncio.run(service.list_contacts())] == ["Bob"]
