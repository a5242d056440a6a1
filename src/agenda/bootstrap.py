"""Composition root: wire the services to Neo4j, the state file and Firebase."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from neo4j import AsyncDriver, AsyncGraphDatabase

from agenda.application import (
    AuthService,
    ContactService,
    CredentialService,
    IdentityProvider,
    KeyValueStore,
    MigrationRegistry,
    Session,
    default_migrations,
)
from agenda.application.ports import ContactRepository, UserRepository
from agenda.config import Settings
from agenda.infrastructure import (
    FirebaseIdentityProvider,
    JsonFileKeyValueStore,
    Neo4jContactRepository,
    Neo4jUserRepository,
    ensure_constraints,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Agenda:
    """The wired services sharing one session."""

    session: Session
    credentials: CredentialService
    contacts: ContactService
    auth: AuthService | None
    migrations: MigrationRegistry


def build_agenda(
    users: UserRepository,
    contacts: ContactRepository,
    state: KeyValueStore,
    provider: IdentityProvider | None = None,
    *,
    fallback_owner: str | None = None,
) -> Agenda:
    """Wire services over any adapters (in-memory in tests, Neo4j in production)."""
    session = Session(state)
    credentials = CredentialService(users)
    migrations = MigrationRegistry(
        state,
        contacts,
        credentials,
        default_migrations(fallback_owner) if fallback_owner else None,
    )
    return Agenda(
        session=session,
        credentials=credentials,
        contacts=ContactService(contacts, credentials, session, migrations),
        auth=AuthService(provider, credentials, session) if provider is not None else None,
        migrations=migrations,
    )


def get_driver(settings: Settings) -> AsyncDriver:
    return AsyncGraphDatabase.driver(
        settings.neo4j_uri, auth=(settings.neo4j_user, settings.neo4j_password)
    )


@asynccontextmanager
async def open_agenda(settings: Settings) -> AsyncIterator[Agenda]:
    """Connect, ensure constraints, run pending migrations, and close everything on exit."""
    driver = get_driver(settings)
    provider = (
        FirebaseIdentityProvider(settings.firebase_api_key)
        if settings.firebase_api_key
        else None
    )
    if provider is None:
        logger.info("FIREBASE_API_KEY not set; provider sign-in is unavailable")
    try:
        await ensure_constraints(driver)
        agenda = build_agenda(
            Neo4jUserRepository(driver),
            Neo4jContactRepository(driver),
            JsonFileKeyValueStore(settings.state_path),
            provider,
            fallback_owner=settings.fallback_owner,
        )
        await agenda.contacts.open()
        yield agenda
    finally:
        if provider is not None:
            await provider.aclose()
        await driver.close()
