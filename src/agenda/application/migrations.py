"""Ownership migrations for legacy contact records.

Each migration has a stable id, a completion key stored in the key-value
store once it has run, and an idempotent action. The registry runs pending
migrations in id order. Failures are logged and never reach the caller.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from agenda.application.credential_service import CredentialService
from agenda.application.ports import ContactRepository, KeyValueStore, StoreError
from agenda.domain import looks_like_email

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_OWNER = "admin"

ADOPT_ORPHANS_KEY = "PersonOwnerMigrationCompleted"
EMAIL_REWRITE_KEY_PREFIX = "PersonEmailMigrationCompleted_"


@dataclass(frozen=True)
class MigrationContext:
    """What a migration may read: the active identifier and the stores."""

    identifier: str | None
    contacts: ContactRepository
    credentials: CredentialService


class Migration(Protocol):
    migration_id: int
    name: str

    async def completion_key(self, ctx: MigrationContext) -> str | None:
        """Key of the completion flag, or None when the migration does not apply."""
        ...

    async def apply(self, ctx: MigrationContext) -> int:
        """Run the rewrite. Returns the number of contacts changed."""
        ...


class AdoptOrphanContacts:
    """Give every contact without an owner to the active identifier (or the fallback owner). Runs once."""

    migration_id = 1
    name = "adopt-orphan-contacts"

    def __init__(self, fallback_owner: str = DEFAULT_FALLBACK_OWNER) -> None:
        self._fallback_owner = fallback_owner

    async def completion_key(self, ctx: MigrationContext) -> str | None:
        return ADOPT_ORPHANS_KEY

    async def apply(self, ctx: MigrationContext) -> int:
        orphan_ids = await ctx.contacts.find_orphan_ids()
        if not orphan_ids:
            return 0
        owner = ctx.identifier or self._fallback_owner
        changed = await ctx.contacts.reassign_owner(orphan_ids, owner)
        logger.info("Adopted %d orphan contacts for %s", changed, owner)
        return changed


class RewriteUsernameOwnerToEmail:
    """
    When the session is email-based, move contacts owned by the user's
    username (any case) to the normalized email. Runs once per email.
    """

    migration_id = 2
    name = "rewrite-username-owner-to-email"

    async def completion_key(self, ctx: MigrationContext) -> str | None:
        if not looks_like_email(ctx.identifier):
            return None
        user = await ctx.credentials.get_user_by_email(ctx.identifier)
        if user is None:
            return None
        return EMAIL_REWRITE_KEY_PREFIX + user.email

    async def apply(self, ctx: MigrationContext) -> int:
        user = await ctx.credentials.get_user_by_email(ctx.identifier)
        if user is None:
            return 0
        ids = await ctx.contacts.find_ids_by_owner_ci(user.username)
        if not ids:
            return 0
        changed = await ctx.contacts.reassign_owner(ids, user.email)
        logger.info(
            "Moved %d contacts from username %r to email %r", changed, user.username, user.email
        )
        return changed


def default_migrations(fallback_owner: str = DEFAULT_FALLBACK_OWNER) -> list[Migration]:
    return [AdoptOrphanContacts(fallback_owner), RewriteUsernameOwnerToEmail()]


class MigrationRegistry:
    """Runs flag-gated migrations in id order."""

    def __init__(
        self,
        flags: KeyValueStore,
        contacts: ContactRepository,
        credentials: CredentialService,
        migrations: list[Migration] | None = None,
    ) -> None:
        self._flags = flags
        self._contacts = contacts
        self._credentials = credentials
        chosen = migrations if migrations is not None else default_migrations()
        ids = [m.migration_id for m in chosen]
        if len(ids) != len(set(ids)):
            raise ValueError("migration ids must be unique")
        self._migrations = sorted(chosen, key=lambda m: m.migration_id)

    @property
    def migrations(self) -> list[Migration]:
        return list(self._migrations)

    def is_completed(self, key: str) -> bool:
        return bool(self._flags.get(key))

    async def needs_running(self, migration: Migration, identifier: str | None) -> bool:
        key = await migration.completion_key(self._context(identifier))
        return key is not None and not self.is_completed(key)

    async def run_pending(self, identifier: str | None) -> int:
        """Run every pending migration for this identifier. Returns contacts changed."""
        ctx = self._context(identifier)
        total = 0
        for migration in self._migrations:
            try:
                key = await migration.completion_key(ctx)
                if key is None or self.is_completed(key):
                    continue
                total += await migration.apply(ctx)
                self._flags.set(key, True)
            except StoreError as e:
                logger.warning("Migration %s failed: %s", migration.name, e)
            except Exception:
                # Never blocks the caller; the flag stays unset so it retries.
                logger.exception("Migration %s failed", migration.name)
        return total

    def _context(self, identifier: str | None) -> MigrationContext:
        return MigrationContext(
            identifier=identifier,
            contacts=self._contacts,
            credentials=self._credentials,
        )
