#!/usr/bin/env python3
"""One-off migration: give legacy contacts a correct owner identifier.

Adopts contacts without an owner (to IDENTIFIER, or the fallback owner
"admin" when none is given), then, for an email IDENTIFIER, moves contacts
owned by that user's username to the email. Each step records a completion
flag in the state file, so running it again is a no-op. Run from repo root
with .env. Idempotent.
"""
import argparse
import asyncio
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT / "src"))

from agenda.application import (  # noqa: E402
    CredentialService,
    MigrationRegistry,
    default_migrations,
)
from agenda.bootstrap import get_driver  # noqa: E402
from agenda.config import configure_logging, load_settings  # noqa: E402
from agenda.domain import normalize_identifier  # noqa: E402
from agenda.infrastructure import (  # noqa: E402
    JsonFileKeyValueStore,
    Neo4jContactRepository,
    Neo4jUserRepository,
)


async def run(identifier: str | None) -> int:
    settings = load_settings()
    configure_logging(settings)
    driver = get_driver(settings)
    try:
        registry = MigrationRegistry(
            JsonFileKeyValueStore(settings.state_path),
            Neo4jContactRepository(driver),
            CredentialService(Neo4jUserRepository(driver)),
            default_migrations(settings.fallback_owner),
        )
        changed = await registry.run_pending(identifier)
    finally:
        await driver.close()
    print(f"Migrated {changed} contact(s).")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("identifier", nargs="?", help="username or email of the active user")
    args = parser.parse_args()
    return asyncio.run(run(normalize_identifier(args.identifier) or None))


if __name__ == "__main__":
    sys.exit(main())
