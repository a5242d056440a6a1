#!/usr/bin/env python3
"""Print every registered user (administrative/debug use).

Run from repo root with .env (NEO4J_URI, NEO4J_USER, NEO4J_PASSWORD).
"""
import asyncio
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT / "src"))

from agenda.application import CredentialService  # noqa: E402
from agenda.bootstrap import get_driver  # noqa: E402
from agenda.config import configure_logging, load_settings  # noqa: E402
from agenda.infrastructure import Neo4jUserRepository  # noqa: E402


async def run() -> int:
    settings = load_settings()
    configure_logging(settings)
    driver = get_driver(settings)
    try:
        users = await CredentialService(Neo4jUserRepository(driver)).list_all_users()
    finally:
        await driver.close()
    if not users:
        print("No registered users.")
        return 0
    for user in users:
        print(f"Username: {user.username}")
        print(f"Name: {user.name}")
        print(f"Email: {user.email}")
        print(f"Phone: {user.phone or 'not set'}")
        print(f"Registered: {user.registration_date.isoformat()}")
        print("---")
    return 0


def main() -> int:
    return asyncio.run(run())


if __name__ == "__main__":
    sys.exit(main())
