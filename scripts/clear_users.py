#!/usr/bin/env python3
"""Delete every registered user. Contacts are left untouched.

Run from repo root with .env. Asks for confirmation unless --yes is given.
"""
import argparse
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
        removed = await CredentialService(Neo4jUserRepository(driver)).clear_all_users()
    finally:
        await driver.close()
    print(f"Removed {removed} registered user(s).")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--yes", action="store_true", help="do not ask for confirmation")
    args = parser.parse_args()
    if not args.yes and input("Delete ALL registered users? [y/N] ").strip().lower() != "y":
        print("Aborted.")
        return 1
    return asyncio.run(run())


if __name__ == "__main__":
    sys.exit(main())
