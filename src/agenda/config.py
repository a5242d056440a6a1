"""Settings from the environment (optionally a .env file) and logging setup."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from agenda.application.migrations import DEFAULT_FALLBACK_OWNER

# Repo root: src/agenda/config.py -> parents[2]
REPO_ROOT = Path(__file__).resolve().parents[2]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def default_state_path(root: Path = REPO_ROOT) -> Path:
    """<repo>/.agenda/state.json in a source checkout, else ~/.agenda/state.json."""
    if (root / "pyproject.toml").is_file():
        return root / ".agenda" / "state.json"
    return Path.home() / ".agenda" / "state.json"


@dataclass(frozen=True)
class Settings:
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"
    firebase_api_key: str = ""
    state_path: Path = default_state_path()
    fallback_owner: str = DEFAULT_FALLBACK_OWNER
    log_level: str = "INFO"


def load_dotenv_files() -> None:
    """Load .env from the repo root or the current directory, first found wins."""
    for path in (REPO_ROOT / ".env", Path.cwd() / ".env"):
        if path.exists():
            load_dotenv(path)
            break


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def load_settings() -> Settings:
    load_dotenv_files()
    state_path = _env("AGENDA_STATE_PATH")
    return Settings(
        neo4j_uri=_env("NEO4J_URI", Settings.neo4j_uri),
        neo4j_user=_env("NEO4J_USER", Settings.neo4j_user),
        neo4j_password=_env("NEO4J_PASSWORD", Settings.neo4j_password),
        firebase_api_key=_env("FIREBASE_API_KEY"),
        state_path=Path(state_path) if state_path else Settings.state_path,
        fallback_owner=_env("AGENDA_FALLBACK_OWNER") or DEFAULT_FALLBACK_OWNER,
        log_level=_env("LOG_LEVEL", "INFO").upper() or "INFO",
    )


def configure_logging(settings: Settings) -> None:
    """Entry points only; the library itself never configures logging."""
    logging.basicConfig(format=LOG_FORMAT, level=settings.log_level)
