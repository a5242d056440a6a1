"""Tests for settings loading."""

from pathlib import Path

from agenda.config import default_state_path, load_settings


def test_state_path_inside_source_checkout(tmp_path) -> None:
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'agenda'\n", encoding="utf-8")
    assert default_state_path(tmp_path) == tmp_path / ".agenda" / "state.json"


def test_state_path_in_home_when_installed(tmp_path) -> None:
    site_packages = tmp_path / "lib" / "python3.12"
    site_packages.mkdir(parents=True)
    assert default_state_path(site_packages) == Path.home() / ".agenda" / "state.json"


def test_environment_overrides(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("AGENDA_STATE_PATH", str(tmp_path / "state.json"))
    monkeypatch.setenv("AGENDA_FALLBACK_OWNER", " root ")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = load_settings()
    assert settings.state_path == tmp_path / "state.json"
    assert settings.fallback_owner == "root"
    assert settings.log_level == "DEBUG"
