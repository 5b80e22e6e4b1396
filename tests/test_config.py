"""Tests for configuration."""

from deptree import config
from deptree.config import Settings, get_settings


def test_defaults(monkeypatch) -> None:
    """Test default settings."""
    for name in ("DEPTREE_GLOBAL_INSTALL", "DEPTREE_OPTIONAL", "DEPTREE_SHRINKWRAP_FILENAME"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.global_install is False
    assert settings.optional is True
    assert settings.shrinkwrap_filename == "npm-shrinkwrap.json"


def test_environment(monkeypatch) -> None:
    """Test settings are read from prefixed environment variables."""
    monkeypatch.setenv("DEPTREE_GLOBAL_INSTALL", "true")
    monkeypatch.setenv("deptree_optional", "0")
    monkeypatch.setenv("DEPTREE_SHRINKWRAP_FILENAME", "lock.json")

    settings = Settings(_env_file=None)

    assert settings.global_install is True
    assert settings.optional is False
    assert settings.shrinkwrap_filename == "lock.json"


def test_env_file(tmp_path, monkeypatch) -> None:
    """Test settings are read from a .env file."""
    monkeypatch.delenv("DEPTREE_OPTIONAL", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("DEPTREE_OPTIONAL=false\nUNRELATED=1\n", encoding="utf-8")

    settings = Settings(_env_file=env_file)

    assert settings.optional is False


def test_get_settings_is_shared(monkeypatch) -> None:
    """Test get_settings returns one lazily created instance."""
    monkeypatch.setattr(config, "_settings", None)

    first = get_settings()

    assert get_settings() is first
