"""
Shared pytest fixtures for all tests.
"""
from pathlib import Path
from typing import Callable

import pytest

from config import Settings
from core import EnvLoader, PermissionStore, ProfileStore


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Create a temporary directory for testing, with symlinks resolved."""
    return tmp_path.resolve()


@pytest.fixture
def home_dir(temp_dir: Path, monkeypatch) -> Path:
    """Create a fake home directory and point HOME at it."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("VARSET_CONFIG_DIR", raising=False)
    monkeypatch.delenv("VARSET_STRICT_PATHS", raising=False)
    monkeypatch.delenv("VARSET_LOG_LEVEL", raising=False)
    return home


@pytest.fixture
def settings(home_dir: Path) -> Settings:
    """Settings rooted at the fake home directory."""
    return Settings.for_home(home_dir)


@pytest.fixture
def permissions(settings: Settings) -> PermissionStore:
    return PermissionStore(settings)


@pytest.fixture
def profiles(settings: Settings) -> ProfileStore:
    return ProfileStore(settings)


@pytest.fixture
def loader(settings: Settings, permissions: PermissionStore, profiles: ProfileStore) -> EnvLoader:
    return EnvLoader(settings, permissions, profiles)


@pytest.fixture
def make_envrc() -> Callable[..., Path]:
    """Write a configuration file into a directory, creating the directory."""

    def _make(directory: Path, content: str, name: str = ".envrc") -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(content)
        return path

    return _make
