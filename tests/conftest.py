"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from craftbrew.models.entry import Entry, EntryKind
from craftbrew.utils.logs import ROOT_LOGGER, shutdown_logging
from fakes import FakeBackend


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point XDG config/state at a temporary directory for every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "xdg-state"))
    monkeypatch.delenv("CRAFTBREW_MANIFEST_DIR", raising=False)


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Detach run handlers and restore propagation after each test."""
    yield
    shutdown_logging()
    logging.getLogger(ROOT_LOGGER).propagate = True


@pytest.fixture
def make_backend() -> Callable[..., FakeBackend]:
    """Factory for fake backends."""
    return FakeBackend


@pytest.fixture
def fake_backend() -> FakeBackend:
    """Fake backend with nothing installed."""
    return FakeBackend()


@pytest.fixture
def manifest_dir(tmp_path: Path) -> Path:
    """Directory with the four preset manifests."""
    directory = tmp_path / "manifests"
    directory.mkdir()
    (directory / "base.brewfile").write_text(
        "# Essential tools\n"
        'tap "homebrew/bundle"\n'
        'brew "git"\n'
        'brew "jq"\n'
        "\n"
        "# end of base\n"
    )
    (directory / "dev.brewfile").write_text(
        '# Development\ncask "docker"\nbrew "git"\nvscode "ms-python.python"\n'
    )
    (directory / "productivity.brewfile").write_text(
        'cask "libreoffice"\nmas "Keynote", id: 409183694\n'
    )
    (directory / "utilities.brewfile").write_text('brew "htop"\ncask "the-unarchiver"\n')
    return directory


@pytest.fixture
def brew_dump_output() -> str:
    """Sample 'brew bundle dump --file=-' output."""
    return """tap "hashicorp/tap"
tap "homebrew/bundle"
brew "git"
brew "hashicorp/tap/terraform"
brew "wget"
cask "docker"
mas "Xcode", id: 497799835
vscode "ms-python.python"
"""


@pytest.fixture
def formula() -> Callable[[str], Entry]:
    """Factory for formula entries."""

    def _make(name: str) -> Entry:
        return Entry(kind=EntryKind.FORMULA, identifier=name)

    return _make
