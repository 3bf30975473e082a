"""
Pytest configuration and fixtures for seasonsplit tests.
"""
import os
from pathlib import Path

import pytest

from seasonsplit.config import ENV_PREFIX
from seasonsplit.errors import RemoteError
from seasonsplit.models import (
    CategorizedEpisodes,
    Episode,
    SequelRef,
    SeriesInfo,
    SeriesKind,
    SortedEpisodes,
)
from seasonsplit.remote import RemoteService


class FakeRemote(RemoteService):
    """In-memory remote service that records every lookup."""

    def __init__(self, series=(), failing=()):
        self.series = {info.id: info for info in series}
        self.failing = set(failing)
        self.calls: list[int] = []

    def add(self, info: SeriesInfo) -> SeriesInfo:
        self.series[info.id] = info
        return info

    def lookup_by_id(self, series_id: int) -> SeriesInfo:
        self.calls.append(series_id)
        if series_id in self.failing or series_id not in self.series:
            raise RemoteError(f"lookup of {series_id} failed", series_id)
        return self.series[series_id]


def make_info(series_id, title, episodes, **sequels) -> SeriesInfo:
    """Build a SeriesInfo; keyword arguments map kind names to sequel IDs."""
    refs = {}
    for name, sequel_id in sequels.items():
        kind = SeriesKind[name.upper()]
        refs[kind] = SequelRef(id=sequel_id, kind=kind)
    return SeriesInfo(id=series_id, title=title, episodes=episodes, sequels=refs)


def make_episodes(numbers, title="Show", kind=SeriesKind.SEASON, ext=".mkv") -> SortedEpisodes:
    return SortedEpisodes(
        Episode(title=title, number=n, filename=f"{title} - {n:02d}{ext}", kind=kind)
        for n in numbers
    )


def make_categorized(path, **categories) -> CategorizedEpisodes:
    """Build CategorizedEpisodes; keyword arguments map kind names to numbers."""
    return CategorizedEpisodes(
        title="Show",
        path=Path(path),
        categories={
            SeriesKind[name.upper()]: make_episodes(
                numbers, kind=SeriesKind[name.upper()]
            )
            for name, numbers in categories.items()
        },
    )


def touch_all(directory: Path, names) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        (directory / name).write_bytes(b"")
    return directory


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path_factory, monkeypatch):
    """Keep settings, caches and .env lookups out of the real home directory."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.chdir(home)

    # setenv + delenv registers the variable so anything load_dotenv
    # writes during the test is removed again afterwards
    for key in list(os.environ) + [
        ENV_PREFIX + name for name in (
            "SERIES_DIR", "ANILIST_URL", "REQUEST_DELAY",
            "REQUEST_TIMEOUT", "PARTIAL_SUFFIX", "LOG_LEVEL",
        )
    ]:
        if key.startswith(ENV_PREFIX):
            monkeypatch.setenv(key, "")
            monkeypatch.delenv(key)
    return home


@pytest.fixture
def fake_remote():
    return FakeRemote()


@pytest.fixture
def series_dir(tmp_path):
    """A merged series directory inside an otherwise empty library."""
    directory = tmp_path / "library" / "Show"
    directory.mkdir(parents=True)
    return directory
