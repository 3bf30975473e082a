"""Data models for the seasonsplit package."""
from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Iterator


class SeriesKind(Enum):
    """Classification shared by local episode groups and remote sequels."""
    SEASON = "season"
    MOVIE = "movie"
    SPECIAL = "special"
    OVA = "ova"
    ONA = "ona"

    @classmethod
    def parse(cls, text: str | None) -> SeriesKind | None:
        """Map a free-form marker (``"OVA"``, ``"SP"``, ``"TV"``...) to a kind."""
        if not text:
            return None
        return _KIND_ALIASES.get(text.strip().lower())


_KIND_ALIASES = {
    "season": SeriesKind.SEASON,
    "tv": SeriesKind.SEASON,
    "tv_short": SeriesKind.SEASON,
    "movie": SeriesKind.MOVIE,
    "film": SeriesKind.MOVIE,
    "special": SeriesKind.SPECIAL,
    "specials": SeriesKind.SPECIAL,
    "sp": SeriesKind.SPECIAL,
    "ova": SeriesKind.OVA,
    "oad": SeriesKind.OVA,
    "ona": SeriesKind.ONA,
}


# ------------------------------------------------------------------
# Local episodes
# ------------------------------------------------------------------

@dataclass(frozen=True)
class Episode:
    """One video file parsed by an EpisodeMatcher."""
    title: str
    number: int
    filename: str
    kind: SeriesKind = SeriesKind.SEASON


class SortedEpisodes:
    """Episodes of one category ordered by episode number.

    Built once per scan and never mutated.  When two files carry the
    same number, the one given later wins.
    """

    def __init__(self, episodes: Iterable[Episode]):
        by_number: dict[int, Episode] = {}
        for episode in episodes:
            by_number[episode.number] = episode
        self._episodes = tuple(by_number[n] for n in sorted(by_number))
        self._numbers = [ep.number for ep in self._episodes]

    def find(self, number: int) -> Episode | None:
        index = bisect.bisect_left(self._numbers, number)
        if index < len(self._numbers) and self._numbers[index] == number:
            return self._episodes[index]
        return None

    def highest_number(self) -> int:
        """Highest episode number present, 0 when empty."""
        return self._numbers[-1] if self._numbers else 0

    def numbers(self) -> list[int]:
        return list(self._numbers)

    def __iter__(self) -> Iterator[Episode]:
        return iter(self._episodes)

    def __len__(self) -> int:
        return len(self._episodes)

    def __repr__(self) -> str:
        return f"SortedEpisodes({describe_numbers(self._numbers)})"


@dataclass
class CategorizedEpisodes:
    """Episodes of one directory grouped by their category tag."""
    title: str
    path: Path
    categories: dict[SeriesKind, SortedEpisodes] = field(default_factory=dict)

    def get(self, kind: SeriesKind) -> SortedEpisodes | None:
        return self.categories.get(kind)

    def kinds(self) -> list[SeriesKind]:
        return list(self.categories)

    def items(self):
        return self.categories.items()

    def __len__(self) -> int:
        return len(self.categories)


@dataclass
class EpisodeDirectory:
    """Main-run episodes of one directory, keyed by episode number."""
    title: str
    path: Path
    episodes: dict[int, Path] = field(default_factory=dict)

    def get(self, number: int) -> Path | None:
        return self.episodes.get(number)

    def describe_numbers(self) -> str:
        return describe_numbers(sorted(self.episodes))


def describe_numbers(numbers: list[int]) -> str:
    """
    Collapse sorted episode numbers into a compact listing.

    ``[1, 2, 3, 5, 7, 8]`` becomes ``"1..3 | 5 | 7..8"``; an empty
    list becomes ``"none"``.
    """
    if not numbers:
        return "none"

    runs: list[str] = []
    start = prev = numbers[0]
    for number in numbers[1:]:
        if number == prev + 1:
            prev = number
            continue
        runs.append(str(start) if start == prev else f"{start}..{prev}")
        start = prev = number
    runs.append(str(start) if start == prev else f"{start}..{prev}")
    return " | ".join(runs)


# ------------------------------------------------------------------
# Remote metadata
# ------------------------------------------------------------------

@dataclass(frozen=True)
class SequelRef:
    """Reference to a sequel of a remote series."""
    id: int
    kind: SeriesKind


@dataclass
class SeriesInfo:
    """Represents a series from the remote metadata service."""
    id: int
    title: str
    episodes: int
    episode_length: int = 0
    sequels: dict[SeriesKind, SequelRef] = field(default_factory=dict)
    romaji: str = ""

    def sequel_by_kind(self, kind: SeriesKind) -> SequelRef | None:
        return self.sequels.get(kind)

    def direct_sequel(self) -> SequelRef | None:
        """The sequel that is the next season of this series."""
        return self.sequels.get(SeriesKind.SEASON)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "romaji": self.romaji,
            "episodes": self.episodes,
            "episode_length": self.episode_length,
            "sequels": [
                {"id": ref.id, "kind": ref.kind.value}
                for ref in self.sequels.values()
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SeriesInfo:
        sequels = {}
        for entry in data.get("sequels", []):
            kind = SeriesKind(entry["kind"])
            sequels[kind] = SequelRef(id=entry["id"], kind=kind)
        return cls(
            id=data["id"],
            title=data["title"],
            romaji=data.get("romaji", ""),
            episodes=data.get("episodes", 0),
            episode_length=data.get("episode_length", 0),
            sequels=sequels,
        )


# ------------------------------------------------------------------
# Split planning
# ------------------------------------------------------------------

@dataclass(frozen=True)
class SplitAction:
    """Link one file of a merged directory to its per-season name."""
    old_name: str
    new_name: str


@dataclass
class ResolvedSeries:
    """A sequel whose local episodes are ready to be split out."""
    info: SeriesInfo
    base_dir: Path
    out_dir: Path
    actions: list[SplitAction] = field(default_factory=list)


class MergedSeries:
    """Outcome of resolving one sequel: either resolved or failed.

    Failed outcomes only carry the sequel kind; resolved outcomes hold
    the full ResolvedSeries.
    """

    __slots__ = ("kind", "series")

    def __init__(self, kind: SeriesKind, series: ResolvedSeries | None = None):
        self.kind = kind
        self.series = series

    @classmethod
    def resolved(cls, series: ResolvedSeries, kind: SeriesKind) -> MergedSeries:
        return cls(kind, series)

    @classmethod
    def failed(cls, kind: SeriesKind) -> MergedSeries:
        return cls(kind)

    @property
    def is_resolved(self) -> bool:
        return self.series is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MergedSeries):
            return NotImplemented
        return self.kind == other.kind and self.series == other.series

    def __repr__(self) -> str:
        if self.series is None:
            return f"MergedSeries.failed({self.kind.name})"
        return f"MergedSeries.resolved({self.series.info.title!r}, {self.kind.name})"
