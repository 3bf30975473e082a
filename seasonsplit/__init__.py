"""
seasonsplit - merged season splitter

Detects the episodes of a locally stored series, resolves which of them
belong to later seasons using remote sequel metadata, and links them
into one directory per season.
"""
from .models import (
    Episode,
    SortedEpisodes,
    CategorizedEpisodes,
    EpisodeDirectory,
    SeriesKind,
    SequelRef,
    SeriesInfo,
    SplitAction,
    ResolvedSeries,
    MergedSeries,
)
from .errors import (
    SeasonSplitError,
    MatcherError,
    MissingGroupError,
    PatternError,
    ParseError,
    ScanError,
    TitleConflictError,
    NoEpisodesError,
    RemoteError,
    SplitError,
    LinkError,
)
from .matcher import EpisodeMatcher
from .scanner import scan_directory, scan_categorized
from .remote import RemoteService, AniListClient, OfflineRemote
from .resolver import SeasonResolver, resolve
from .splitter import build_split_actions, execute, split_all
from .cache import SeriesCache

__version__ = "0.3.0"
__all__ = [
    "Episode",
    "SortedEpisodes",
    "CategorizedEpisodes",
    "EpisodeDirectory",
    "SeriesKind",
    "SequelRef",
    "SeriesInfo",
    "SplitAction",
    "ResolvedSeries",
    "MergedSeries",
    "SeasonSplitError",
    "MatcherError",
    "MissingGroupError",
    "PatternError",
    "ParseError",
    "ScanError",
    "TitleConflictError",
    "NoEpisodesError",
    "RemoteError",
    "SplitError",
    "LinkError",
    "EpisodeMatcher",
    "scan_directory",
    "scan_categorized",
    "RemoteService",
    "AniListClient",
    "OfflineRemote",
    "SeasonResolver",
    "resolve",
    "build_split_actions",
    "execute",
    "split_all",
    "SeriesCache",
]
