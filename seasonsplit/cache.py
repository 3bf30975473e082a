"""Cache module for storing remote series lookups locally."""
import json
import logging
from pathlib import Path
from typing import Any

from .config import config_dir
from .models import SeriesInfo

log = logging.getLogger(__name__)

CACHE_FILE = "series_cache.json"


class SeriesCache:
    """Local JSON cache of remote series metadata, keyed by series ID."""

    def __init__(self, cache_dir: Path | None = None):
        """
        Initialize the cache.

        Args:
            cache_dir: Directory to store cache file. Defaults to the
                       settings directory.
        """
        if cache_dir is None:
            cache_dir = config_dir()
        cache_dir = Path(cache_dir)
        cache_dir.mkdir(parents=True, exist_ok=True)
        self.cache_path = cache_dir / CACHE_FILE
        self._cache: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        """Load cache from disk."""
        if self.cache_path.exists():
            try:
                with open(self.cache_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                if isinstance(data, dict) and "series" in data:
                    return data
            except (json.JSONDecodeError, OSError) as e:
                log.warning("Discarding unreadable cache %s: %s", self.cache_path, e)
        return self._empty_cache()

    def _empty_cache(self) -> dict[str, Any]:
        """Return empty cache structure."""
        return {"series": {}}

    def _save(self) -> None:
        """Save cache to disk."""
        try:
            with open(self.cache_path, 'w', encoding='utf-8') as f:
                json.dump(self._cache, f, indent=2, ensure_ascii=False)
        except OSError as e:
            # The cache is an optimisation; lookups still work without it
            log.warning("Could not write cache %s: %s", self.cache_path, e)

    def get_series(self, series_id: int) -> SeriesInfo | None:
        """
        Get cached series metadata.

        Args:
            series_id: Remote series ID

        Returns:
            SeriesInfo if cached, None otherwise
        """
        data = self._cache["series"].get(str(series_id))
        if data is None:
            return None
        try:
            return SeriesInfo.from_dict(data)
        except (KeyError, ValueError) as e:
            log.warning("Ignoring malformed cache entry for %s: %s", series_id, e)
            return None

    def set_series(self, info: SeriesInfo) -> None:
        """Cache series metadata."""
        self._cache["series"][str(info.id)] = info.to_dict()
        self._save()

    def clear(self) -> None:
        """Clear all cached data."""
        self._cache = self._empty_cache()
        self._save()
