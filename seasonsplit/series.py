"""Per-directory series configuration.

Remembers which remote series a directory belongs to and which custom
episode pattern (if any) its files need, so later runs need no flags.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .matcher import EpisodeMatcher

log = logging.getLogger(__name__)

CONFIG_FILE = ".seasonsplit.json"


@dataclass
class SeriesConfig:
    """Saved settings of one series directory."""
    path: Path
    series_id: int | None = None
    pattern: str | None = None

    @classmethod
    def load(cls, directory: Path) -> SeriesConfig:
        """
        Load the configuration stored in *directory*.

        A missing or unreadable file yields an empty configuration.
        """
        directory = Path(directory)
        config_path = directory / CONFIG_FILE
        if not config_path.exists():
            return cls(path=directory)

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Ignoring unreadable %s: %s", config_path, e)
            return cls(path=directory)

        return cls(
            path=directory,
            series_id=data.get("series_id"),
            pattern=data.get("pattern"),
        )

    def save(self) -> bool:
        """Write the configuration back to its directory."""
        config_path = self.path / CONFIG_FILE
        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump(
                    {"series_id": self.series_id, "pattern": self.pattern},
                    f, indent=2, ensure_ascii=False,
                )
            return True
        except OSError as e:
            log.warning("Could not save %s: %s", config_path, e)
            return False

    def matcher(self) -> EpisodeMatcher:
        """Build the episode matcher for this directory."""
        return EpisodeMatcher(self.pattern)
