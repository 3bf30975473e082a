"""Settings management for seasonsplit."""
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

log = logging.getLogger(__name__)

APP_NAME = "seasonsplit"
ENV_PREFIX = "SEASONSPLIT_"


# ---------------------------------------------------------------------------
# Platform-appropriate settings directory
# ---------------------------------------------------------------------------

def config_dir() -> Path:
    """Return the platform settings directory, creating it if needed."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home()))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    d = base / APP_NAME
    d.mkdir(parents=True, exist_ok=True)
    return d


# ---------------------------------------------------------------------------
# Default values for every known key
# ---------------------------------------------------------------------------

DEFAULT_SETTINGS: dict[str, Any] = {
    # Where split-off seasons are created; empty means "next to the series"
    "series_dir": "",

    # Remote service
    "anilist_url": "https://graphql.anilist.co",
    "request_delay": 0.25,
    "request_timeout": 10,

    # Scanning
    "partial_suffix": ".part",

    # Logging
    "log_level": "WARNING",
}

# Type used to coerce values coming from the environment
_SETTING_TYPES: dict[str, type] = {
    "series_dir": str,
    "anilist_url": str,
    "request_delay": float,
    "request_timeout": float,
    "partial_suffix": str,
    "log_level": str,
}


def load_env_overrides() -> dict[str, Any]:
    """
    Collect ``SEASONSPLIT_*`` overrides from the environment.

    ``.env`` files in the current directory and then the home directory
    are loaded first; variables already set in the environment win.

    Returns:
        Setting key -> value for every override found
    """
    for env_path in (Path.cwd() / ".env", Path.home() / ".env"):
        if env_path.exists():
            load_dotenv(env_path)

    overrides: dict[str, Any] = {}
    for key, value_type in _SETTING_TYPES.items():
        raw = os.environ.get(ENV_PREFIX + key.upper())
        if raw is None:
            continue
        try:
            overrides[key] = value_type(raw)
        except ValueError:
            log.warning("Ignoring invalid %s%s=%r", ENV_PREFIX, key.upper(), raw)
    return overrides


# ---------------------------------------------------------------------------
# SettingsManager -- single authority for reading / writing settings
# ---------------------------------------------------------------------------

class SettingsManager:
    """Settings store backed by a JSON file, with environment overrides.

    Usage:
        mgr = SettingsManager()
        delay = mgr.get("request_delay")
        mgr.set("series_dir", "/media/anime")
        mgr.save()
    """

    def __init__(self, path: Path | None = None, use_env: bool = True):
        self.path = path or config_dir() / "settings.json"
        self._data: dict[str, Any] = self._load()
        self._overrides: dict[str, Any] = load_env_overrides() if use_env else {}

    # -- public API -------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._overrides:
            return self._overrides[key]
        fallback = DEFAULT_SETTINGS.get(key, default)
        return self._data.get(key, fallback)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def save(self) -> bool:
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, ensure_ascii=False)
            return True
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self.path, e)
            return False

    def all(self) -> dict[str, Any]:
        """Return a merged view: defaults + saved values + environment."""
        merged = DEFAULT_SETTINGS.copy()
        merged.update(self._data)
        merged.update(self._overrides)
        return merged

    def series_dir(self, base_dir: Path) -> Path:
        """Directory that receives split-off seasons of *base_dir*."""
        configured = self.get("series_dir")
        if configured:
            return Path(configured).expanduser()
        return Path(base_dir).absolute().parent

    # -- private ----------------------------------------------------------

    def _load(self) -> dict[str, Any]:
        if self.path.exists():
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except (json.JSONDecodeError, OSError) as e:
                log.warning("Ignoring unreadable settings file %s: %s", self.path, e)
        return {}
