"""Background execution of the resolve and split steps.

Architecture (strict phase separation):

  Phase 1 -- Scan the series directory (no network).
  Phase 2 -- Resolve sequels against the remote service.  Every remote
             call and every rate-limit wait lives here.
  Phase 3 -- Link files into the per-season directories (no network).

Phases 1+2 run as one background task and phase 3 as another, so a
caller can preview the plan before anything touches the disk.  The
calling thread only ever polls; it never blocks on remote calls.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from .config import DEFAULT_SETTINGS, SettingsManager
from .errors import PipelineBusyError
from .matcher import EpisodeMatcher
from .models import MergedSeries
from .remote import RemoteService
from .resolver import SeasonResolver
from .scanner import scan_categorized
from .splitter import split_all

log = logging.getLogger(__name__)


class TaskState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"


@dataclass(frozen=True)
class TaskResult:
    """Snapshot of a task's result slot."""
    state: TaskState
    value: Any = None
    error: BaseException | None = None

    @property
    def done(self) -> bool:
        return self.state in (TaskState.FINISHED, TaskState.FAILED)


class BackgroundTask:
    """Runs one callable on a worker thread and publishes its result.

    The result slot is replaced as a whole under a single lock, so
    ``poll`` never observes a half-written result.
    """

    def __init__(self, fn: Callable[[], Any], name: str = "seasonsplit-task"):
        self.name = name
        self._fn = fn
        self._lock = threading.Lock()
        self._finished = threading.Event()
        self._result = TaskResult(TaskState.PENDING)
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> BackgroundTask:
        with self._lock:
            if self._result.state is not TaskState.PENDING:
                raise RuntimeError(f"task {self.name} was already started")
            self._result = TaskResult(TaskState.RUNNING)
        self._thread.start()
        return self

    def poll(self) -> TaskResult:
        with self._lock:
            return self._result

    def wait(self, timeout: float | None = None) -> TaskResult:
        """Block until the task is done (or *timeout* expires) and return its result."""
        self._finished.wait(timeout)
        return self.poll()

    @property
    def done(self) -> bool:
        return self.poll().done

    def _run(self) -> None:
        try:
            result = TaskResult(TaskState.FINISHED, value=self._fn())
        except Exception as e:
            log.error("%s failed: %s", self.name, e)
            log.debug("%s traceback", self.name, exc_info=True)
            result = TaskResult(TaskState.FAILED, error=e)

        with self._lock:
            self._result = result
        self._finished.set()


class SplitSession:
    """Splits one merged series directory, one background task at a time."""

    def __init__(
        self,
        directory: Path,
        remote: RemoteService,
        series_id: int,
        matcher: EpisodeMatcher | None = None,
        settings: SettingsManager | None = None,
    ):
        self.directory = Path(directory)
        self.remote = remote
        self.series_id = series_id
        self.matcher = matcher or EpisodeMatcher()
        self.settings = settings
        self._task: BackgroundTask | None = None

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done

    @property
    def current_task(self) -> BackgroundTask | None:
        return self._task

    # -- Public API ------------------------------------------------

    def start_resolve(self) -> BackgroundTask:
        """Scan and resolve in the background; the task value is the outcome list."""
        return self._start(self.resolve, f"resolve-{self.series_id}")

    def start_split(self, outcomes: list[MergedSeries]) -> BackgroundTask:
        """Perform the split in the background; the task value is the link count."""
        return self._start(lambda: split_all(outcomes), f"split-{self.series_id}")

    def resolve(self) -> list[MergedSeries]:
        """Phases 1 and 2, run synchronously on the calling thread."""
        partial_suffix = self._setting("partial_suffix")
        episodes = scan_categorized(self.directory, self.matcher, partial_suffix)

        series_dir = None
        if self.settings is not None:
            series_dir = self.settings.series_dir(self.directory)

        resolver = SeasonResolver(
            self.remote,
            self.directory,
            series_dir=series_dir,
            request_delay=float(self._setting("request_delay")),
        )
        return resolver.resolve(episodes, self.series_id)

    # -- Internal helpers ------------------------------------------

    def _setting(self, key: str) -> Any:
        if self.settings is None:
            return DEFAULT_SETTINGS[key]
        return self.settings.get(key)

    def _start(self, fn: Callable[[], Any], name: str) -> BackgroundTask:
        if self.busy:
            raise PipelineBusyError(
                f"{self._task.name} is still running for {self.directory}"
            )
        self._task = BackgroundTask(fn, name).start()
        return self._task
