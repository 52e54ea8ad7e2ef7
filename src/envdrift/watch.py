"""
Watch mode: regenerate .env.example whenever .env changes.

Bursts of filesystem events are debounced, and at most one regeneration
pass runs at a time. A change that arrives during a pass schedules exactly
one follow-up pass instead of running concurrently.
"""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .core.config import EnvDriftConfig
from .core.discovery import read_file_safe
from .core.drift import detect_drift
from .core.lexer import extract_keys, parse
from .core.syncer import generate


logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.3


@dataclass(frozen=True)
class SyncSummary:
    added: List[str]
    removed: List[str]
    scrubbed: int


class _ChangeHandler(FileSystemEventHandler):
    """Forwards events for the watched files to the watcher."""

    def __init__(self, watcher: "EnvWatcher"):
        super().__init__()
        self.watcher = watcher

    def _handle(self, path):
        if self.watcher.is_watched(path):
            self.watcher.trigger()

    def on_modified(self, event):
        if not event.is_directory:
            self._handle(event.src_path)

    def on_created(self, event):
        if not event.is_directory:
            self._handle(event.src_path)

    def on_moved(self, event):
        # Editors often save via rename
        if not event.is_directory:
            self._handle(event.dest_path)


class EnvWatcher:
    """
    Watches the input .env file (and .env.local) and re-syncs the template.

    Use as a context manager; leaving the block stops the observer and
    cancels any pending debounce timer:

        with EnvWatcher(config, on_sync=report):
            wait_for_ctrl_c()
    """

    def __init__(
        self,
        config: EnvDriftConfig,
        project_root: str = ".",
        dry_run: bool = False,
        on_sync: Optional[Callable[[SyncSummary], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        debounce: float = DEBOUNCE_SECONDS,
    ):
        self.config = config
        self.root = Path(project_root)
        self.env_path = self.root / config.input
        self.example_path = self.root / config.output
        self.dry_run = dry_run
        self.on_sync = on_sync
        self.on_error = on_error
        self.debounce = debounce

        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._running = False
        self._pending = False
        self._stopped = False
        self._idle = threading.Event()
        self._idle.set()
        self._pass_thread: Optional[threading.Thread] = None
        self._observer: Optional[Observer] = None

    @property
    def watched_paths(self) -> List[Path]:
        paths = [self.env_path]
        local = self.root / ".env.local"
        if local.exists() and local.resolve() != self.env_path.resolve():
            paths.append(local)
        return paths

    def is_watched(self, path) -> bool:
        if isinstance(path, bytes):
            path = path.decode()
        target = Path(path).resolve()
        return any(target == watched.resolve() for watched in self.watched_paths)

    def start(self):
        """Start the filesystem observer."""
        if self._observer is not None:
            return

        with self._lock:
            self._stopped = False

        observer = Observer()
        handler = _ChangeHandler(self)
        for directory in {path.resolve().parent for path in self.watched_paths}:
            observer.schedule(handler, str(directory), recursive=False)
        observer.start()
        self._observer = observer
        logger.debug("Watching %s", ", ".join(str(p) for p in self.watched_paths))

    def stop(self):
        """
        Stop the observer and drop any pending debounced pass.

        Returns only after a pass already in progress has finished, so no
        file is written once stop() returns. Calling it from inside a pass
        (e.g. from on_sync) does not wait.
        """
        with self._lock:
            self._stopped = True
            self._pending = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None

        if self._pass_thread is not threading.current_thread():
            self._idle.wait()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False

    def trigger(self):
        """Schedule a pass after the debounce window, restarting the window."""
        with self._lock:
            if self._stopped:
                return
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce, self.process_change)
            self._timer.daemon = True
            self._timer.start()

    def process_change(self):
        """
        Run one regeneration pass, or queue one if a pass is in flight.

        Passes queued while busy are coalesced into a single follow-up pass.
        """
        with self._lock:
            if self._stopped:
                return
            if self._running:
                self._pending = True
                return
            self._running = True
            self._pass_thread = threading.current_thread()
            self._idle.clear()

        try:
            while True:
                self._sync_once()
                with self._lock:
                    if not self._pending or self._stopped:
                        return
                    self._pending = False
        finally:
            with self._lock:
                self._running = False
                self._pending = False
                self._pass_thread = None
                self._idle.set()

    def _sync_once(self) -> Optional[SyncSummary]:
        try:
            if not self.env_path.is_file():
                return None

            config = self.config
            env_content = read_file_safe(self.env_path)
            example_content = read_file_safe(self.example_path)

            env_entries = parse(env_content, config.preserve_comments)
            example_entries = parse(example_content, config.preserve_comments)
            result = generate(env_entries, example_entries, config.to_scrub_configuration())

            drift = detect_drift(extract_keys(env_entries), extract_keys(example_entries))
            if drift.is_synced and example_content == result.content:
                logger.debug("No changes for %s", self.example_path)
                return None

            if not self.dry_run:
                self.example_path.write_text(result.content, encoding="utf-8")

            summary = SyncSummary(result.added, result.removed, result.scrubbed_count)
            if self.on_sync:
                self.on_sync(summary)
            return summary
        except Exception as exc:
            if self.on_error is None:
                logger.exception("Watch pass failed")
            else:
                self.on_error(exc)
            return None
