"""Raw event source backed by watchdog."""

import asyncio
import os
from typing import Any, Optional, Sequence

from watchdog.events import (
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from common.file_watcher.base import (
    ADDED,
    CHANGED,
    RawEventCallback,
    RawEventSource,
    ReadyCallback,
)
from common.file_watcher.resolver import matches_any, normalize_path, watch_roots
from common.utils import logger


def _decode(path: Any) -> str:
    if isinstance(path, bytes):
        return path.decode("utf-8", errors="replace")
    return str(path)


class RawEventHandler(FileSystemEventHandler):
    """Translates watchdog events into raw ``added`` / ``changed`` events.

    Runs on the observer thread, so it never calls into the session directly:
    every accepted event is handed to ``dispatch``.
    """

    def __init__(self, source: "WatchdogEventSource") -> None:
        super().__init__()
        self.source = source

    def _handle(self, kind: str, raw_path: Any) -> None:
        path = self.source.report_path(_decode(raw_path))
        if path is None:
            return
        self.source.dispatch(kind, path)

    def on_created(self, event: FileSystemEvent) -> None:
        if isinstance(event, FileCreatedEvent):
            self._handle(ADDED, event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if isinstance(event, FileModifiedEvent):
            self._handle(CHANGED, event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors that save through a temp file show up as a move onto the target
        if isinstance(event, FileMovedEvent):
            self._handle(ADDED, event.dest_path)


class WatchdogEventSource(RawEventSource):
    """Watches the directories behind a set of patterns with a watchdog Observer."""

    def __init__(
        self,
        patterns: Sequence[str],
        on_event: Optional[RawEventCallback] = None,
        on_ready: Optional[ReadyCallback] = None,
        *,
        root: str = ".",
        loop: Optional[asyncio.AbstractEventLoop] = None,
        known_paths: Sequence[str] = (),
    ) -> None:
        super().__init__(patterns, on_event=on_event, on_ready=on_ready)
        self.root = root
        self.known_paths = {normalize_path(path) for path in known_paths}
        self._loop = loop
        self._observer: Any = None
        self._handler = RawEventHandler(self)
        self._is_running = False

    def relative_path(self, path: str) -> str:
        """Express an event path the way the resolver reports matched files."""
        # Resolve directory symlinks only; the entry itself may be a symlink we watch
        absolute = os.path.abspath(path)
        absolute = os.path.join(
            os.path.realpath(os.path.dirname(absolute)), os.path.basename(absolute)
        )
        root = os.path.realpath(self.root)
        try:
            inside = os.path.commonpath([absolute, root]) == root
        except ValueError:
            # Different drives on Windows
            inside = False
        if inside:
            return normalize_path(os.path.relpath(absolute, root))
        return normalize_path(absolute)

    def _is_watched(self, path: str) -> bool:
        return path in self.known_paths or matches_any(path, self.patterns)

    def report_path(self, path: str) -> Optional[str]:
        """Return the form of ``path`` its pattern was written in, or None if unwatched.

        Relative patterns yield paths relative to ``root``; absolute patterns,
        and the absolute files the resolver matched for them, yield absolute paths.
        """
        relative = self.relative_path(path)
        if self._is_watched(relative):
            return relative
        absolute = normalize_path(os.path.abspath(path))
        if self._is_watched(absolute):
            return absolute
        return None

    def dispatch(self, kind: str, path: str) -> None:
        """Hand an event from the observer thread over to the event loop."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._deliver, kind, path)

    def _deliver(self, kind: str, path: str) -> None:
        if not self._is_running:
            return
        logger.debug(f"Raw event: {kind} - {path}")
        self._emit_event(kind, path)

    def _deliver_ready(self) -> None:
        if self._is_running:
            self._emit_ready()

    def start(self) -> None:
        """Schedule the watch roots and start the observer."""
        if self._is_running:
            return

        if self._loop is None:
            self._loop = asyncio.get_running_loop()

        observer: Any = Observer()
        scheduled = 0
        for directory, recursive in watch_roots(self.patterns, self.root).items():
            if not os.path.isdir(directory):
                logger.warning(f"Skipping missing watch directory: {directory}")
                continue
            observer.schedule(self._handler, directory, recursive=recursive)
            scheduled += 1

        try:
            observer.start()
        except OSError as e:
            raise RuntimeError(f"Cannot start file observer: {e}") from e

        self._observer = observer
        self._is_running = True
        logger.info(f"Started watching {scheduled} director(ies) for {self.patterns}")
        self._loop.call_soon(self._deliver_ready)

    def stop(self) -> None:
        """Stop the observer and wait for its thread to exit."""
        if not self._is_running:
            return
        self._is_running = False
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._observer = None
        logger.info(f"Stopped watching {self.patterns}")

    @property
    def is_running(self) -> bool:
        return self._is_running
