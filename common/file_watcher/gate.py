"""Per-path debounce gate turning raw filesystem events into settled changes."""

import asyncio
import os
from enum import Enum
from typing import Any, Callable, Optional

from common.file_watcher.base import Scheduler, TimerHandle
from common.file_watcher.errors import StatError
from common.utils import logger


class GateDecision(str, Enum):
    """What a gate did with a single raw event."""

    IGNORED = "ignored"
    SCHEDULED = "scheduled"
    EMITTED = "emitted"


class ChangeGate:
    """Debounce state machine guarding one watched path.

    Each raw event reads the file size. Empty reads are treated as a write in
    progress and leave the gate untouched. Non-empty reads restart the
    debounce window; when the window elapses without another event the gate
    calls ``on_settled(path)`` exactly once.
    """

    def __init__(
        self,
        path: str,
        file_timeout: Optional[int],
        on_settled: Callable[[str], None],
        scheduler: Optional[Scheduler] = None,
        stat: Optional[Callable[[str], Any]] = None,
        root: Optional[str] = None,
    ) -> None:
        self.path = path
        self.root = root
        self.file_timeout = file_timeout
        self.pending_timer: Optional[TimerHandle] = None
        self.last_observed_size: Optional[int] = None
        self.closed = False
        self._on_settled = on_settled
        self._scheduler = scheduler
        self._stat = stat
        # Set by an empty read, cleared by the next non-empty one.
        self._awaiting_content = False

    @property
    def has_pending(self) -> bool:
        return self.pending_timer is not None

    def on_raw_event(self) -> GateDecision:
        """Handle one raw ``added``/``changed`` event for this path."""
        if self.closed:
            return GateDecision.IGNORED

        try:
            size = self._read_size()
        except StatError as e:
            logger.debug(f"Dropping event, {e}")
            return GateDecision.IGNORED

        if size == 0:
            logger.debug(f"Zero-length read for {self.path}, waiting for content")
            self._awaiting_content = True
            return GateDecision.IGNORED

        self._awaiting_content = False
        self.last_observed_size = size
        self._cancel_pending()

        if not self.file_timeout:
            self._emit()
            return GateDecision.EMITTED

        scheduler = self._scheduler or asyncio.get_running_loop()
        self.pending_timer = scheduler.call_later(
            self.file_timeout / 1000.0, self._on_timer
        )
        return GateDecision.SCHEDULED

    def close(self) -> None:
        """Cancel the pending timer and stop reacting to events."""
        self.closed = True
        self._cancel_pending()

    @property
    def full_path(self) -> str:
        """Location on disk; ``path`` is relative to ``root`` when one is set."""
        if self.root is None:
            return self.path
        return os.path.join(self.root, self.path)

    def _read_size(self) -> int:
        stat = self._stat or os.stat
        try:
            return int(stat(self.full_path).st_size)
        except OSError as e:
            raise StatError(self.path, e.strerror or str(e)) from e

    def _cancel_pending(self) -> None:
        if self.pending_timer is not None:
            self.pending_timer.cancel()
            self.pending_timer = None

    def _on_timer(self) -> None:
        self.pending_timer = None
        if self.closed:
            return
        if self._awaiting_content:
            logger.debug(f"Suppressing settle for {self.path}, last read was empty")
            return
        self._emit()

    def _emit(self) -> None:
        logger.debug(
            f"Settled change for {self.path} ({self.last_observed_size} bytes)"
        )
        self._on_settled(self.path)

    def __repr__(self) -> str:
        return (
            f"ChangeGate(path={self.path!r}, file_timeout={self.file_timeout!r}, "
            f"pending={self.has_pending})"
        )
