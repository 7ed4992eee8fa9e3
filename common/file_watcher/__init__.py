"""File watcher system components."""

from .base import RawEventSource, Scheduler
from .errors import (
    FileWatcherError,
    PatternResolutionError,
    SessionStateError,
    StatError,
)
from .gate import ChangeGate, GateDecision
from .metadata import SessionMetadata
from .resolver import PatternResolver
from .session import (
    WatchSession,
    get_change_callback,
    get_watch_callback,
    get_watcher,
    init_watching,
)
from .source import WatchdogEventSource

__all__ = [
    "ChangeGate",
    "FileWatcherError",
    "GateDecision",
    "PatternResolutionError",
    "PatternResolver",
    "RawEventSource",
    "Scheduler",
    "SessionMetadata",
    "SessionStateError",
    "StatError",
    "WatchSession",
    "WatchdogEventSource",
    "get_change_callback",
    "get_watch_callback",
    "get_watcher",
    "init_watching",
]
