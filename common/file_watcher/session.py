"""Watch session: wires raw events into change gates and gates into a sink."""

import asyncio
import functools
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from common import messages
from common.events import FILE_CHANGED, LOG, NotificationSink
from common.file_watcher.base import ADDED, RawEventSource, Scheduler
from common.file_watcher.errors import PatternResolutionError, SessionStateError
from common.file_watcher.gate import ChangeGate, GateDecision
from common.file_watcher.metadata import SessionMetadata
from common.file_watcher.resolver import PatternResolver, normalize_path
from common.file_watcher.source import WatchdogEventSource
from common.models import WatchOptions, WatchState
from common.utils import logger

OptionsLike = Union[WatchOptions, Mapping[str, Any], None]
SourceFactory = Callable[..., RawEventSource]


def get_change_callback(
    options: OptionsLike = None,
    sink: Optional[NotificationSink] = None,
    *,
    scheduler: Optional[Scheduler] = None,
    stat: Optional[Callable[[str], Any]] = None,
    gates: Optional[Dict[str, ChangeGate]] = None,
    root: Optional[str] = None,
) -> Callable[[str], GateDecision]:
    """Build the callback that feeds raw events for a path into its gate.

    Gates are created lazily, one per path, in ``gates`` (a fresh mapping
    when none is given). Relative paths are read from disk under ``root``.
    Settled changes are published to ``sink`` as ``file:changed`` with
    ``{"path": path}``, the path exactly as it was reported.
    """
    file_timeout = WatchOptions.coerce(options).file_timeout
    gates = {} if gates is None else gates

    def on_settled(path: str) -> None:
        if sink is not None:
            sink.emit(FILE_CHANGED, {"path": path})

    def on_change(path: str) -> GateDecision:
        gate = gates.get(path)
        if gate is None:
            gate = ChangeGate(
                path,
                file_timeout,
                on_settled,
                scheduler=scheduler,
                stat=stat,
                root=root,
            )
            gates[path] = gate
        return gate.on_raw_event()

    return on_change


def get_watch_callback(
    options: OptionsLike = None,
    sink: Optional[NotificationSink] = None,
) -> Callable[[Sequence[str]], str]:
    """Build the callback run once watching has started.

    The formatter gets the matched paths, or no arguments at all when
    nothing matched, and its message is published as a ``log`` event.
    """

    def on_watching(paths: Sequence[str]) -> str:
        if paths:
            msg = messages.files.watching(paths)
        else:
            msg = messages.files.watching()
        if sink is not None:
            sink.emit(LOG, {"msg": msg, "override": True})
        return msg

    return on_watching


def get_watcher(patterns: Optional[Sequence[str]] = None, **kwargs: Any) -> WatchdogEventSource:
    """Return an unstarted watchdog source for ``patterns``."""
    return WatchdogEventSource(list(patterns or []), **kwargs)


class WatchSession:
    """One watch invocation: patterns, options, gates and an output sink.

    Lifecycle is ``STARTING -> WATCHING -> STOPPED``. The start-of-watch log
    fires once, on the raw source's ready signal; ``stop()`` cancels every
    pending gate timer and detaches the source.
    """

    def __init__(
        self,
        patterns: Sequence[str],
        options: OptionsLike = None,
        sink: Optional[NotificationSink] = None,
        *,
        resolver: Optional[PatternResolver] = None,
        source_factory: Optional[SourceFactory] = None,
        scheduler: Optional[Scheduler] = None,
        stat: Optional[Callable[[str], Any]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self.session_id = str(uuid.uuid4())[:8]
        self.patterns = tuple(patterns)
        self.options = WatchOptions.coerce(options)
        self.sink = sink
        self.resolved_paths: List[str] = []
        self.gates: Dict[str, ChangeGate] = {}
        self.state = WatchState.STARTING
        self.created_at = datetime.now(timezone.utc).isoformat()

        self._resolver = resolver or PatternResolver()
        self._source_factory = source_factory
        self._scheduler = scheduler
        self._stat = stat
        self._loop = loop
        self._source: Optional[RawEventSource] = None
        self._change_callback: Optional[Callable[[str], GateDecision]] = None
        self._watch_callback: Optional[Callable[[Sequence[str]], str]] = None
        self._started = False

    def start(self) -> "WatchSession":
        """Resolve patterns and start the raw event source.

        Raises:
            PatternResolutionError: If the patterns cannot be resolved; the
                session is left stopped
            SessionStateError: If the session was already started or stopped
        """
        if self._started:
            raise SessionStateError(f"Session {self.session_id} was already started")
        if self.state is WatchState.STOPPED:
            raise SessionStateError(f"Session {self.session_id} is stopped")
        self._started = True

        try:
            self.resolved_paths = self._resolver.resolve(self.patterns)
        except PatternResolutionError:
            self.state = WatchState.STOPPED
            logger.error(f"Session {self.session_id} failed to resolve {list(self.patterns)}")
            raise

        sink = _SessionSink(self)
        self._change_callback = get_change_callback(
            self.options,
            sink,
            scheduler=self._scheduler,
            stat=self._stat,
            gates=self.gates,
            root=self._resolver.root,
        )
        self._watch_callback = get_watch_callback(self.options, sink)

        self._source = self._build_source()
        try:
            self._source.start()
        except Exception:
            self.stop()
            raise

        logger.info(
            f"Session {self.session_id} starting with {len(self.resolved_paths)} file(s)"
        )
        return self

    def stop(self) -> None:
        """Stop watching. Safe to call more than once."""
        if self.state is WatchState.STOPPED and self._source is None:
            return
        self.state = WatchState.STOPPED

        if self._source is not None:
            self._source.stop()
            self._source = None

        for gate in self.gates.values():
            gate.close()
        logger.info(f"Session {self.session_id} stopped")

    def watched_paths(self) -> List[str]:
        return list(self.resolved_paths)

    def describe(self) -> SessionMetadata:
        return SessionMetadata(
            session_id=self.session_id,
            patterns=list(self.patterns),
            state=self.state,
            watched_paths=self.watched_paths(),
            file_timeout=self.options.file_timeout,
            gate_count=len(self.gates),
            created_at=self.created_at,
        )

    def _build_source(self) -> RawEventSource:
        factory = self._source_factory
        if factory is None:
            factory = functools.partial(
                WatchdogEventSource,
                root=self._resolver.root,
                loop=self._loop,
                known_paths=self.resolved_paths,
            )
        return factory(
            list(self.patterns),
            on_event=self._on_raw_event,
            on_ready=self._on_ready,
        )

    def _publish(self, event: str, payload: Dict[str, Any]) -> bool:
        if self.state is WatchState.STOPPED:
            logger.debug(f"Dropping {event} for stopped session {self.session_id}")
            return False
        if self.sink is None:
            return False
        return self.sink.emit(event, payload)

    def _on_ready(self) -> None:
        if self.state is not WatchState.STARTING:
            return
        self.state = WatchState.WATCHING
        if self._watch_callback is not None:
            self._watch_callback(self.watched_paths())

    def _on_raw_event(self, kind: str, path: str) -> None:
        if self.state is WatchState.STOPPED or self._change_callback is None:
            return
        path = normalize_path(path)
        if kind == ADDED and path not in self.resolved_paths:
            self.resolved_paths.append(path)
            logger.info(f"Now watching new file {path}")
        self._change_callback(path)

    def __enter__(self) -> "WatchSession":
        return self.start()

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()


class _SessionSink:
    """Sink handed to the callbacks; drops everything once the session stops."""

    def __init__(self, session: WatchSession) -> None:
        self._session = session

    def emit(self, event: str, payload: Dict[str, Any]) -> bool:
        return self._session._publish(event, payload)


def init_watching(
    patterns: Sequence[str],
    options: OptionsLike = None,
    sink: Optional[NotificationSink] = None,
    **kwargs: Any,
) -> WatchSession:
    """Create a session for ``patterns`` and start it."""
    return WatchSession(patterns, options, sink, **kwargs).start()
