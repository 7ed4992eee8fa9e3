"""In-process publish/subscribe channel used to deliver watcher notifications."""

from typing import Any, Callable, Dict, List, Protocol

from common.utils import logger

Listener = Callable[[Dict[str, Any]], None]

LOG = "log"
FILE_CHANGED = "file:changed"


class NotificationSink(Protocol):
    def emit(self, event: str, payload: Dict[str, Any]) -> bool: ...


class EventEmitter:
    """Minimal event emitter: listeners registered per event name."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, listener: Listener) -> Listener:
        self._listeners.setdefault(event, []).append(listener)
        return listener

    def off(self, event: str, listener: Listener) -> bool:
        listeners = self._listeners.get(event, [])
        if listener not in listeners:
            return False
        listeners.remove(listener)
        return True

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, payload: Dict[str, Any]) -> bool:
        """Call every listener for ``event`` with ``payload``.

        Returns:
            True if at least one listener was registered for the event
        """
        listeners = list(self._listeners.get(event, []))
        for listener in listeners:
            try:
                listener(payload)
            except Exception as e:
                logger.error(f"Listener for {event} failed: {e}")
        return bool(listeners)
