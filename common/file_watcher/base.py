"""Base raw event source interface and scheduling protocols."""

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Protocol, Sequence

RawEventCallback = Callable[[str, str], None]
ReadyCallback = Callable[[], None]

ADDED = "added"
CHANGED = "changed"


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run a callback later, e.g. an asyncio event loop."""

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> TimerHandle: ...


class RawEventSource(ABC):
    """Abstract base class for raw filesystem event sources.

    A source reports unfiltered ``added`` / ``changed`` events per path
    through ``on_event`` and signals ``on_ready`` once its watch set is
    established.
    """

    def __init__(
        self,
        patterns: Sequence[str],
        on_event: Optional[RawEventCallback] = None,
        on_ready: Optional[ReadyCallback] = None,
    ) -> None:
        self.patterns: List[str] = list(patterns)
        self.on_event = on_event
        self.on_ready = on_ready

    @abstractmethod
    def start(self) -> None:
        """Start delivering events.

        Raises:
            RuntimeError: If the underlying watch cannot be started
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering events and release the underlying watch."""
        pass

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """Check if the source is currently delivering events."""
        pass

    def _emit_event(self, kind: str, path: str) -> None:
        if self.on_event is not None:
            self.on_event(kind, path)

    def _emit_ready(self) -> None:
        if self.on_ready is not None:
            self.on_ready()
