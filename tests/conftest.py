"""Pytest configuration and shared fixtures for filegate tests."""

import pytest
from types import SimpleNamespace
from typing import Any, Callable, Generator, List, Optional, Sequence
from unittest.mock import Mock, patch

from common.file_watcher.base import RawEventSource
from common.utils import ROOT

TEST_FILE_1 = "tests/fixtures/test.txt"
TEST_FILE_2 = "tests/fixtures/test2.txt"


class FakeTimer:
    def __init__(self, when: float, callback: Callable[..., Any], args: tuple) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock standing in for the event loop's ``call_later``."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: List[FakeTimer] = []

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeTimer:
        timer = FakeTimer(self.now + delay, callback, args)
        self.timers.append(timer)
        return timer

    @property
    def live(self) -> List[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self.live if t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self.now = timer.when
            timer.fired = True
            timer.callback(*timer.args)
        self.now = target


class FakeSource(RawEventSource):
    """Raw event source driven by the test instead of the filesystem."""

    instances: List["FakeSource"] = []

    def __init__(self, patterns: Sequence[str], on_event: Any = None, on_ready: Any = None) -> None:
        super().__init__(patterns, on_event=on_event, on_ready=on_ready)
        self._running = False
        self.start_calls = 0
        self.stop_calls = 0
        FakeSource.instances.append(self)

    def start(self) -> None:
        self.start_calls += 1
        self._running = True

    def stop(self) -> None:
        self.stop_calls += 1
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def ready(self) -> None:
        self._emit_ready()

    def fire(self, kind: str, path: str) -> None:
        self._emit_event(kind, path)


def stat_result(size: int) -> SimpleNamespace:
    return SimpleNamespace(st_size=size)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def emitter() -> Mock:
    """Sink mock recording every emit call."""
    sink = Mock()
    sink.emit.return_value = True
    return sink


@pytest.fixture
def stat_stub() -> Mock:
    """A stat function returning a configurable size, like stubbing fs.statSync."""
    stub = Mock()
    stub.return_value = stat_result(300)
    return stub


@pytest.fixture
def fake_source() -> Generator[type, None, None]:
    FakeSource.instances = []
    yield FakeSource
    FakeSource.instances = []


@pytest.fixture
def project_root() -> str:
    return str(ROOT)


@pytest.fixture
def mock_watching() -> Generator[Mock, None, None]:
    """Stub messages.files.watching so its call arguments can be inspected."""
    from common import messages

    with patch.object(messages.files, "watching", return_value="MESSAGE") as stub:
        yield stub


def set_size(stub: Mock, size: Optional[int]) -> None:
    if size is None:
        stub.side_effect = FileNotFoundError(2, "No such file or directory")
    else:
        stub.side_effect = None
        stub.return_value = stat_result(size)
