from unittest.mock import Mock, patch

from common.events import EventEmitter


class TestEventEmitter:
    def test_emit_calls_listeners_in_order(self) -> None:
        emitter = EventEmitter()
        calls = []
        emitter.on("file:changed", lambda payload: calls.append(("first", payload)))
        emitter.on("file:changed", lambda payload: calls.append(("second", payload)))

        assert emitter.emit("file:changed", {"path": "a.txt"}) is True

        assert calls == [("first", {"path": "a.txt"}), ("second", {"path": "a.txt"})]

    def test_emit_without_listeners(self) -> None:
        assert EventEmitter().emit("log", {"msg": "hi", "override": True}) is False

    def test_off_removes_listener(self) -> None:
        emitter = EventEmitter()
        listener = Mock()
        emitter.on("log", listener)

        assert emitter.off("log", listener) is True
        assert emitter.off("log", listener) is False
        emitter.emit("log", {"msg": "hi", "override": True})

        listener.assert_not_called()
        assert emitter.listener_count("log") == 0

    def test_failing_listener_does_not_block_others(self) -> None:
        # Given: the first listener raises
        emitter = EventEmitter()
        emitter.on("file:changed", Mock(side_effect=ValueError("boom")))
        second = Mock()
        emitter.on("file:changed", second)

        # When
        with patch("common.events.logger") as mock_logger:
            emitter.emit("file:changed", {"path": "a.txt"})

        # Then: the second still runs and the failure is logged
        second.assert_called_once_with({"path": "a.txt"})
        mock_logger.error.assert_called_once()
