"""Unit tests for the per-run orchestration context."""

import threading

import pytest

from taskflow.orchestration.context import EngineState, OrchestrationContext


class TestOrchestrationContext:
    """Tests for OrchestrationContext."""

    def test_starts_idle(self) -> None:
        """Test the initial state."""
        context = OrchestrationContext()

        assert context.state == EngineState.IDLE
        assert context.transitions == [EngineState.IDLE]
        assert not context.should_stop()

    def test_advance_records_transitions(self) -> None:
        """Test legal transitions."""
        context = OrchestrationContext()

        context.advance(EngineState.VALIDATING)
        context.advance(EngineState.ANALYZING)

        assert context.state == EngineState.ANALYZING
        assert context.transitions[-2:] == [EngineState.VALIDATING, EngineState.ANALYZING]

    def test_illegal_transition(self) -> None:
        """Test that stages cannot be skipped."""
        context = OrchestrationContext()

        with pytest.raises(RuntimeError, match="idle -> done"):
            context.advance(EngineState.DONE)

    def test_terminal_states(self) -> None:
        """Test that FAILED is final."""
        context = OrchestrationContext()
        context.advance(EngineState.FAILED)

        with pytest.raises(RuntimeError):
            context.advance(EngineState.VALIDATING)

    def test_cancel_event(self) -> None:
        """Test cancellation through an event."""
        event = threading.Event()
        context = OrchestrationContext(cancel_event=event)

        assert not context.should_stop()
        event.set()
        assert context.should_stop()

    def test_timeout(self) -> None:
        """Test deadlines."""
        context = OrchestrationContext()

        context.set_timeout(3600)
        assert not context.should_stop()

        context.set_timeout(None)
        assert context.deadline is None
