"""Tests for RunStateMachine."""
import pytest

from finengine.core.types import AnalysisRun
from finengine.orchestration.run_state import RunStateMachine


class TestRunStateMachine:
    """Test suite for run lifecycle transitions."""

    def test_happy_path_stamps_timestamps(self, fixed_clock):
        state = RunStateMachine(clock=fixed_clock)
        run = AnalysisRun(run_id='r')

        state.start(run)
        assert run.status == 'processing'
        assert run.processing_started_at == '2026-01-15T09:30:00'

        state.complete(run)
        assert run.status == 'completed'
        assert run.processing_completed_at == '2026-01-15T09:30:00'
        assert run.is_terminal

    def test_fail_records_message(self, fixed_clock):
        state = RunStateMachine(clock=fixed_clock)
        run = state.start(AnalysisRun(run_id='r'))
        state.fail(run, 'boom')

        assert run.status == 'error'
        assert run.error_message == 'boom'
        assert run.error_at is not None

    def test_cancel_pending(self):
        run = RunStateMachine().cancel(AnalysisRun(run_id='r'), 'user request')

        assert run.status == 'cancelled'
        assert run.cancellation_reason == 'user request'
        assert run.cancelled_at is not None

    def test_cancel_twice_is_noop(self):
        state = RunStateMachine()
        run = state.cancel(AnalysisRun(run_id='r'), 'first')
        stamped = run.cancelled_at
        state.cancel(run, 'second')

        assert run.cancellation_reason == 'first'
        assert run.cancelled_at == stamped

    def test_cannot_cancel_completed(self):
        state = RunStateMachine()
        run = state.complete(state.start(AnalysisRun(run_id='r')))

        with pytest.raises(ValueError, match="Cannot cancel completed analysis"):
            state.cancel(run)

    def test_cannot_cancel_failed(self):
        state = RunStateMachine()
        run = state.fail(state.start(AnalysisRun(run_id='r')), 'boom')

        with pytest.raises(ValueError):
            state.cancel(run)

    @pytest.mark.parametrize("status", ['completed', 'error', 'cancelled'])
    def test_terminal_states_are_final(self, status):
        run = AnalysisRun(run_id='r', status=status)

        with pytest.raises(ValueError, match="Invalid status transition"):
            RunStateMachine().start(run)

    def test_pending_cannot_complete(self):
        with pytest.raises(ValueError):
            RunStateMachine().complete(AnalysisRun(run_id='r'))
