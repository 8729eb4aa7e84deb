"""Lifecycle transitions for AnalysisRun.

pending -> processing -> completed | error | cancelled
pending -> cancelled
"""
import logging
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from finengine.core.types import (
    AnalysisRun,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_ERROR,
    STATUS_PENDING,
    STATUS_PROCESSING,
)

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[str, Tuple[str, ...]] = {
    STATUS_PENDING: (STATUS_PROCESSING, STATUS_CANCELLED),
    STATUS_PROCESSING: (STATUS_COMPLETED, STATUS_ERROR, STATUS_CANCELLED),
    STATUS_COMPLETED: (),
    STATUS_ERROR: (),
    STATUS_CANCELLED: (),
}

# Timestamp field stamped on entering each status
_TIMESTAMP_FIELDS = {
    STATUS_PROCESSING: 'processing_started_at',
    STATUS_COMPLETED: 'processing_completed_at',
    STATUS_ERROR: 'error_at',
    STATUS_CANCELLED: 'cancelled_at',
}


class RunStateMachine:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or datetime.now

    def _now(self) -> str:
        return self._clock().isoformat()

    def transition(self, run: AnalysisRun, status: str) -> AnalysisRun:
        """Move run to status and stamp the matching timestamp.

        Raises:
            ValueError: when the move is not allowed from the current status
        """
        allowed = ALLOWED_TRANSITIONS.get(run.status, ())
        if status not in allowed:
            raise ValueError(f"Invalid status transition: {run.status} -> {status}")
        previous = run.status
        run.status = status
        stamp_field = _TIMESTAMP_FIELDS.get(status)
        if stamp_field:
            setattr(run, stamp_field, self._now())
        logger.debug("Run status changed", extra={"run_id": run.run_id, "from": previous, "to": status})
        return run

    def start(self, run: AnalysisRun) -> AnalysisRun:
        return self.transition(run, STATUS_PROCESSING)

    def complete(self, run: AnalysisRun) -> AnalysisRun:
        return self.transition(run, STATUS_COMPLETED)

    def fail(self, run: AnalysisRun, message: str) -> AnalysisRun:
        self.transition(run, STATUS_ERROR)
        run.error_message = message
        return run

    def cancel(self, run: AnalysisRun, reason: Optional[str] = None) -> AnalysisRun:
        """Cancel a pending or processing run. Cancelling twice is a no-op.

        Raises:
            ValueError: when the run already completed or failed
        """
        if run.status == STATUS_CANCELLED:
            return run
        if run.status == STATUS_COMPLETED:
            raise ValueError("Cannot cancel completed analysis")
        if run.status == STATUS_ERROR:
            raise ValueError("Cannot cancel failed analysis")
        self.transition(run, STATUS_CANCELLED)
        run.cancellation_reason = reason
        logger.info("Analysis cancelled", extra={"run_id": run.run_id, "reason": reason})
        return run
