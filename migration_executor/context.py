"""
Operation context passed through every remote step.

Carries the logger handle (with host/operation identity), the caller's
cancellation event and an optional deadline.
"""

import logging
import threading
import time
from typing import Optional

from migration_executor.errors import OperationCancelled, OperationTimedOut

logger = logging.getLogger(__name__)


class OperationLogger(logging.LoggerAdapter):
    """Prefixes every line with the operation name and host identity"""

    def process(self, msg, kwargs):
        operation = self.extra.get('operation')
        host = self.extra.get('host')
        parts = [operation] if operation else []
        if host:
            parts.append(f"host={host}")
        if parts:
            msg = f"[{' '.join(parts)}] {msg}"
        return msg, kwargs


class OperationContext:
    """
    Cancellation, deadline and logger for one operation.

    check() is called between remote steps only. A step already in
    flight (an SSH exec or an HTTP PUT) is not interrupted when
    cancel_event is set; it is bounded by its own timeout, which
    remaining() caps at the deadline.

    Args:
        log: Logger or adapter used for every line of this operation
        cancel_event: Set by the caller to abort the operation
        timeout: Seconds from now until the operation times out
    """

    def __init__(
        self,
        log: Optional[logging.LoggerAdapter] = None,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ):
        self.log = log or OperationLogger(logger, {})
        self.cancel_event = cancel_event
        self.deadline = time.monotonic() + timeout if timeout is not None else None

    def with_values(self, **extra) -> 'OperationContext':
        """Return a child context whose logger carries additional identity"""
        merged = dict(getattr(self.log, 'extra', None) or {})
        merged.update(extra)
        base = getattr(self.log, 'logger', self.log)
        child = OperationContext(OperationLogger(base, merged), self.cancel_event)
        child.deadline = self.deadline
        return child

    def remaining(self, default: Optional[float] = None) -> Optional[float]:
        """Seconds left before the deadline, capped at default"""
        if self.deadline is None:
            return default
        left = max(self.deadline - time.monotonic(), 0.0)
        if default is None:
            return left
        return min(left, default)

    def check(self):
        """Raise if the caller cancelled or the deadline passed"""
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise OperationCancelled("operation cancelled by caller")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise OperationTimedOut("operation deadline exceeded")


def new_context(operation: str, host: Optional[str] = None,
                cancel_event: Optional[threading.Event] = None,
                timeout: Optional[float] = None,
                base_logger: Optional[logging.Logger] = None) -> OperationContext:
    """Build a context whose log lines carry operation and host identity"""
    extra = {'operation': operation}
    if host:
        extra['host'] = host
    return OperationContext(
        OperationLogger(base_logger or logger, extra),
        cancel_event=cancel_event,
        timeout=timeout,
    )
