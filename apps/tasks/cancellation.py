"""
Cancellation tokens threaded through every service and store call.

A token fires either when cancel() is called or when its deadline passes.
Lambda handlers derive one from the invocation context so work stops
before the function is killed.
"""
import time
import threading
from typing import Optional

from .exceptions import OperationCancelled


class CancellationToken:
    def __init__(self, deadline: Optional[float] = None):
        # deadline is a time.monotonic() value
        self._deadline = deadline
        self._event = threading.Event()

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancellationToken":
        return cls(deadline=time.monotonic() + seconds)

    @classmethod
    def from_lambda_context(cls, context, margin_ms: int = 500) -> "CancellationToken":
        """
        Build a token that fires margin_ms before the Lambda times out.

        Contexts without get_remaining_time_in_millis (local runs, tests)
        get a token without a deadline.
        """
        remaining = getattr(context, 'get_remaining_time_in_millis', None)
        if remaining is None:
            return cls()
        return cls.with_timeout(max(remaining() - margin_ms, 0) / 1000.0)

    def cancel(self) -> None:
        self._event.set()

    @property
    def deadline_exceeded(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.deadline_exceeded

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled()
        if self.deadline_exceeded:
            raise OperationCancelled(OperationCancelled.DEADLINE_EXCEEDED)
