"""Request-scoped aggregation context.

One AggregationContext is created per browse request and discarded with
it. It carries the request id used for log correlation, the deadline that
bounds listing store calls, and a cancellation flag the caller can set
(for example on client disconnect) without affecting other requests.
"""

import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from .exceptions import AggregationCancelledError, FacetError, StoreUnavailableError


@dataclass
class AggregationContext:
    """Deadline and cancellation state for a single aggregation.

    Attributes:
        request_id: Correlation id pushed into the logging context
        deadline: time.monotonic() value after which store calls fail
        timeout_seconds: Timeout the deadline was derived from
        cancelled: Event set by the caller to abort the request
    """

    request_id: str
    deadline: float
    timeout_seconds: float
    cancelled: threading.Event = field(default_factory=threading.Event)

    @classmethod
    def start(cls, timeout_seconds: float, request_id: Optional[str] = None) -> "AggregationContext":
        """Create a context whose deadline starts now."""
        return cls(
            request_id=request_id or uuid.uuid4().hex[:12],
            deadline=time.monotonic() + timeout_seconds,
            timeout_seconds=timeout_seconds,
        )

    def cancel(self) -> None:
        """Abort the aggregation, including a store statement already running."""
        self.cancelled.set()

    def remaining(self) -> float:
        """Seconds left before the deadline (negative once expired)."""
        return self.deadline - time.monotonic()

    def should_stop(self) -> bool:
        """True once the request is cancelled or past its deadline.

        Polled by the store while a statement runs, so it must stay cheap.
        """
        return self.cancelled.is_set() or self.remaining() <= 0

    def stop_reason(self, dimension: Optional[str] = None) -> Optional[FacetError]:
        """The error describing why the request must stop, or None."""
        if self.cancelled.is_set():
            return AggregationCancelledError(f"Aggregation {self.request_id} was cancelled")
        if self.remaining() <= 0:
            return StoreUnavailableError(
                f"Listing store did not answer within {self.timeout_seconds:g}s",
                dimension=dimension,
            )
        return None

    def check(self, dimension: Optional[str] = None) -> None:
        """Raise if the request was cancelled or its deadline has passed.

        Raises:
            AggregationCancelledError: If cancel() was called
            StoreUnavailableError: If the deadline has passed
        """
        reason = self.stop_reason(dimension)
        if reason is not None:
            raise reason
