"""Process-wide runtime counters shared by every invocation of a pipeline."""
import threading
from typing import Optional

from order_pipeline.core.models import RuntimeFlags


class RuntimeState:
    """
    Counters mutated on every invocation.

    ``retry_count`` grows by one per invocation across all orders; it does
    not describe the retry history of any single order.
    """

    def __init__(self, outage_mode: bool = False) -> None:
        self.last_order_id: Optional[str] = None
        self.outage_mode = outage_mode
        self.retry_count = 0
        self._lock = threading.Lock()

    def record_invocation(self, order_id: str) -> int:
        """
        Register a new invocation.

        Args:
            order_id: Order being processed

        Returns:
            int: Updated retry count
        """
        with self._lock:
            self.last_order_id = order_id
            self.retry_count += 1
            return self.retry_count

    def set_outage_mode(self, enabled: bool) -> None:
        with self._lock:
            self.outage_mode = enabled

    def flags(self) -> RuntimeFlags:
        """Snapshot of the current outage flag and retry counter."""
        with self._lock:
            return RuntimeFlags(outage_mode=self.outage_mode, retry=self.retry_count)
