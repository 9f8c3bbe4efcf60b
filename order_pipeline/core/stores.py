"""
In-memory stores owned by a pipeline instance.

Neither store evicts; growth is bounded only by the number of distinct
order ids seen.
"""
import threading
from typing import Dict, Optional

import structlog

from order_pipeline.core.models import CustomerRecord, CustomerStatus, OrderSnapshot

logger = structlog.get_logger(__name__)


def placeholder_email(order_id: str) -> str:
    """Deterministic email used when the caller supplies none."""
    return f"{order_id}@example.com"


class CustomerDirectory:
    """
    Customer records keyed by order id.

    The first write for an id wins; later email overrides are ignored.
    """

    def __init__(self) -> None:
        self._records: Dict[str, CustomerRecord] = {}
        self._lock = threading.Lock()

    def get_or_create(
        self, order_id: str, email_override: Optional[str] = None
    ) -> CustomerRecord:
        """
        Return the record for ``order_id``, creating a guest record on first sight.

        Args:
            order_id: Order identifier used as the customer key
            email_override: Email for a new record; ignored if one exists

        Returns:
            CustomerRecord: Cached or newly created record
        """
        with self._lock:
            record = self._records.get(order_id)
            if record is not None:
                return record

            record = CustomerRecord(
                id=order_id,
                status=CustomerStatus.GUEST,
                email=email_override or placeholder_email(order_id),
            )
            self._records[order_id] = record

        logger.debug("customer_created", order_id=order_id, status=record.status.value)
        return record

    def get(self, order_id: str) -> Optional[CustomerRecord]:
        with self._lock:
            return self._records.get(order_id)

    def __len__(self) -> int:
        return len(self._records)


class OrderStateCache:
    """
    Latest lifecycle snapshot per order id.

    ``set`` replaces whatever was stored; concurrent writers for the same
    id are last-write-wins with no conflict detection.
    """

    def __init__(self) -> None:
        self._snapshots: Dict[str, OrderSnapshot] = {}
        self._lock = threading.Lock()

    def set(self, order_id: str, snapshot: OrderSnapshot) -> None:
        with self._lock:
            self._snapshots[order_id] = snapshot
        logger.debug("order_snapshot_stored", order_id=order_id, stage=snapshot.stage.value)

    def get(self, order_id: str) -> Optional[OrderSnapshot]:
        with self._lock:
            return self._snapshots.get(order_id)

    def __len__(self) -> int:
        return len(self._snapshots)
