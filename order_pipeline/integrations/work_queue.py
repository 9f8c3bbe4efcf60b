"""Work queue interface for deferred order jobs."""
from typing import List, Protocol

import structlog

from order_pipeline.core.models import QueueJob
from order_pipeline.monitoring.metrics import metrics

logger = structlog.get_logger(__name__)


class WorkQueue(Protocol):
    """Interface for accepting deferred jobs."""

    def push(self, job: QueueJob) -> None:
        """Accept a job for later processing."""
        ...


class InMemoryWorkQueue:
    """Queue that keeps jobs in a list; replace with a real broker client."""

    def __init__(self) -> None:
        self.jobs: List[QueueJob] = []

    def push(self, job: QueueJob) -> None:
        self.jobs.append(job)
        metrics.record_queue_job(job.type)
        logger.debug(
            "order_job_enqueued",
            job_type=job.type,
            order_id=job.order_id,
            reason=job.reason,
        )

    def jobs_of_type(self, job_type: str) -> List[QueueJob]:
        return [job for job in self.jobs if job.type == job_type]

    def __len__(self) -> int:
        return len(self.jobs)
