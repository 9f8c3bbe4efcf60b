"""
Order processing pipeline.

Orchestrates the complete order flow:
1. Record the invocation in the runtime state
2. Load the per-order configuration
3. Get or create the customer record
4. Store the started snapshot and write the START audit line
5. Offline: queue the order and report it as queued
6. Online: charge, store the charged snapshot, notify the customer
7. Schedule the delayed finalization (completed snapshot, DONE audit line)
8. Report the result to the caller

The caller is told the outcome before finalization fires. "Callback
received" and "order completed in the cache and audit trail" are two
separate events; use ``drain()`` to wait for the second one.
"""
import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Set, Union

import structlog

from order_pipeline.config import Settings, get_settings
from order_pipeline.core.audit import DONE_MARKER, START_MARKER, AuditLogWriter
from order_pipeline.core.config_loader import load_order_config
from order_pipeline.core.exceptions import PaymentFailedError, PaymentTimeoutError
from order_pipeline.core.models import (
    OFFLINE_JOB,
    RETRY_JOB,
    ChargedResult,
    ChargedSnapshot,
    CompletedSnapshot,
    CustomerRecord,
    InvocationMetadata,
    OrderOverrides,
    OrderResult,
    PaymentAuthorization,
    QueuedResult,
    QueueJob,
    StartedSnapshot,
)
from order_pipeline.core.runtime_state import RuntimeState
from order_pipeline.core.stores import CustomerDirectory, OrderStateCache
from order_pipeline.integrations.notification_sender import (
    NotificationSender,
    SimulatedNotificationSender,
)
from order_pipeline.integrations.payment_gateway import (
    PaymentGateway,
    SimulatedPaymentGateway,
)
from order_pipeline.integrations.work_queue import InMemoryWorkQueue, WorkQueue
from order_pipeline.monitoring.metrics import metrics

logger = structlog.get_logger(__name__)

DEFAULT_FLAG = "standard"
DEFAULT_TEMPLATE = "receipt"

OnDone = Callable[[Optional[BaseException], Optional[OrderResult]], Any]
OverridesInput = Union[OrderOverrides, Mapping[str, Any], OnDone, None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _noop(error: Optional[BaseException], result: Optional[OrderResult]) -> None:
    return None


class OrderPipeline:
    """
    Order processing orchestrator.

    Owns the runtime state and both stores; collaborators are injected and
    default to the in-process simulated implementations.
    """

    def __init__(
        self,
        payment_gateway: Optional[PaymentGateway] = None,
        notification_sender: Optional[NotificationSender] = None,
        work_queue: Optional[WorkQueue] = None,
        settings: Optional[Settings] = None,
        runtime_state: Optional[RuntimeState] = None,
        customers: Optional[CustomerDirectory] = None,
        orders: Optional[OrderStateCache] = None,
        audit_writer: Optional[AuditLogWriter] = None,
    ):
        """
        Initialize order pipeline.

        Args:
            payment_gateway: Gateway used to charge orders
            notification_sender: Sender used for customer notifications
            work_queue: Queue receiving offline and retry jobs
            settings: Application settings
            runtime_state: Shared counters (one per pipeline by default)
            customers: Customer directory
            orders: Order state cache
            audit_writer: Audit trail writer
        """
        # Stores and queues define __len__, so an empty one is falsy
        self.settings = settings if settings is not None else get_settings()
        self.payment_gateway = (
            payment_gateway if payment_gateway is not None else SimulatedPaymentGateway()
        )
        self.notification_sender = (
            notification_sender
            if notification_sender is not None
            else SimulatedNotificationSender()
        )
        self.work_queue = work_queue if work_queue is not None else InMemoryWorkQueue()
        self.runtime = runtime_state if runtime_state is not None else RuntimeState()
        self.customers = customers if customers is not None else CustomerDirectory()
        self.orders = orders if orders is not None else OrderStateCache()
        self.audit = audit_writer if audit_writer is not None else AuditLogWriter()
        self._finalizers: Set[asyncio.Task] = set()

        logger.info("order_pipeline_initialized")

    @property
    def pending_finalizations(self) -> int:
        return len(self._finalizers)

    @staticmethod
    def _coerce_overrides(overrides: Union[OrderOverrides, Mapping[str, Any], None]) -> OrderOverrides:
        if overrides is None:
            return OrderOverrides()
        if isinstance(overrides, OrderOverrides):
            return overrides
        return OrderOverrides.model_validate(dict(overrides))

    def _stamp(self, overrides: OrderOverrides) -> InvocationMetadata:
        started_by = (
            overrides.meta.get("started_by")
            or overrides.meta.get("startedBy")
            or self.settings.default_actor
            or "unknown"
        )
        return InvocationMetadata(
            touched_at=_utcnow(),
            started_by=started_by,
            extra=dict(overrides.meta),
        )

    @staticmethod
    def _job_payload(
        overrides: OrderOverrides, metadata: InvocationMetadata
    ) -> Dict[str, Any]:
        payload = overrides.model_dump(exclude_none=True)
        payload["touched_at"] = metadata.touched_at.isoformat()
        payload["meta"] = {**metadata.extra, "started_by": metadata.started_by}
        return payload

    async def process(
        self,
        order_id: str,
        overrides: OverridesInput = None,
        on_done: Optional[OnDone] = None,
        raise_errors: bool = True,
    ) -> Optional[OrderResult]:
        """
        Process one order end to end.

        ``on_done(error, result)`` is called exactly once: with the result on
        success or when the order is queued, or with the PaymentFailedError
        when the charge fails. A callable passed as ``overrides`` is used as
        the callback.

        A payment failure is also re-raised unless ``raise_errors`` is False.
        Callers that rely only on the callback (for example when scheduling
        ``process`` with ``asyncio.create_task``) should pass
        ``raise_errors=False`` so the task does not end with an unretrieved
        exception.

        Args:
            order_id: Order identifier
            overrides: Caller options (mapping or OrderOverrides); never mutated
            on_done: Completion callback
            raise_errors: Re-raise payment failures after the callback

        Returns:
            OrderResult: QueuedResult or ChargedResult; None when the charge
            failed and raise_errors is False

        Raises:
            PaymentFailedError: If the charge fails or times out and
                raise_errors is True
        """
        if on_done is None and callable(overrides):
            on_done, overrides = overrides, None
        on_done = on_done or _noop
        options = self._coerce_overrides(overrides)

        metrics.record_stage("start")
        retry = self.runtime.record_invocation(order_id)
        log = logger.bind(order_id=order_id)
        log.info("order_processing_started", retry=retry)

        metadata = self._stamp(options)
        config = load_order_config(options.config_path, self.settings)
        customer = self.customers.get_or_create(order_id, options.email)

        self.orders.set(
            order_id,
            StartedSnapshot(started_at=_utcnow(), flag=options.flag or DEFAULT_FLAG),
        )

        # START records the attempt, not the outcome
        audit_path = config.audit_path or self.settings.default_audit_path
        self.audit.record(audit_path, START_MARKER, order_id)

        if config.offline_mode or self.runtime.outage_mode:
            log.warning(
                "order_queued_offline",
                offline_mode=config.offline_mode,
                outage_mode=self.runtime.outage_mode,
            )
            self.work_queue.push(
                QueueJob(
                    type=OFFLINE_JOB,
                    order_id=order_id,
                    payload=self._job_payload(options, metadata),
                )
            )
            metrics.record_stage("offline")
            queued = QueuedResult(order_id=order_id)
            on_done(None, queued)
            return queued

        amount = options.amount or config.default_amount or 0
        try:
            auth = await self._charge(order_id, amount)
        except PaymentFailedError as e:
            log.error("order_payment_failed", amount=amount, error=str(e))
            metrics.record_stage("payment_error")
            self.work_queue.push(
                QueueJob(
                    type=RETRY_JOB,
                    order_id=order_id,
                    reason="payment",
                    payload=self._job_payload(options, metadata),
                )
            )
            on_done(e, None)
            if raise_errors:
                raise
            return None

        self.orders.set(order_id, ChargedSnapshot(auth=auth))

        await self._notify(order_id, customer, options.template or DEFAULT_TEMPLATE, auth)

        delay_ms = config.completion_delay_ms or self.settings.default_completion_delay_ms
        self._schedule_finalization(order_id, audit_path, delay_ms)

        result = ChargedResult(
            order_id=order_id,
            auth=auth,
            customer=customer,
            flags=self.runtime.flags(),
            metadata=metadata,
        )
        log.info("order_processed", auth_code=auth.auth_code, finalize_in_ms=delay_ms)
        on_done(None, result)
        return result

    async def _charge(self, order_id: str, amount: float) -> PaymentAuthorization:
        """
        Charge the order with a timeout.

        Raises:
            PaymentTimeoutError: If the gateway does not answer in time
            PaymentFailedError: If the gateway reports any other failure
        """
        timeout = self.settings.payment_timeout_seconds
        start = time.perf_counter()

        try:
            auth = await asyncio.wait_for(
                self.payment_gateway.charge(order_id, amount), timeout=timeout
            )
        except asyncio.TimeoutError as e:
            metrics.record_payment_duration("timeout", time.perf_counter() - start)
            raise PaymentTimeoutError(
                order_id, f"Payment timed out after {timeout}s", original_error=e
            ) from e
        except Exception as e:
            metrics.record_payment_duration("failed", time.perf_counter() - start)
            raise PaymentFailedError(
                order_id, f"Payment failed: {e}", original_error=e
            ) from e

        metrics.record_payment_duration("success", time.perf_counter() - start)
        return auth

    async def _notify(
        self,
        order_id: str,
        customer: CustomerRecord,
        template: str,
        auth: PaymentAuthorization,
    ) -> None:
        """Send the customer notification. Failures are logged, never raised."""
        timeout = self.settings.notification_timeout_seconds

        try:
            message_id = await asyncio.wait_for(
                self.notification_sender.send(
                    to=customer.email,
                    template=template,
                    context={"order_id": order_id, "auth": auth.model_dump()},
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                "order_notification_failed",
                order_id=order_id,
                error=f"Notification timed out after {timeout}s",
            )
            metrics.record_stage("notification_error")
            return
        except Exception as e:
            logger.error("order_notification_failed", order_id=order_id, error=str(e))
            metrics.record_stage("notification_error")
            return

        logger.debug("order_notification_sent", order_id=order_id, message_id=message_id)

    def _schedule_finalization(self, order_id: str, audit_path: str, delay_ms: float) -> None:
        task = asyncio.get_running_loop().create_task(
            self._finalize(order_id, audit_path, delay_ms / 1000.0),
            name=f"finalize-{order_id}",
        )
        self._finalizers.add(task)
        task.add_done_callback(self._finalization_done)
        metrics.set_pending_finalizations(len(self._finalizers))

    def _finalization_done(self, task: asyncio.Task) -> None:
        self._finalizers.discard(task)
        metrics.set_pending_finalizations(len(self._finalizers))

    async def _finalize(self, order_id: str, audit_path: str, delay_seconds: float) -> None:
        try:
            await asyncio.sleep(delay_seconds)
        except asyncio.CancelledError:
            logger.warning("order_finalization_cancelled", order_id=order_id)
            raise

        metrics.record_stage("complete_delayed")
        self.orders.set(order_id, CompletedSnapshot(completed_at=_utcnow()))
        self.audit.record(audit_path, DONE_MARKER, order_id)
        logger.info("order_finalized", order_id=order_id)

    async def drain(self, timeout: Optional[float] = None) -> int:
        """
        Wait for scheduled finalizations to fire.

        Args:
            timeout: Maximum seconds to wait; None waits indefinitely

        Returns:
            int: Number of finalizations still pending
        """
        pending = set(self._finalizers)
        if pending:
            await asyncio.wait(pending, timeout=timeout)
        return len(self._finalizers)

    async def shutdown(self) -> int:
        """
        Cancel pending finalizations.

        Cancelled orders keep their charged snapshot and get no DONE line.

        Returns:
            int: Number of finalizations cancelled
        """
        pending = list(self._finalizers)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        logger.info("order_pipeline_shutdown", cancelled=len(pending))
        return len(pending)
