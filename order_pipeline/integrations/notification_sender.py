"""Notification sender interface and an in-process simulated sender."""
import asyncio
import secrets
from typing import Any, Dict, List, Optional, Protocol

import structlog

from order_pipeline.core.exceptions import NotificationError

logger = structlog.get_logger(__name__)


class NotificationSender(Protocol):
    """Interface for sending customer notifications."""

    async def send(self, to: str, template: str, context: Dict[str, Any]) -> str:
        """Send a message and return its id; raise NotificationError on failure."""
        ...


class SimulatedNotificationSender:
    """
    Sender that records messages instead of delivering them.

    Args:
        latency_seconds: Simulated delivery latency
        fail_with: Error message; when set every send fails
    """

    def __init__(
        self,
        latency_seconds: float = 0.01,
        fail_with: Optional[str] = None,
    ):
        self.latency_seconds = latency_seconds
        self.fail_with = fail_with
        self.sent: List[Dict[str, Any]] = []

    async def send(self, to: str, template: str, context: Dict[str, Any]) -> str:
        await asyncio.sleep(self.latency_seconds)

        if self.fail_with is not None:
            raise NotificationError(self.fail_with)

        message_id = secrets.token_hex(2)
        self.sent.append(
            {"message_id": message_id, "to": to, "template": template, "context": context}
        )
        logger.info(
            "simulated_notification_sent",
            to=to,
            template=template,
            message_id=message_id,
        )
        return message_id
