"""
Payment gateway interface and an in-process simulated gateway.

The simulated gateway mimics a remote charge: it sleeps for a short latency
and returns a random two-byte hex authorization code.
"""
import asyncio
import secrets
from typing import List, Optional, Protocol, Tuple

import structlog

from order_pipeline.core.exceptions import PaymentGatewayError
from order_pipeline.core.models import PaymentAuthorization

logger = structlog.get_logger(__name__)


class PaymentGateway(Protocol):
    """Interface for charging an order."""

    async def charge(self, order_id: str, amount: float) -> PaymentAuthorization:
        """Charge ``amount`` for ``order_id``; raise PaymentGatewayError on failure."""
        ...


class SimulatedPaymentGateway:
    """
    Gateway that authorizes every charge after a fixed latency.

    Args:
        latency_seconds: Simulated network latency
        fail_with: Error message; when set every charge is declined
    """

    def __init__(
        self,
        latency_seconds: float = 0.05,
        fail_with: Optional[str] = None,
    ):
        self.latency_seconds = latency_seconds
        self.fail_with = fail_with
        self.charges: List[Tuple[str, float]] = []

    async def charge(self, order_id: str, amount: float) -> PaymentAuthorization:
        self.charges.append((order_id, amount))
        await asyncio.sleep(self.latency_seconds)

        if self.fail_with is not None:
            logger.info("simulated_charge_declined", order_id=order_id, amount=amount)
            raise PaymentGatewayError(self.fail_with)

        auth = PaymentAuthorization(auth_code=secrets.token_hex(2))
        logger.info(
            "simulated_charge_authorized",
            order_id=order_id,
            amount=amount,
            auth_code=auth.auth_code,
        )
        return auth
