"""Exceptions raised by the order pipeline and its collaborators."""
from typing import Optional


class OrderPipelineError(Exception):
    """Base exception for order pipeline errors."""

    pass


class PaymentGatewayError(OrderPipelineError):
    """Raised by a payment gateway when a charge is declined or fails."""

    pass


class PaymentFailedError(OrderPipelineError):
    """
    Raised to the caller when an order could not be charged.

    This is the only failure that changes what the caller is told.
    """

    def __init__(
        self,
        order_id: str,
        message: str,
        original_error: Optional[BaseException] = None,
    ):
        """
        Initialize payment failure.

        Args:
            order_id: Order that failed to charge
            message: Error message
            original_error: Gateway exception, if any
        """
        super().__init__(message)
        self.order_id = order_id
        self.original_error = original_error


class PaymentTimeoutError(PaymentFailedError):
    """Raised when the payment gateway does not answer in time."""

    pass


class NotificationError(OrderPipelineError):
    """Raised by a notification sender when a message cannot be sent."""

    pass
