"""Core order processing logic."""
from .audit import AuditLogWriter
from .config_loader import load_order_config
from .exceptions import (
    NotificationError,
    OrderPipelineError,
    PaymentFailedError,
    PaymentGatewayError,
    PaymentTimeoutError,
)
from .pipeline import OrderPipeline
from .runtime_state import RuntimeState
from .stores import CustomerDirectory, OrderStateCache

__all__ = [
    "AuditLogWriter",
    "CustomerDirectory",
    "NotificationError",
    "OrderPipeline",
    "OrderPipelineError",
    "OrderStateCache",
    "PaymentFailedError",
    "PaymentGatewayError",
    "PaymentTimeoutError",
    "RuntimeState",
    "load_order_config",
]
