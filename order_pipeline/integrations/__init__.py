"""External collaborators of the order pipeline."""
from .notification_sender import NotificationSender, SimulatedNotificationSender
from .payment_gateway import PaymentGateway, SimulatedPaymentGateway
from .work_queue import InMemoryWorkQueue, WorkQueue

__all__ = [
    "InMemoryWorkQueue",
    "NotificationSender",
    "PaymentGateway",
    "SimulatedNotificationSender",
    "SimulatedPaymentGateway",
    "WorkQueue",
]
