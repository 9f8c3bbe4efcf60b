"""Order processing pipeline with audit trail, offline queueing and delayed finalization."""

__version__ = "0.1.0"

from order_pipeline.core import OrderPipeline, PaymentFailedError  # noqa: E402

__all__ = ["OrderPipeline", "PaymentFailedError", "__version__"]
