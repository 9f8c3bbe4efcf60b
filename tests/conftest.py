"""
Pytest configuration and fixtures.
"""
import json
from pathlib import Path
from typing import Any, AsyncGenerator, Callable, Dict, Iterator

import pytest
import pytest_asyncio

from order_pipeline.config import Settings, get_settings
from order_pipeline.core import OrderPipeline
from order_pipeline.integrations import (
    InMemoryWorkQueue,
    SimulatedNotificationSender,
    SimulatedPaymentGateway,
)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Iterator[None]:
    """Settings are cached per process; tests that patch the environment need a fresh read."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def audit_path(tmp_path: Path) -> Path:
    return tmp_path / "audit.log"


@pytest.fixture
def test_settings(tmp_path: Path, audit_path: Path) -> Settings:
    """Create test settings pointing at an unreadable config file."""
    return Settings(
        app_name="order-pipeline-test",
        app_env="test",
        log_level="DEBUG",
        order_config_path=None,
        default_config_path=str(tmp_path / "nonexistent_config.json"),
        default_audit_path=str(audit_path),
        default_actor="test-runner",
        force_offline=False,
        payment_timeout_seconds=1.0,
        notification_timeout_seconds=1.0,
        default_completion_delay_ms=50,
    )


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[Dict[str, Any]], str]:
    """Write an order config JSON file and return its path."""

    def _write(data: Dict[str, Any], name: str = "order_config.json") -> str:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def payment_gateway() -> SimulatedPaymentGateway:
    return SimulatedPaymentGateway(latency_seconds=0.01)


@pytest.fixture
def notification_sender() -> SimulatedNotificationSender:
    return SimulatedNotificationSender(latency_seconds=0)


@pytest.fixture
def work_queue() -> InMemoryWorkQueue:
    return InMemoryWorkQueue()


@pytest_asyncio.fixture
async def pipeline(
    test_settings: Settings,
    payment_gateway: SimulatedPaymentGateway,
    notification_sender: SimulatedNotificationSender,
    work_queue: InMemoryWorkQueue,
) -> AsyncGenerator[OrderPipeline, Any]:
    """Create a pipeline with simulated collaborators."""
    order_pipeline = OrderPipeline(
        payment_gateway=payment_gateway,
        notification_sender=notification_sender,
        work_queue=work_queue,
        settings=test_settings,
    )
    yield order_pipeline

    await order_pipeline.shutdown()


@pytest.fixture
def sample_overrides() -> Dict[str, Any]:
    """Overrides used by the legacy console harness."""
    return {
        "amount": 42,
        "template": "receipt",
        "meta": {"started_by": "test-harness"},
        "flag": "expedite",
    }
