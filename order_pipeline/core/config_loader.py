"""
Per-invocation order configuration loading.

The file is read synchronously on every call so edits take effect on the
next order without a restart. Loading never raises: an unreadable or
invalid file yields the built-in defaults.
"""
from pathlib import Path
from typing import Optional

import structlog

from order_pipeline.config import Settings
from order_pipeline.core.models import OrderConfig

logger = structlog.get_logger(__name__)


def resolve_config_path(explicit_path: Optional[str], settings: Settings) -> Path:
    """
    Pick the config file to read.

    Priority: explicit path, then ``LEGACY_ORDER_CONFIG``, then the default path.
    """
    return Path(explicit_path or settings.order_config_path or settings.default_config_path)


def default_order_config(settings: Settings) -> OrderConfig:
    """Configuration used when no file could be loaded."""
    return OrderConfig(
        offline_mode=settings.force_offline,
        audit_path=settings.default_audit_path,
    )


def load_order_config(explicit_path: Optional[str], settings: Settings) -> OrderConfig:
    """
    Load the order configuration.

    Args:
        explicit_path: Path supplied by the caller, if any
        settings: Application settings providing fallbacks

    Returns:
        OrderConfig: Parsed configuration, or defaults on any failure
    """
    path = resolve_config_path(explicit_path, settings)

    # ValueError covers decode errors, ValidationError and NUL bytes in the path
    try:
        return OrderConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(
            "order_config_fallback",
            path=str(path),
            reason=str(e),
            force_offline=settings.force_offline,
        )
        return default_order_config(settings)
