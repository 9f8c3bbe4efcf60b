"""
Append-only audit trail.

Writes are synchronous and best-effort: a failed append (unwritable or
invalid path) is logged and metered but never reaches the caller.
"""
from pathlib import Path
from typing import Union

import structlog

from order_pipeline.monitoring.metrics import metrics

logger = structlog.get_logger(__name__)

START_MARKER = "START"
DONE_MARKER = "DONE"


def audit_line(marker: str, order_id: str) -> str:
    return f"{marker} {order_id}\n"


class AuditLogWriter:
    """Appends lifecycle markers to a plain-text audit file."""

    def append(self, path: Union[str, Path], line: str) -> bool:
        """
        Append a line to the audit file.

        Args:
            path: Audit file path, created if missing
            line: Line to append, including the trailing newline

        Returns:
            bool: True if the line was written, False otherwise
        """
        try:
            with open(path, "a", encoding="utf-8") as fh:
                fh.write(line)
            return True
        except (OSError, ValueError) as e:
            marker = line.split(" ", 1)[0]
            logger.error(
                "audit_write_failed",
                path=str(path),
                marker=marker,
                line=line.rstrip("\n"),
                error=str(e),
            )
            metrics.record_audit_failure(marker)
            return False

    def record(self, path: Union[str, Path], marker: str, order_id: str) -> bool:
        """Append a ``<marker> <order_id>`` line."""
        return self.append(path, audit_line(marker, order_id))
