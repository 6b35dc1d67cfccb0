"""Operation diagnostics: envelope schema and start/end observation.

Each archive or extract call can publish two envelopes on the event bus:
``operation.start`` before any I/O, and ``operation.end`` with a status,
duration and either a result summary or the error that aborted it.
"""

from __future__ import annotations

import time
import traceback
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from targz.core.events import get_event_bus
from targz.core.logging import get_logger

_logger = get_logger(__name__)

COMPONENT = "targz"


def build_envelope(
    *,
    event: str,
    component: str,
    operation: str,
    data: dict[str, Any],
) -> dict[str, Any]:
    """Build the canonical diagnostics envelope.

    Schema:
        {
          "event": "<string>",
          "component": "<string>",
          "operation": "<string>",
          "timestamp": "<iso8601 utc>",
          "data": { ... }
        }

    Timestamp is emitted in UTC with a trailing 'Z'.
    """
    ts = datetime.now(UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    return {
        "event": event,
        "component": component,
        "operation": operation,
        "timestamp": ts,
        "data": data,
    }


def _short_traceback(*, max_lines: int = 20) -> str:
    tb_lines = traceback.format_exc().strip().splitlines()
    return "\n".join(tb_lines[-max_lines:])


def _safe_publish(event: str, payload: dict[str, Any]) -> None:
    try:
        get_event_bus().publish(event, payload)
    except Exception:
        # Diagnostics must never change the outcome of an operation.
        return


def _format_fields(fields: dict[str, Any]) -> str:
    return " ".join(f"{k}={v!r}" for k, v in fields.items())


@contextmanager
def observe_operation(
    *,
    operation: str,
    base: dict[str, Any],
    enabled: bool = False,
) -> Iterator[dict[str, Any]]:
    """Observe one operation.

    The body fills the yielded dict with summary fields. Summary logs are
    emitted on end only; events are published only when ``enabled``.
    """
    start = time.perf_counter()

    if enabled:
        _safe_publish(
            "operation.start",
            build_envelope(
                event="operation.start",
                component=COMPONENT,
                operation=operation,
                data=dict(base),
            ),
        )

    summary: dict[str, Any] = {}
    try:
        yield summary
    except Exception as e:
        duration_ms = int((time.perf_counter() - start) * 1000)
        end_data = dict(base)
        end_data.update(
            {
                "status": "failed",
                "duration_ms": duration_ms,
                "error_type": type(e).__name__,
                "error_message": str(e),
            }
        )
        if enabled:
            end_data["traceback"] = _short_traceback()
            _safe_publish(
                "operation.end",
                build_envelope(
                    event="operation.end",
                    component=COMPONENT,
                    operation=operation,
                    data=end_data,
                ),
            )
        _logger.verbose(
            f"{operation} status=failed duration_ms={duration_ms} "
            f"{_format_fields(base)} error_type={type(e).__name__!r}"
        )
        raise
    else:
        duration_ms = int((time.perf_counter() - start) * 1000)
        end_data = dict(base)
        end_data.update(summary)
        end_data.update({"status": "succeeded", "duration_ms": duration_ms})
        if enabled:
            _safe_publish(
                "operation.end",
                build_envelope(
                    event="operation.end",
                    component=COMPONENT,
                    operation=operation,
                    data=end_data,
                ),
            )
        _logger.verbose(
            f"{operation} status=succeeded duration_ms={duration_ms} "
            f"{_format_fields(base)} {_format_fields(summary)}"
        )
