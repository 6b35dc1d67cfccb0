"""Publish/subscribe bus for log records.

Every line emitted through ``targz.core.logging`` is also published here, so
embedding applications can route archive/extract logging into their own
handlers without parsing stdout. Subscriber exceptions never reach the caller
of the archive or extract operation.
"""

from __future__ import annotations

import contextlib
import sys
import traceback
from collections.abc import Callable
from dataclasses import dataclass

Subscriber = Callable[["LogRecord"], None]


@dataclass(frozen=True)
class LogRecord:
    level_name: str
    plain: str
    logger_name: str


class LogBus:
    def __init__(self) -> None:
        self._by_level: dict[str, list[Subscriber]] = {}
        self._all: list[Subscriber] = []

    def subscribe(self, level_name: str, cb: Subscriber) -> None:
        self._by_level.setdefault(level_name.upper(), []).append(cb)

    def unsubscribe(self, level_name: str, cb: Subscriber) -> None:
        key = level_name.upper()
        subs = self._by_level.get(key)
        if not subs or cb not in subs:
            return
        subs.remove(cb)
        if not subs:
            del self._by_level[key]

    def subscribe_all(self, cb: Subscriber) -> None:
        self._all.append(cb)

    def unsubscribe_all(self, cb: Subscriber) -> None:
        if cb in self._all:
            self._all.remove(cb)

    def publish(self, record: LogRecord) -> None:
        targets = list(self._all) + list(self._by_level.get(record.level_name, []))
        for cb in targets:
            self._deliver(cb, record)

    def clear(self) -> None:
        self._by_level.clear()
        self._all.clear()

    def _deliver(self, cb: Subscriber, record: LogRecord) -> None:
        try:
            cb(record)
        except Exception:
            # Never route through the logger here; it would publish again.
            msg = f"targz: log subscriber {cb!r} raised; suppressed.\n" + traceback.format_exc()
            with contextlib.suppress(Exception):
                sys.stderr.write(msg)


_LOG_BUS: LogBus | None = None


def get_log_bus() -> LogBus:
    global _LOG_BUS
    if _LOG_BUS is None:
        _LOG_BUS = LogBus()
    return _LOG_BUS
