"""Structured event emission for the availability engine.

Resolution and accounting code never logs directly; it reports anomalies to
an ``EventSink`` handed in by the caller. The default sink forwards to the
standard logging setup with the fields attached as ``extra``.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger("app.availability")


class EventSink:
    def emit(self, event: str, level: int = logging.INFO, **fields: Any) -> None:
        raise NotImplementedError


class LoggingEventSink(EventSink):
    def __init__(self, target: logging.Logger | None = None) -> None:
        self._logger = target or logger

    def emit(self, event: str, level: int = logging.INFO, **fields: Any) -> None:
        self._logger.log(level, event, extra={"event": event, **fields})


class NullEventSink(EventSink):
    def emit(self, event: str, level: int = logging.INFO, **fields: Any) -> None:
        return None


def default_sink() -> EventSink:
    return LoggingEventSink()


INVALID_WINDOW = "availability.invalid_window"
OVERRIDE_APPLIED = "availability.override_applied"
SPECIAL_RULE_SKIPPED = "availability.special_rule_skipped"
OVERBOOKED = "capacity.overbooked"


__all__ = [
    "EventSink",
    "LoggingEventSink",
    "NullEventSink",
    "default_sink",
    "INVALID_WINDOW",
    "OVERRIDE_APPLIED",
    "SPECIAL_RULE_SKIPPED",
    "OVERBOOKED",
]
