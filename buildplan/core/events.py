"""Structured event sink for user-visible planning warnings.

The orchestrator and coordinator never print. They emit `PlanEvent`s to an
`EventSink`; the default sink forwards them to structlog, tests and the
coordinator use `CollectingEventSink` to inspect what was reported.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Optional, Protocol

import structlog


class EventKind(StrEnum):
    """What happened. Each kind carries a suggested fix for the user."""

    CAPABILITY_FILTERED = "capability_filtered"
    CONFLICT_EVICTED = "conflict_evicted"
    CONFLICT_DROPPED = "conflict_dropped"
    DEPENDENCY_MISSING = "dependency_missing"
    GROUP_EMPTY = "group_empty"
    VERSION_FALLBACK = "version_fallback"


class EventLevel(StrEnum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class PlanEvent:
    """One warning or notice produced while planning a build."""

    kind: EventKind
    subject: str
    reason: str
    suggestion: str = ""
    level: EventLevel = EventLevel.WARNING
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "subject": self.subject,
            "reason": self.reason,
            "suggestion": self.suggestion,
            "level": self.level.value,
            "data": dict(self.data),
        }


class EventSink(Protocol):
    """Anything that accepts plan events."""

    def emit(self, event: PlanEvent) -> None:
        """Record or forward one event."""


class LoggingEventSink:
    """Forward events to a structlog logger at the event's level."""

    def __init__(self, logger: Optional[Any] = None):
        self._logger = logger or structlog.get_logger("buildplan.events")

    def emit(self, event: PlanEvent) -> None:
        log = getattr(self._logger, event.level.value)
        log(
            event.kind.value,
            subject=event.subject,
            reason=event.reason,
            suggestion=event.suggestion,
            **event.data,
        )


class CollectingEventSink:
    """Keep events in memory, in emission order."""

    def __init__(self) -> None:
        self.events: list[PlanEvent] = []

    def emit(self, event: PlanEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> list[PlanEvent]:
        return [e for e in self.events if e.kind == kind]

    @property
    def warnings(self) -> list[PlanEvent]:
        return [e for e in self.events if e.level == EventLevel.WARNING]

    def clear(self) -> None:
        self.events.clear()


class FanoutEventSink:
    """Deliver every event to several sinks."""

    def __init__(self, *sinks: EventSink):
        self._sinks = sinks

    def emit(self, event: PlanEvent) -> None:
        for sink in self._sinks:
            sink.emit(event)
