"""Capability orchestrator.

Pipeline:
1. Describe   explicit descriptors are kept, the rest are inferred
2. Filter     deny list, allow list, framework compatibility
3. Resolve    conflicts (strict / evict / drop) and missing dependencies
4. Sort       phase, priority desc, framework priority desc, name
5. Wrap       framework-specific capabilities only fire on their files

Every conflict, eviction and missing dependency is reported to the event
sink with the capability name, the reason and a suggested fix.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

from buildplan.core.errors import CapabilityConflictError, CapabilityDependencyError
from buildplan.core.events import (
    EventKind,
    EventLevel,
    EventSink,
    LoggingEventSink,
    PlanEvent,
)
from buildplan.orchestration.inference import infer_descriptor
from buildplan.orchestration.types import (
    PHASE_ORDER,
    Capability,
    CapabilityDescriptor,
    OrchestrationConfig,
    OrchestrationPlan,
)
from buildplan.orchestration.wrapping import (
    ConditionalCapability,
    FileFrameworkResolver,
    FrameworkResolver,
)
from buildplan.scanner.types import FrameworkInfo

logger = logging.getLogger(__name__)

Entry = tuple[Capability, CapabilityDescriptor]


def describe(capability: Capability) -> CapabilityDescriptor:
    if capability.descriptor is not None:
        return capability.descriptor
    return infer_descriptor(capability.name, capability.enforce, capability.hooks.keys())


class CapabilityOrchestrator:
    """Select, order and scope capabilities for a build."""

    def __init__(
        self,
        config: Optional[OrchestrationConfig] = None,
        events: Optional[EventSink] = None,
    ):
        self.config = config or OrchestrationConfig()
        self.events = events or LoggingEventSink()

    def orchestrate(
        self,
        capabilities: Iterable[Capability],
        target_file: str | Path,
        framework_info: FrameworkInfo,
    ) -> list[Capability]:
        """Ordered capabilities applicable to one file."""
        target = str(target_file)
        plan = self.plan(
            capabilities,
            frameworks=[framework_info.type.value],
            resolver=FileFrameworkResolver({target: framework_info}),
            target=target,
        )
        return list(plan.capabilities)

    def plan(
        self,
        capabilities: Iterable[Capability],
        frameworks: Iterable[str],
        resolver: Optional[FrameworkResolver] = None,
        target: Optional[str] = None,
    ) -> OrchestrationPlan:
        """Build an immutable plan for a set of frameworks.

        resolver maps module ids to frameworks for the conditional
        wrappers; without one every id counts as unknown and wrapped hooks
        always delegate.
        """
        frameworks = tuple(dict.fromkeys(frameworks))
        warnings: list[PlanEvent] = []

        entries = [(c, describe(c)) for c in capabilities]
        entries = self._filter(entries, set(frameworks))
        entries, evicted, dropped = self._resolve_conflicts(entries, warnings)
        self._check_dependencies(entries, warnings)
        entries = self._sort(entries)

        resolve = resolver or (lambda module_id: None)
        wrapped = tuple(
            c if d.universal else ConditionalCapability(c, d, resolve)
            for c, d in entries
        )

        logger.debug(
            "Orchestrated %d capabilities for %s: %s",
            len(wrapped), ", ".join(frameworks) or "no framework",
            ", ".join(d.name for _, d in entries),
        )
        return OrchestrationPlan(
            capabilities=wrapped,
            descriptors=tuple(d for _, d in entries),
            frameworks=frameworks,
            target=target,
            evicted=tuple(evicted),
            dropped=tuple(dropped),
            warnings=tuple(warnings),
        )

    # -----------------------------------------------------------------------
    # Stages
    # -----------------------------------------------------------------------

    def _emit(self, event: PlanEvent, warnings: Optional[list[PlanEvent]] = None) -> None:
        self.events.emit(event)
        if warnings is not None and event.level == EventLevel.WARNING:
            warnings.append(event)

    def _filter(self, entries: list[Entry], frameworks: set[str]) -> list[Entry]:
        kept: list[Entry] = []
        for capability, desc in entries:
            reason = None
            if desc.name in self.config.deny:
                reason = "deny-listed"
            elif self.config.allow is not None and desc.name not in self.config.allow:
                reason = "not in the allow list"
            elif not desc.applies_to(frameworks):
                reason = (
                    f"applies to {', '.join(sorted(desc.frameworks))}, "
                    f"not {', '.join(sorted(frameworks)) or 'unknown'}"
                )

            if reason:
                self._emit(PlanEvent(
                    kind=EventKind.CAPABILITY_FILTERED,
                    subject=desc.name,
                    reason=reason,
                    level=EventLevel.DEBUG,
                ))
                continue
            kept.append((capability, desc))
        return kept

    def _resolve_conflicts(
        self,
        entries: list[Entry],
        warnings: list[PlanEvent],
    ) -> tuple[list[Entry], list[str], list[str]]:
        accepted: list[Entry] = []
        evicted: list[str] = []
        dropped: list[str] = []

        for capability, desc in entries:
            rivals = [d for _, d in accepted if desc.conflicts_with(d)]
            if not rivals:
                accepted.append((capability, desc))
                continue

            rival_names = [d.name for d in rivals]
            if self.config.strict:
                raise CapabilityConflictError(desc.name, rival_names)

            if self.config.auto_resolve_conflicts and all(desc.priority > d.priority for d in rivals):
                accepted = [(c, d) for c, d in accepted if d not in rivals]
                accepted.append((capability, desc))
                for rival in rivals:
                    evicted.append(rival.name)
                    self._emit(PlanEvent(
                        kind=EventKind.CONFLICT_EVICTED,
                        subject=rival.name,
                        reason=(
                            f"conflicts with '{desc.name}' (priority {desc.priority} > {rival.priority})"
                        ),
                        suggestion=f"Remove '{rival.name}' from the build or drop '{desc.name}' explicitly",
                        data={"winner": desc.name},
                    ), warnings)
                continue

            dropped.append(desc.name)
            self._emit(PlanEvent(
                kind=EventKind.CONFLICT_DROPPED,
                subject=desc.name,
                reason=f"conflicts with already accepted {', '.join(rival_names)}",
                suggestion=(
                    f"Remove '{desc.name}' or deny-list {', '.join(rival_names)} "
                    "if it should take precedence"
                ),
                data={"conflicting": rival_names},
            ), warnings)

        return accepted, evicted, dropped

    def _check_dependencies(self, entries: list[Entry], warnings: list[PlanEvent]) -> None:
        names = {d.name for _, d in entries}
        for _, desc in entries:
            missing = sorted(desc.depends_on - names)
            if not missing:
                continue
            if self.config.strict:
                raise CapabilityDependencyError(desc.name, missing)
            self._emit(PlanEvent(
                kind=EventKind.DEPENDENCY_MISSING,
                subject=desc.name,
                reason=f"depends on {', '.join(missing)}, which is not part of the plan",
                suggestion=f"Add {', '.join(missing)} to the capability list or remove '{desc.name}'",
                data={"missing": missing},
            ), warnings)

    def _framework_priority(self, desc: CapabilityDescriptor) -> int:
        return max(self.config.framework_priority.get(f, 0) for f in desc.frameworks)

    def _sort(self, entries: list[Entry]) -> list[Entry]:
        return sorted(
            entries,
            key=lambda entry: (
                PHASE_ORDER[entry[1].phase],
                -entry[1].priority,
                -self._framework_priority(entry[1]),
                entry[1].name,
            ),
        )
