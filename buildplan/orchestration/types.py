"""Types for capability orchestration.

A Capability is one unit of build behavior (a bundler plugin analogue)
exposing lifecycle hooks. Its CapabilityDescriptor says which frameworks it
applies to, how it orders against others and what it conflicts with or
depends on. Descriptors are either declared explicitly or inferred from
the capability's name and hook shape.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Callable, Optional

from buildplan.core.events import PlanEvent

UNIVERSAL = "universal"

HOOK_NAMES = (
    "build_start",
    "resolve_id",
    "load",
    "transform",
    "build_end",
    "generate_bundle",
    "write_bundle",
)


class Phase(StrEnum):
    PRE = "pre"
    TRANSFORM = "transform"
    POST = "post"


PHASE_ORDER: dict[Phase, int] = {Phase.PRE: 0, Phase.TRANSFORM: 1, Phase.POST: 2}


@dataclass(frozen=True)
class CapabilityDescriptor:
    """Orchestration metadata for one capability.

    frameworks: {"universal"} or the framework names it applies to.
    priority: Higher runs earlier within a phase and wins conflicts.
    conflicts: Names that must not be active alongside this one.
    depends_on: Names that must also be part of the plan.
    """

    name: str
    frameworks: frozenset[str] = frozenset({UNIVERSAL})
    priority: int = 50
    conflicts: frozenset[str] = frozenset()
    depends_on: frozenset[str] = frozenset()
    phase: Phase = Phase.TRANSFORM
    optional: bool = False

    @property
    def universal(self) -> bool:
        return UNIVERSAL in self.frameworks

    def applies_to(self, frameworks: set[str] | frozenset[str]) -> bool:
        return self.universal or bool(self.frameworks & frameworks)

    def conflicts_with(self, other: "CapabilityDescriptor") -> bool:
        """Conflicts are symmetric: either side may declare them."""
        return other.name in self.conflicts or self.name in other.conflicts


Hook = Callable[..., Any]


@dataclass
class Capability:
    """A named set of lifecycle hooks.

    enforce mirrors the bundler convention: "pre" or "post" pins the
    capability's phase. descriptor, when given, overrides inference.
    """

    name: str
    hooks: dict[str, Hook] = field(default_factory=dict)
    enforce: Optional[str] = None
    descriptor: Optional[CapabilityDescriptor] = None

    def __post_init__(self) -> None:
        unknown = set(self.hooks) - set(HOOK_NAMES)
        if unknown:
            raise ValueError(f"Unknown hooks for capability '{self.name}': {sorted(unknown)}")
        if self.enforce not in (None, "pre", "post"):
            raise ValueError(f"enforce must be 'pre' or 'post', got {self.enforce!r}")

    def has_hook(self, hook: str) -> bool:
        return hook in self.hooks

    def call(self, hook: str, *args: Any, **kwargs: Any) -> Any:
        """Invoke a hook; missing hooks return None."""
        fn = self.hooks.get(hook)
        if fn is None:
            return None
        return fn(*args, **kwargs)


@dataclass
class OrchestrationConfig:
    """Orchestration policy.

    strict: Raise on conflicts and missing dependencies.
    auto_resolve_conflicts: In lenient mode, let a strictly higher-priority
        newcomer evict the capabilities it conflicts with.
    deny / allow: Capability names to drop / the only names to keep.
    """

    strict: bool = False
    auto_resolve_conflicts: bool = True
    deny: frozenset[str] = frozenset()
    allow: Optional[frozenset[str]] = None
    framework_priority: dict[str, int] = field(
        default_factory=lambda: {UNIVERSAL: 0, "vue": 1, "react": 1}
    )


@dataclass(frozen=True)
class OrchestrationPlan:
    """Ordered, conflict-free capabilities for one file set and framework set.

    capabilities are ready to hand to the build engine (framework-specific
    ones wrapped); descriptors line up with them index for index.
    """

    capabilities: tuple[Capability, ...]
    descriptors: tuple[CapabilityDescriptor, ...]
    frameworks: tuple[str, ...]
    target: Optional[str] = None
    evicted: tuple[str, ...] = ()
    dropped: tuple[str, ...] = ()
    warnings: tuple[PlanEvent, ...] = ()

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(d.name for d in self.descriptors)

    @property
    def phases(self) -> tuple[Phase, ...]:
        return tuple(d.phase for d in self.descriptors)

    def to_dict(self) -> dict:
        return {
            "capabilities": [
                {
                    "name": d.name,
                    "phase": d.phase.value,
                    "priority": d.priority,
                    "frameworks": sorted(d.frameworks),
                }
                for d in self.descriptors
            ],
            "frameworks": list(self.frameworks),
            "target": self.target,
            "evicted": list(self.evicted),
            "dropped": list(self.dropped),
            "warnings": [w.to_dict() for w in self.warnings],
        }
