"""Exception types shared across the classification and planning pipeline.

Most of these never reach the caller: collector and per-file failures are
absorbed where they happen and only logged. The orchestration errors are the
exception, they propagate when the orchestrator runs in strict mode.
"""


class BuildPlanError(Exception):
    """Base class for every error raised by buildplan."""


class CollectionFailure(BuildPlanError):
    """An evidence collector failed for one candidate or the whole project."""

    def __init__(self, collector: str, message: str):
        self.collector = collector
        super().__init__(f"{collector}: {message}")


class ParseFailure(BuildPlanError):
    """The syntax-tree scan could not produce a usable tree for one file."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class SyntaxScanTimeout(ParseFailure):
    """The syntax-tree scan exceeded its per-file deadline."""


class CapabilityConflictError(BuildPlanError):
    """Two mutually exclusive capabilities were both requested (strict mode)."""

    def __init__(self, capability: str, conflicting: list[str]):
        self.capability = capability
        self.conflicting = conflicting
        super().__init__(
            f"Capability '{capability}' conflicts with already accepted "
            f"{', '.join(conflicting)}"
        )


class CapabilityDependencyError(BuildPlanError):
    """A capability declares dependencies that are not part of the plan (strict mode)."""

    def __init__(self, capability: str, missing: list[str]):
        self.capability = capability
        self.missing = missing
        super().__init__(
            f"Capability '{capability}' is missing dependencies: {', '.join(missing)}"
        )
