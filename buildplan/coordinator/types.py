"""Types produced by the mixed-framework coordinator.

Everything here is frozen: a BuildPlan handed to a caller is never mutated,
and the memoized copy the coordinator keeps is the same object.
"""

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Mapping, Optional, Union

from buildplan.coordinator.chunking import SeparatedChunkPolicy, UnifiedChunkPolicy
from buildplan.coordinator.config import BuildMode
from buildplan.core.events import PlanEvent
from buildplan.detector.types import ClassificationResult
from buildplan.orchestration.types import OrchestrationPlan
from buildplan.scanner.types import FrameworkInfo

FileFrameworkMap = Mapping[str, FrameworkInfo]
ChunkPolicy = Union[UnifiedChunkPolicy, SeparatedChunkPolicy]

# Files whose public API is a default export
DEFAULT_EXPORT_SUFFIXES = (".vue", ".svelte")


def _export_name(path: str, taken: set[str]) -> str:
    stem = PurePosixPath(path).name.split(".", 1)[0]
    words = re.split(r"[^0-9A-Za-z]+", stem)
    name = "".join(w[:1].upper() + w[1:] for w in words if w) or "Component"
    if name[0].isdigit():
        name = "_" + name
    candidate, n = name, 2
    while candidate in taken:
        candidate, n = f"{name}{n}", n + 1
    taken.add(candidate)
    return candidate


@dataclass(frozen=True)
class OutputPolicy:
    dir: str
    format: str
    entry_file_names: str = "[name].js"
    chunk_file_names: str = "[name]-[hash].js"
    preserve_modules: bool = False
    preserve_modules_root: Optional[str] = None
    cross_file_bundling: bool = True

    def to_dict(self) -> dict:
        return {
            "dir": self.dir,
            "format": self.format,
            "entry_file_names": self.entry_file_names,
            "chunk_file_names": self.chunk_file_names,
            "preserve_modules": self.preserve_modules,
            "preserve_modules_root": self.preserve_modules_root,
            "cross_file_bundling": self.cross_file_bundling,
        }


@dataclass(frozen=True)
class SyntheticEntry:
    """A generated entry module re-exporting every file of one framework."""

    name: str
    framework: str
    files: tuple[str, ...]

    @property
    def source(self) -> str:
        taken: set[str] = set()
        lines = []
        for path in self.files:
            spec = f"./{path}"
            if path.endswith(DEFAULT_EXPORT_SUFFIXES):
                lines.append(f"export {{ default as {_export_name(path, taken)} }} from '{spec}';")
            else:
                lines.append(f"export * from '{spec}';")
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class GroupPlan:
    """Independent sub-plan for one custom-mode group."""

    name: str
    framework: str
    files: tuple[str, ...]
    output_dir: str
    orchestration: OrchestrationPlan

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "framework": self.framework,
            "files": list(self.files),
            "output_dir": self.output_dir,
            "orchestration": self.orchestration.to_dict(),
        }


@dataclass(frozen=True)
class BuildModeDecision:
    """The selected build mode and everything it parameterizes.

    inputs are the entry files handed to the bundler (component mode);
    entries are generated re-export modules (separated mode); output_tags
    map each output file to its owning framework (component mode).
    """

    mode: BuildMode
    output: OutputPolicy
    chunk_policy: Optional[ChunkPolicy] = None
    inputs: tuple[str, ...] = ()
    entries: tuple[SyntheticEntry, ...] = ()
    output_dirs: Mapping[str, str] = field(default_factory=dict)
    output_tags: Mapping[str, str] = field(default_factory=dict)
    groups: tuple[GroupPlan, ...] = ()

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "output": self.output.to_dict(),
            "chunk_policy": type(self.chunk_policy).__name__ if self.chunk_policy else None,
            "inputs": list(self.inputs),
            "entries": [
                {"name": e.name, "framework": e.framework, "files": list(e.files)}
                for e in self.entries
            ],
            "output_dirs": dict(self.output_dirs),
            "output_tags": dict(self.output_tags),
            "groups": [g.to_dict() for g in self.groups],
        }


@dataclass(frozen=True)
class BuildPlan:
    """Complete, immutable plan for building one source tree."""

    root: str
    classification: ClassificationResult
    files: FileFrameworkMap
    stats: Mapping[str, int]
    orchestration: OrchestrationPlan
    decision: BuildModeDecision
    externals: tuple[str, ...] = ()
    warnings: tuple[PlanEvent, ...] = ()

    @property
    def mode(self) -> BuildMode:
        return self.decision.mode

    @property
    def groups(self) -> tuple[GroupPlan, ...]:
        return self.decision.groups

    @property
    def frameworks(self) -> tuple[str, ...]:
        return self.orchestration.frameworks

    def to_dict(self) -> dict:
        return {
            "root": self.root,
            "classification": self.classification.to_dict(),
            "files": {path: info.to_dict() for path, info in self.files.items()},
            "stats": dict(self.stats),
            "orchestration": self.orchestration.to_dict(),
            "decision": self.decision.to_dict(),
            "externals": list(self.externals),
            "warnings": [w.to_dict() for w in self.warnings],
        }
