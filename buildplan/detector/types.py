"""Shared types for the detector module.

Every project-level classification produces a ClassificationResult, which
carries the winning library type along with confidence and the evidence
trail that led to it. Evidence and score objects only live for the duration
of one classify() call.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Optional

logger = logging.getLogger(__name__)


class LibraryType(StrEnum):
    """Candidate project types. Declaration order is the tie-break order."""

    TYPESCRIPT = "typescript"
    STYLE = "style"
    VUE2 = "vue2"
    VUE3 = "vue3"
    REACT = "react"
    SVELTE = "svelte"
    SOLID = "solid"
    PREACT = "preact"
    LIT = "lit"
    ANGULAR = "angular"
    QWIK = "qwik"
    MIXED = "mixed"
    ENHANCED_MIXED = "enhanced-mixed"


class EvidenceKind(StrEnum):
    FILE = "file"
    DEPENDENCY = "dependency"
    CONFIG = "config"
    CONTENT = "content"
    ERROR = "error"


@dataclass(frozen=True)
class EvidenceItem:
    """A single weighted signal supporting one candidate type.

    source_ref tracks where the signal came from (e.g. "package.json",
    "src/index.ts, src/app.ts") for evidence reporting.
    """

    kind: EvidenceKind
    description: str
    weight: float
    source_ref: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "description": self.description,
            "weight": round(self.weight, 4),
            "source_ref": self.source_ref,
        }


@dataclass
class TypeScore:
    """Mutable accumulator of evidence for one candidate type."""

    type: LibraryType
    priority: int
    raw: float = 0.0
    evidence: list[EvidenceItem] = field(default_factory=list)

    def add(self, item: EvidenceItem) -> None:
        if not math.isfinite(item.weight) or item.weight < 0:
            logger.warning(
                "Ignoring evidence with invalid weight %r for %s: %s",
                item.weight, self.type, item.description,
            )
            return
        self.raw += item.weight
        self.evidence.append(item)

    @property
    def weighted(self) -> float:
        return self.raw * (self.priority / 10)


@dataclass(frozen=True)
class ClassificationResult:
    """Terminal project classification.

    alternates lists the other candidates that scored, best first.
    frameworks is set for enhanced-mixed results; variant marks special
    flavours such as the JSX variant of a single-file-component framework.
    """

    type: LibraryType
    confidence: float
    evidence: tuple[EvidenceItem, ...] = ()
    alternates: tuple[tuple[LibraryType, float], ...] = ()
    frameworks: tuple[str, ...] = ()
    variant: Optional[str] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "confidence": round(self.confidence, 2),
            "evidence": [e.to_dict() for e in self.evidence],
            "alternates": [
                {"type": t.value, "score": round(s, 4)} for t, s in self.alternates
            ],
            "frameworks": list(self.frameworks),
            "variant": self.variant,
        }
