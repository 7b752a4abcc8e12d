"""Types for the per-file framework scanner.

A FrameworkInfo records which UI framework owns one source file and how
sure the scanner is about it. `source` names the detection stage that
produced the result so callers can explain a classification.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Optional


class Framework(StrEnum):
    VUE = "vue"
    REACT = "react"
    SVELTE = "svelte"
    SOLID = "solid"
    PREACT = "preact"
    LIT = "lit"
    ANGULAR = "angular"
    UNKNOWN = "unknown"


class DetectionStage(StrEnum):
    EXTENSION = "extension"
    ASSOCIATION = "association"
    IMPORTS = "imports"
    PRAGMA = "pragma"
    SYNTAX = "syntax"
    DEFAULT = "default"
    NONE = "none"


# JSX transform flavour implied by each framework
JSX_HINTS: dict[Framework, str] = {
    Framework.VUE: "vue-jsx",
    Framework.REACT: "react-jsx",
    Framework.SOLID: "solid-jsx",
    Framework.PREACT: "preact-jsx",
}


@dataclass(frozen=True)
class FrameworkInfo:
    """Framework ownership of one file.

    type: The owning framework, or UNKNOWN.
    confidence: 0.0 (no signal) to 1.0 (framework-specific extension).
    jsx: JSX transform hint, e.g. "vue-jsx".
    pragma: The @jsx pragma found in the file, if any.
    source: The detection stage that produced this result.
    """

    type: Framework
    confidence: float
    jsx: Optional[str] = None
    pragma: Optional[str] = None
    source: DetectionStage = DetectionStage.NONE

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")

    @classmethod
    def unknown(cls) -> "FrameworkInfo":
        return cls(type=Framework.UNKNOWN, confidence=0.0)

    @classmethod
    def of(
        cls,
        framework: Framework,
        confidence: float,
        source: DetectionStage,
        pragma: Optional[str] = None,
    ) -> "FrameworkInfo":
        return cls(
            type=framework,
            confidence=confidence,
            jsx=JSX_HINTS.get(framework),
            pragma=pragma,
            source=source,
        )

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "confidence": round(self.confidence, 2),
            "jsx": self.jsx,
            "pragma": self.pragma,
            "source": self.source.value,
        }


@dataclass
class DetectionConfig:
    """Per-classifier detection flags.

    root: Base directory that file_associations globs are relative to
        (defaults to the current working directory).
    file_associations: Glob -> framework name, e.g. {"src/legacy/**": "vue"}.
    default_framework: Reported at confidence 0.1 when nothing matched.
    max_scan_file_size / syntax_scan_timeout: Guards for the syntax-tree
        scan; None means the process-wide settings.
    """

    root: Optional[Path] = None
    file_associations: dict[str, str] = field(default_factory=dict)
    default_framework: Optional[str] = None
    enable_content_detection: bool = True
    enable_import_detection: bool = True
    enable_pragma_detection: bool = True
    enable_syntax_scan: bool = True
    max_scan_file_size: Optional[int] = None
    syntax_scan_timeout: Optional[float] = None

    def __post_init__(self) -> None:
        # Fail fast on misspelled framework names
        for pattern, name in self.file_associations.items():
            Framework(name)
        if self.default_framework is not None:
            Framework(self.default_framework)
