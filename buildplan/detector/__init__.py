"""Detector module for classifying a project by UI-framework family.

Public API:
    classify(project_root) -> ClassificationResult
    detect_monorepo(project_root) -> MonorepoInfo
    infer_project_category(project_root) -> ProjectCategory
"""

from buildplan.detector.classifier import classify
from buildplan.detector.project import (
    MonorepoInfo,
    ProjectCategory,
    detect_monorepo,
    infer_project_category,
)
from buildplan.detector.types import (
    ClassificationResult,
    EvidenceItem,
    EvidenceKind,
    LibraryType,
    TypeScore,
)

__all__ = [
    "ClassificationResult",
    "EvidenceItem",
    "EvidenceKind",
    "LibraryType",
    "MonorepoInfo",
    "ProjectCategory",
    "TypeScore",
    "classify",
    "detect_monorepo",
    "infer_project_category",
]
