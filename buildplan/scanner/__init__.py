"""Scanner module for per-file framework detection.

Public API:
    FrameworkClassifier(config).classify(path) -> FrameworkInfo
    FrameworkClassifier(config).classify_batch(paths) -> dict[str, FrameworkInfo]
"""

from buildplan.scanner.cache import FrameworkCache
from buildplan.scanner.classifier import FrameworkClassifier
from buildplan.scanner.types import DetectionConfig, DetectionStage, Framework, FrameworkInfo

__all__ = [
    "DetectionConfig",
    "DetectionStage",
    "Framework",
    "FrameworkCache",
    "FrameworkClassifier",
    "FrameworkInfo",
]
