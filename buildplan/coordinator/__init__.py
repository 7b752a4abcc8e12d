"""Coordinator module for planning mixed-framework builds.

Public API:
    MixedFrameworkCoordinator().plan(source_tree, config, capabilities) -> BuildPlan
    MixedFrameworkCoordinator().plan_async(...) -> BuildPlan
"""

from buildplan.coordinator.chunking import SeparatedChunkPolicy, UnifiedChunkPolicy
from buildplan.coordinator.config import (
    AdvancedConfig,
    BuildMode,
    GroupRule,
    JsxConfig,
    MatchKind,
    MixedFrameworkConfig,
    OrchestrationPolicy,
    OutputConfig,
)
from buildplan.coordinator.coordinator import MixedFrameworkCoordinator
from buildplan.coordinator.types import (
    BuildModeDecision,
    BuildPlan,
    GroupPlan,
    OutputPolicy,
    SyntheticEntry,
)

__all__ = [
    "AdvancedConfig",
    "BuildMode",
    "BuildModeDecision",
    "BuildPlan",
    "GroupPlan",
    "GroupRule",
    "JsxConfig",
    "MatchKind",
    "MixedFrameworkConfig",
    "MixedFrameworkCoordinator",
    "OrchestrationPolicy",
    "OutputConfig",
    "OutputPolicy",
    "SeparatedChunkPolicy",
    "SyntheticEntry",
    "UnifiedChunkPolicy",
]
