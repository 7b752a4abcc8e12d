"""Framework-aware build planning.

Classifies a source project (and each of its files) by UI framework, then
selects, orders and scopes build capabilities for the chosen build mode.

Public API:
    classify(project_root) -> ClassificationResult
    FrameworkClassifier(config).classify(path) -> FrameworkInfo
    CapabilityOrchestrator(config).orchestrate(capabilities, file, info) -> list[Capability]
    MixedFrameworkCoordinator().plan(source_tree, config, capabilities) -> BuildPlan
"""

__version__ = "0.4.0"
