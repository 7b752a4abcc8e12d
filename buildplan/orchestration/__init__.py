"""Orchestration module for selecting and ordering build capabilities.

Public API:
    CapabilityOrchestrator(config).orchestrate(capabilities, file, info) -> list[Capability]
    CapabilityOrchestrator(config).plan(capabilities, frameworks, resolver) -> OrchestrationPlan
    infer_descriptor(name, enforce, hooks) -> CapabilityDescriptor
"""

from buildplan.orchestration.inference import infer_descriptor
from buildplan.orchestration.orchestrator import CapabilityOrchestrator
from buildplan.orchestration.types import (
    Capability,
    CapabilityDescriptor,
    OrchestrationConfig,
    OrchestrationPlan,
    Phase,
)
from buildplan.orchestration.wrapping import ConditionalCapability, FileFrameworkResolver

__all__ = [
    "Capability",
    "CapabilityDescriptor",
    "CapabilityOrchestrator",
    "ConditionalCapability",
    "FileFrameworkResolver",
    "OrchestrationConfig",
    "OrchestrationPlan",
    "Phase",
    "infer_descriptor",
]
