"""Resolve provider-contributed setup manifests and run them in dependency order."""

from .applicability import mark
from .collector import collect
from .graph import DependencyCycleError, ManifestGraph, build_graph, resolve
from .models import (
    FailureKind,
    ManifestDeclaration,
    ManifestInfo,
    ManifestKey,
    ResourceRef,
    RunFailure,
    RunOutcome,
    StepStatus,
)
from .orchestrator import Orchestrator, ResolutionContext
from .providers import Provider, ProviderError, ProviderRegistry, discover_providers
from .runner import Runner

__version__ = "0.1.0"

__all__ = [
    "DependencyCycleError",
    "FailureKind",
    "ManifestDeclaration",
    "ManifestGraph",
    "ManifestInfo",
    "ManifestKey",
    "Orchestrator",
    "Provider",
    "ProviderError",
    "ProviderRegistry",
    "ResolutionContext",
    "ResourceRef",
    "RunFailure",
    "RunOutcome",
    "Runner",
    "StepStatus",
    "build_graph",
    "collect",
    "discover_providers",
    "mark",
    "resolve",
]
