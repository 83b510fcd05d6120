"""Core data models shared across manifestrun components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Set


@dataclass(frozen=True, order=True)
class ManifestKey:
    """Identity of a manifest: the contributing provider plus the manifest name."""

    provider: str
    name: str

    @property
    def id(self) -> str:
        """Composite vertex id used by the dependency graph."""
        return f"{self.provider}-{self.name}"

    @classmethod
    def coerce(cls, value: object) -> "ManifestKey":
        if isinstance(value, ManifestKey):
            return value
        if isinstance(value, Mapping):
            provider = value.get("provider")
            name = value.get("name")
            if isinstance(provider, str) and isinstance(name, str):
                return cls(provider, name)
        elif isinstance(value, Sequence) and not isinstance(value, str) and len(value) == 2:
            provider, name = value
            if isinstance(provider, str) and isinstance(name, str):
                return cls(provider, name)
        raise ValueError(f"Cannot interpret {value!r} as a (provider, name) manifest reference")

    def __str__(self) -> str:
        return self.id


@dataclass(frozen=True)
class ResourceRef:
    """External code file to load before a manifest's task is invoked."""

    file: str
    base_path: Optional[Path] = None


@dataclass
class ManifestDeclaration:
    """A single manifest as declared by a provider."""

    dependencies: List[ManifestKey] = field(default_factory=list)
    task: Any = None
    resource: Optional[ResourceRef] = None
    arguments: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ManifestDeclaration":
        dependencies = [ManifestKey.coerce(item) for item in data.get("dependencies") or []]
        return cls(
            dependencies=dependencies,
            task=data.get("task"),
            resource=_as_resource(data.get("resource")),
            arguments=data.get("arguments"),
        )


@dataclass
class ManifestInfo:
    """Graph vertex for a manifest, populated progressively during resolution."""

    provider: str
    name: str
    task: Any = None
    resource: Optional[ResourceRef] = None
    dependencies: List[ManifestKey] = field(default_factory=list)
    arguments: Any = None
    is_stub: bool = False
    weight: Optional[int] = None
    component: Optional[ManifestKey] = None
    descendants: Set[ManifestKey] = field(default_factory=set)
    applicable: Optional[bool] = None
    blocked_by: List[ManifestKey] = field(default_factory=list)

    @property
    def key(self) -> ManifestKey:
        return ManifestKey(self.provider, self.name)

    @classmethod
    def stub(cls, key: ManifestKey) -> "ManifestInfo":
        return cls(provider=key.provider, name=key.name, is_stub=True)


class FailureKind(str, Enum):
    """Reasons a run can stop before completing every manifest."""

    MISSING_MANIFEST = "missing_manifest"
    UNRESOLVED_DEPENDENCY = "unresolved_dependency"
    INAPPLICABLE = "inapplicable"
    RESOURCE_LOAD_FAILURE = "resource_load_failure"
    MISSING_TASK = "missing_task"
    INVALID_TASK = "invalid_task"
    INVALID_ARGUMENTS = "invalid_arguments"
    TASK_FAILURE = "task_failure"
    TASK_ERROR = "task_error"


@dataclass
class RunFailure:
    """Structured description of the manifest that aborted a run."""

    kind: FailureKind
    key: ManifestKey
    blocked_by: List[ManifestKey] = field(default_factory=list)
    detail: Optional[str] = None


class StepStatus(str, Enum):
    STARTED = "started"
    SUCCEEDED = "succeeded"


@dataclass
class RunOutcome:
    """Result of walking the resolved order."""

    success: bool
    completed: List[ManifestKey] = field(default_factory=list)
    failure: Optional[RunFailure] = None


def _as_resource(value: Any) -> Optional[ResourceRef]:
    if value is None or isinstance(value, ResourceRef):
        return value
    if isinstance(value, str):
        return ResourceRef(file=value)
    if isinstance(value, Mapping) and isinstance(value.get("file"), str):
        base_path = value.get("base_path")
        return ResourceRef(
            file=value["file"],
            base_path=Path(base_path) if base_path else None,
        )
    raise ValueError(f"Invalid resource declaration: {value!r}")
