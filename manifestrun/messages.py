"""User-facing text for run progress and failures."""

from __future__ import annotations

from typing import Iterable

from .models import FailureKind, ManifestInfo, ManifestKey, RunFailure, StepStatus

_FAILURE_TEMPLATES = {
    FailureKind.MISSING_MANIFEST: "Manifest {key} is missing: no provider declares it.",
    FailureKind.UNRESOLVED_DEPENDENCY: "Manifest {key} has unresolved dependencies: {blocked}.",
    FailureKind.INAPPLICABLE: "Manifest {key} is not applicable.",
    FailureKind.RESOURCE_LOAD_FAILURE: "Could not load the resource for manifest {key}: {detail}",
    FailureKind.MISSING_TASK: "Manifest {key} does not declare a task.",
    FailureKind.INVALID_TASK: "The task for manifest {key} is not callable: {detail}",
    FailureKind.INVALID_ARGUMENTS: "Arguments for manifest {key} must be a list, got {detail}.",
    FailureKind.TASK_FAILURE: "Manifest {key} failed.",
    FailureKind.TASK_ERROR: "Manifest {key} raised an error: {detail}",
}


def format_keys(keys: Iterable[ManifestKey]) -> str:
    return ", ".join(key.id for key in keys)


def describe_failure(failure: RunFailure) -> str:
    template = _FAILURE_TEMPLATES[failure.kind]
    return template.format(
        key=failure.key.id,
        blocked=format_keys(failure.blocked_by),
        detail=failure.detail or "unknown error",
    )


def describe_step(info: ManifestInfo, status: StepStatus) -> str:
    if status is StepStatus.STARTED:
        return f"Running manifest {info.key.id}..."
    return f"Manifest {info.key.id} completed."


def describe_status(info: ManifestInfo) -> str:
    if info.is_stub:
        state = "missing"
    elif info.applicable:
        state = "ready"
    elif info.blocked_by:
        state = f"blocked by {format_keys(info.blocked_by)}"
    else:
        state = "not applicable"
    weight = "-" if info.weight is None else str(info.weight)
    return f"{weight:>4}  {info.key.id:<40} [{info.component}] {state}"


__all__ = ["describe_failure", "describe_status", "describe_step", "format_keys"]
