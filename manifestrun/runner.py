"""Fail-fast execution of resolved manifests."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from .logging import get_logger
from .models import FailureKind, ManifestInfo, ManifestKey, RunFailure, RunOutcome, StepStatus
from .resources import ResourceLoader

ProgressCallback = Callable[[ManifestInfo, StepStatus], None]


class Runner:
    """Walks manifests in weight order and stops at the first failure."""

    def __init__(self, resource_loader: ResourceLoader | None = None) -> None:
        self.resource_loader = resource_loader or ResourceLoader()
        self.logger = get_logger("runner")

    def run(
        self,
        ordered: Sequence[ManifestInfo],
        progress: Optional[ProgressCallback] = None,
    ) -> RunOutcome:
        completed: List[ManifestKey] = []
        for info in ordered:
            failure = self._check_applicable(info)
            if failure is None:
                if progress is not None:
                    progress(info, StepStatus.STARTED)
                failure = self._execute(info)
            if failure is not None:
                self.logger.debug("Aborting run at %s (%s)", info.key, failure.kind.value)
                return RunOutcome(success=False, completed=completed, failure=failure)
            completed.append(info.key)
            if progress is not None:
                progress(info, StepStatus.SUCCEEDED)
        return RunOutcome(success=True, completed=completed)

    @staticmethod
    def _check_applicable(info: ManifestInfo) -> Optional[RunFailure]:
        if info.applicable:
            return None
        if info.is_stub:
            return RunFailure(kind=FailureKind.MISSING_MANIFEST, key=info.key)
        if info.blocked_by:
            return RunFailure(
                kind=FailureKind.UNRESOLVED_DEPENDENCY,
                key=info.key,
                blocked_by=list(info.blocked_by),
            )
        return RunFailure(kind=FailureKind.INAPPLICABLE, key=info.key)

    def _execute(self, info: ManifestInfo) -> Optional[RunFailure]:
        if info.resource is not None:
            try:
                self.resource_loader.load(info)
            except Exception as exc:
                self.logger.debug("Resource load failed for %s", info.key, exc_info=True)
                return RunFailure(
                    kind=FailureKind.RESOURCE_LOAD_FAILURE, key=info.key, detail=str(exc)
                )

        task = info.task
        if task is None:
            return RunFailure(kind=FailureKind.MISSING_TASK, key=info.key)
        if not callable(task):
            return RunFailure(kind=FailureKind.INVALID_TASK, key=info.key, detail=repr(task))

        arguments = info.arguments
        if arguments is None:
            arguments = ()
        elif not isinstance(arguments, (list, tuple)):
            return RunFailure(
                kind=FailureKind.INVALID_ARGUMENTS,
                key=info.key,
                detail=type(arguments).__name__,
            )

        self.logger.debug("Running %s", info.key)
        try:
            result = task(*arguments)
        except Exception as exc:
            self.logger.exception("Task for %s raised", info.key)
            return RunFailure(kind=FailureKind.TASK_ERROR, key=info.key, detail=str(exc))

        # Only an explicit falsy result fails; returning nothing counts as success.
        if result is not None and not result:
            return RunFailure(kind=FailureKind.TASK_FAILURE, key=info.key, detail=repr(result))
        return None


__all__ = ["ProgressCallback", "Runner"]
