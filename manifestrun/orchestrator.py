"""Pipeline orchestration: collect, resolve, mark, alter, then run."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .applicability import mark
from .collector import collect
from .config import ManifestRunConfig, load_config
from .graph import build_graph, resolve
from .logging import get_logger
from .models import ManifestInfo, ManifestKey, RunOutcome
from .providers import ProviderRegistry, discover_providers
from .resources import ResourceLoader
from .runner import ProgressCallback, Runner


@dataclass
class ResolutionContext:
    """Resolved manifests shared by every consumer of one orchestrator."""

    vertices: Dict[ManifestKey, ManifestInfo]
    order: List[ManifestInfo]


class Orchestrator:
    """Computes the resolution once and hands it to the runner."""

    def __init__(
        self,
        providers: ProviderRegistry | None = None,
        config: ManifestRunConfig | None = None,
        resource_loader: ResourceLoader | None = None,
    ) -> None:
        self.config = config or load_config(Path.cwd())
        self.providers = providers if providers is not None else discover_providers(
            self.config.providers.enabled or None,
            self.config.providers.paths,
        )
        self.resource_loader = resource_loader or ResourceLoader(
            default_subdir=self.config.resources.default_dir,
            root=self.config.root,
        )
        for provider in self.providers:
            if provider.base_path is not None:
                self.resource_loader.set_default_dir(provider.provider_id, provider.base_path)
        self.logger = get_logger("orchestrator")
        self._context: Optional[ResolutionContext] = None

    def resolve(self) -> ResolutionContext:
        """Return the cached resolution, computing it on first use."""
        if self._context is not None:
            return self._context

        collected = collect(self.providers)
        self.logger.debug("Collected %d manifests", len(collected))
        graph = mark(resolve(build_graph(collected)))

        for provider in self.providers:
            provider.alter(graph.vertices)

        self._context = ResolutionContext(vertices=graph.vertices, order=graph.ordered())
        self.logger.info(
            "Resolved %d manifests (%d missing)",
            len(self._context.order),
            sum(1 for info in self._context.order if info.is_stub),
        )
        return self._context

    def status(self) -> List[ManifestInfo]:
        return list(self.resolve().order)

    def run(self, progress: Optional[ProgressCallback] = None) -> RunOutcome:
        context = self.resolve()
        runner = Runner(self.resource_loader)
        outcome = runner.run(context.order, progress=progress)
        if outcome.success:
            self.logger.info("Completed %d manifests", len(outcome.completed))
        return outcome


__all__ = ["Orchestrator", "ResolutionContext"]
