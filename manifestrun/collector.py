"""Gather manifest declarations from every registered provider."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping

from .logging import get_logger
from .models import ManifestDeclaration, ManifestInfo, ManifestKey
from .providers.base import Provider, ProviderError

logger = get_logger("collector")


def collect(providers: Iterable[Provider]) -> Dict[ManifestKey, ManifestInfo]:
    """Merge provider declarations into one mapping keyed by ManifestKey.

    Providers are visited in iteration order. When two declarations share a key
    the later one replaces the earlier one (last write wins) and a warning is
    logged.
    """
    collected: Dict[ManifestKey, ManifestInfo] = {}
    for provider in providers:
        try:
            declarations = provider.discover() or {}
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderError(
                f"Provider '{provider.provider_id}' failed during discovery: {exc}"
            ) from exc

        logger.debug("Provider %s declared %d manifests", provider.provider_id, len(declarations))
        for name, raw in declarations.items():
            declaration = _as_declaration(provider, name, raw)
            key = ManifestKey(provider.provider_id, str(name))
            if key in collected:
                logger.warning("Manifest %s declared more than once; keeping the last declaration", key)
                del collected[key]
            collected[key] = ManifestInfo(
                provider=key.provider,
                name=key.name,
                task=declaration.task,
                resource=declaration.resource,
                dependencies=list(declaration.dependencies),
                arguments=declaration.arguments,
            )
    return collected


def _as_declaration(provider: Provider, name: str, raw: object) -> ManifestDeclaration:
    if isinstance(raw, ManifestDeclaration):
        return raw
    if isinstance(raw, Mapping):
        try:
            return ManifestDeclaration.from_mapping(raw)
        except ValueError as exc:
            raise ProviderError(
                f"Provider '{provider.provider_id}' manifest '{name}': {exc}"
            ) from exc
    raise ProviderError(
        f"Provider '{provider.provider_id}' returned an invalid declaration for '{name}'"
    )


__all__ = ["collect"]
