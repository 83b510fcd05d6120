"""Provider registry and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from pathlib import Path
from typing import Iterable, Sequence, Set

from .base import Declarations, Provider, ProviderError, ProviderRegistry
from .files import MANIFEST_FILE_SUFFIX, FileProvider
from ..logging import get_logger

_ENTRY_POINT_GROUP = "manifestrun.providers"

logger = get_logger("providers")


def discover_providers(
    enabled: Sequence[str] | None = None,
    search_paths: Iterable[Path] = (),
) -> ProviderRegistry:
    """Return a registry of providers, honoring optional enabled provider ids.

    With an enabled filter, entry points are matched by name before they are
    loaded, so a broken provider that is not enabled never runs.
    """

    wanted: Set[str] | None = set(enabled) if enabled else None
    registry = ProviderRegistry()

    def _add(provider: Provider) -> None:
        if wanted is not None and provider.provider_id not in wanted:
            return
        registry.register(provider)

    for entry in _iter_entry_points():
        if wanted is not None and entry.name not in wanted:
            continue
        try:
            loaded = entry.load()
        except Exception as exc:
            raise ProviderError(f"Failed to load provider entry point '{entry.name}': {exc}") from exc
        provider = _coerce_provider(loaded)
        if not provider.provider_id:
            provider.provider_id = entry.name
        _add(provider)

    for directory in search_paths:
        directory = Path(directory)
        if not directory.is_dir():
            continue
        for path in sorted(directory.rglob(f"*{MANIFEST_FILE_SUFFIX}")):
            implied_id = path.name.removesuffix(MANIFEST_FILE_SUFFIX)
            try:
                provider = FileProvider(path)
            except ProviderError as exc:
                if wanted is None or implied_id in wanted:
                    raise
                # The file may still declare an enabled id; it cannot be read, so skip it.
                logger.warning("Skipping unreadable manifest file %s: %s", path, exc)
                continue
            _add(provider)

    if wanted is not None:
        missing = wanted.difference(registry.ids())
        if missing:
            raise ValueError(f"Unknown providers requested: {', '.join(sorted(missing))}")

    return registry


def _coerce_provider(obj: object) -> Provider:
    if isinstance(obj, Provider):
        return obj
    if isinstance(obj, type) and issubclass(obj, Provider):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Provider):
            return instance
    raise TypeError("Provider entry point must be a Provider subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "Declarations",
    "FileProvider",
    "Provider",
    "ProviderError",
    "ProviderRegistry",
    "discover_providers",
]
