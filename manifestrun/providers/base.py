"""Base classes for manifest providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, MutableMapping, Optional, Union

from ..models import ManifestDeclaration, ManifestInfo, ManifestKey

Declarations = Mapping[str, Union[ManifestDeclaration, Mapping[str, Any]]]


class ProviderError(RuntimeError):
    """Raised when a provider cannot be registered or fails during discovery."""


class Provider(ABC):
    """Contract for contributors of manifest declarations."""

    provider_id: str = ""
    base_path: Optional[Path] = None

    @abstractmethod
    def discover(self) -> Declarations:
        """Return manifest declarations keyed by manifest name."""

    def alter(self, manifests: MutableMapping[ManifestKey, ManifestInfo]) -> None:
        """Inspect or adjust the resolved mapping before it is cached."""
        return None


class ProviderRegistry:
    """Ordered collection of providers keyed by provider id."""

    def __init__(self) -> None:
        self._providers: Dict[str, Provider] = {}

    def register(self, provider: Provider) -> Provider:
        if not isinstance(provider, Provider):
            raise TypeError(f"{provider!r} is not a Provider instance")
        if not provider.provider_id:
            raise ProviderError(f"{provider.__class__.__name__} has no provider_id")
        if provider.provider_id in self._providers:
            raise ProviderError(f"Provider '{provider.provider_id}' is already registered")
        self._providers[provider.provider_id] = provider
        return provider

    def get(self, provider_id: str) -> Optional[Provider]:
        return self._providers.get(provider_id)

    def ids(self) -> List[str]:
        return list(self._providers)

    def __iter__(self) -> Iterator[Provider]:
        return iter(list(self._providers.values()))

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._providers
