"""Provider backed by a ``*.manifests.yml`` declaration file."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from .base import Provider, ProviderError
from ..logging import get_logger
from ..models import ManifestDeclaration, ResourceRef

MANIFEST_FILE_SUFFIX = ".manifests.yml"

logger = get_logger("providers.files")


class FileProvider(Provider):
    """Reads manifest declarations from YAML and binds task references to callables."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).resolve()
        self.base_path = self.path.parent
        self._data = self._read()
        provider_id = self._data.get("provider")
        if provider_id is None:
            provider_id = self.path.name.removesuffix(MANIFEST_FILE_SUFFIX)
        self.provider_id = str(provider_id)

    def discover(self) -> Dict[str, ManifestDeclaration]:
        manifests = self._data.get("manifests") or {}
        if not isinstance(manifests, Mapping):
            raise ProviderError(f"{self.path.name}: 'manifests' must be a mapping")

        declarations: Dict[str, ManifestDeclaration] = {}
        for name, raw in manifests.items():
            entry = dict(raw) if isinstance(raw, Mapping) else {}
            try:
                declaration = ManifestDeclaration.from_mapping(entry)
            except ValueError as exc:
                raise ProviderError(f"{self.path.name}: manifest '{name}': {exc}") from exc
            if isinstance(declaration.task, str):
                declaration.task = _bind_task(declaration.task)
            resource = declaration.resource
            if resource is not None and resource.base_path is not None:
                if not resource.base_path.is_absolute():
                    declaration.resource = ResourceRef(
                        file=resource.file,
                        base_path=self.base_path / resource.base_path,
                    )
            declarations[str(name)] = declaration
        return declarations

    def _read(self) -> Dict[str, Any]:
        try:
            loaded = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ProviderError(f"Failed to read {self.path}: {exc}") from exc
        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise ProviderError(f"{self.path.name} must contain a mapping at the root")
        return loaded


def _bind_task(reference: str) -> Any:
    """Resolve ``module:attribute`` to a callable, keeping the string when it cannot be bound."""
    module_name, sep, attribute = reference.partition(":")
    if not sep or not module_name or not attribute:
        logger.warning("Task reference '%s' is not of the form module:attribute", reference)
        return reference
    try:
        target: Any = importlib.import_module(module_name)
        for part in attribute.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as exc:
        logger.warning("Could not bind task '%s': %s", reference, exc)
        return reference
    return target


__all__ = ["FileProvider", "MANIFEST_FILE_SUFFIX"]
