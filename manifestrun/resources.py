"""Locate and load code resources that manifests declare."""

from __future__ import annotations

import hashlib
import importlib.util
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import Dict, Mapping, Optional

from .logging import get_logger
from .models import ManifestInfo

_MODULE_PREFIX = "_manifestrun_resource"
_UNSAFE_CHARS = re.compile(r"[^0-9A-Za-z_]")


class ResourceNotFoundError(FileNotFoundError):
    """Raised when a declared resource file does not exist."""


class ResourceLoader:
    """Resolves resource locations and imports each resource at most once per process."""

    def __init__(
        self,
        default_dirs: Optional[Mapping[str, Path]] = None,
        default_subdir: Optional[str] = None,
        root: Optional[Path] = None,
    ) -> None:
        self._default_dirs: Dict[str, Path] = dict(default_dirs or {})
        self._root = Path(root) if root is not None else Path.cwd()
        self._default_subdir = default_subdir
        self.logger = get_logger("resources")

    def set_default_dir(self, provider: str, path: Path) -> None:
        self._default_dirs[provider] = Path(path)

    def locate(self, info: ManifestInfo) -> Path:
        resource = info.resource
        if resource is None:
            raise ValueError(f"Manifest {info.key} declares no resource")
        if resource.base_path is not None:
            base = self._root / resource.base_path
        else:
            base = self._default_dirs.get(info.provider, self._root)
            if self._default_subdir:
                base = base / self._default_subdir
        return (base / resource.file).resolve()

    def load(self, info: ManifestInfo) -> ModuleType:
        path = self.locate(info)
        module_name = self._module_name(info.provider, path)
        loaded = sys.modules.get(module_name)
        if loaded is not None:
            self.logger.debug("Resource %s already loaded", path)
            return loaded
        if not path.is_file():
            raise ResourceNotFoundError(f"Resource {path} for {info.key} not found")

        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ResourceNotFoundError(f"Resource {path} for {info.key} cannot be imported")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        self.logger.debug("Loaded resource %s as %s", path, module_name)
        return module

    @staticmethod
    def _module_name(provider: str, path: Path) -> str:
        digest = hashlib.sha256(str(path).encode("utf-8")).hexdigest()[:12]
        stem = _UNSAFE_CHARS.sub("_", f"{provider}_{path.stem}")
        return f"{_MODULE_PREFIX}_{stem}_{digest}"


__all__ = ["ResourceLoader", "ResourceNotFoundError"]
