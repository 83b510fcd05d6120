"""Configuration loading for manifestrun (.manifestrun.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".manifestrun.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ProviderConfig:
    """Provider enablement and manifest file search paths."""

    enabled: List[str] = field(default_factory=list)
    paths: List[Path] = field(default_factory=list)


@dataclass
class ResourceConfig:
    """Where resources are looked up when a manifest gives no base path."""

    default_dir: Optional[str] = None


@dataclass
class ManifestRunConfig:
    """Represents the settings defined in .manifestrun.yml."""

    root: Path
    providers: ProviderConfig = field(default_factory=ProviderConfig)
    resources: ResourceConfig = field(default_factory=ResourceConfig)


def load_config(config_path: Path) -> ManifestRunConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ManifestRunConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    providers = ProviderConfig()
    provider_data = _as_dict(data.get("providers"))
    if provider_data:
        providers.enabled = _as_str_list(provider_data.get("enabled"))
        providers.paths = [root / entry for entry in _as_str_list(provider_data.get("paths"))]

    resources = ResourceConfig()
    resource_data = _as_dict(data.get("resources"))
    if resource_data:
        resources.default_dir = _as_str(resource_data.get("default_dir"))

    return ManifestRunConfig(root=root, providers=providers, resources=resources)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
