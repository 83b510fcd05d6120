"""Tests for the YAML-backed FileProvider."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from manifestrun.models import ManifestKey, ResourceRef
from manifestrun.providers import FileProvider, ProviderError


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
    return path


def test_file_provider_reads_declarations(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write(
        tmp_path / "mr_site_tasks.py",
        """
        def enable_cache(ttl):
            return ttl > 0
        """,
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    path = _write(
        tmp_path / "manifests" / "site.manifests.yml",
        """
        manifests:
          enable_cache:
            task: mr_site_tasks:enable_cache
            dependencies:
              - [core, schema]
              - {provider: core, name: users}
            resource: {file: helpers.py, base_path: install}
            arguments: [30]
        """,
    )

    provider = FileProvider(path)
    declarations = provider.discover()

    assert provider.provider_id == "site"
    assert provider.base_path == path.resolve().parent
    declaration = declarations["enable_cache"]
    assert declaration.task(30) is True
    assert declaration.dependencies == [ManifestKey("core", "schema"), ManifestKey("core", "users")]
    assert declaration.resource == ResourceRef(file="helpers.py", base_path=path.resolve().parent / "install")
    assert declaration.arguments == [30]


def test_file_provider_honours_explicit_provider_id(tmp_path: Path) -> None:
    path = _write(tmp_path / "anything.manifests.yml", "provider: core\nmanifests: {}\n")

    provider = FileProvider(path)

    assert provider.provider_id == "core"
    assert provider.discover() == {}


def test_file_provider_keeps_unbindable_task_reference(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "site.manifests.yml",
        """
        manifests:
          broken:
            task: mr_no_such_module:run
          malformed:
            task: not-a-reference
        """,
    )

    declarations = FileProvider(path).discover()

    assert declarations["broken"].task == "mr_no_such_module:run"
    assert declarations["malformed"].task == "not-a-reference"


def test_file_provider_rejects_invalid_files(tmp_path: Path) -> None:
    not_mapping = _write(tmp_path / "a.manifests.yml", "- one\n")
    bad_manifests = _write(tmp_path / "b.manifests.yml", "manifests: [one]\n")
    bad_dependency = _write(
        tmp_path / "c.manifests.yml",
        "manifests:\n  x:\n    dependencies: [core-schema]\n",
    )

    with pytest.raises(ProviderError):
        FileProvider(not_mapping)
    with pytest.raises(ProviderError):
        FileProvider(bad_manifests).discover()
    with pytest.raises(ProviderError):
        FileProvider(bad_dependency).discover()
