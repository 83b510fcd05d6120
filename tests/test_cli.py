"""CLI behaviour tests."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from manifestrun.cli import _build_parser, main


def _no_entry_points(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("manifestrun.providers._iter_entry_points", lambda: [])


def _seed_project(root: Path, monkeypatch: pytest.MonkeyPatch, *, fail_second: bool = False) -> Path:
    (root / "manifests").mkdir(parents=True)
    module = f"mr_cli_tasks_{'fail' if fail_second else 'ok'}"
    (root / f"{module}.py").write_text(
        textwrap.dedent(
            f"""
            def first():
                return True

            def second():
                return {not fail_second}
            """
        ),
        encoding="utf-8",
    )
    (root / "manifests" / "site.manifests.yml").write_text(
        textwrap.dedent(
            f"""
            manifests:
              second:
                task: {module}:second
                dependencies: [[site, first]]
              first:
                task: {module}:first
            """
        ),
        encoding="utf-8",
    )
    (root / ".manifestrun.yml").write_text("providers:\n  paths: [manifests]\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(root))
    _no_entry_points(monkeypatch)
    return root


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "run"])
    assert args.verbose is True
    assert args.command == "run"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["run", "--verbose"])
    assert args.verbose is True


def test_cli_accepts_short_aliases() -> None:
    parser = _build_parser()
    assert parser.parse_args(["r"]).command == "r"
    assert parser.parse_args(["s"]).command == "s"


def test_cli_run_prints_progress_and_success(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _seed_project(tmp_path / "project", monkeypatch)

    main(["--config", str(root), "run"])

    output = capsys.readouterr().out.splitlines()
    assert output == [
        "Running manifest site-first...",
        "Manifest site-first completed.",
        "Running manifest site-second...",
        "Manifest site-second completed.",
        "All 2 manifests completed successfully.",
    ]


def test_cli_run_exits_on_first_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _seed_project(tmp_path / "project", monkeypatch, fail_second=True)

    with pytest.raises(SystemExit) as excinfo:
        main(["-c", str(root), "r"])

    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert "Manifest site-second failed." in captured.err
    assert "completed successfully" not in captured.out


def test_cli_status_lists_missing_manifests(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _no_entry_points(monkeypatch)
    (tmp_path / "site.manifests.yml").write_text(
        "manifests:\n  C:\n    dependencies: [[providerY, Z]]\n",
        encoding="utf-8",
    )
    (tmp_path / ".manifestrun.yml").write_text("providers:\n  paths: ['.']\n", encoding="utf-8")

    main(["-c", str(tmp_path), "status"])

    output = capsys.readouterr().out
    assert "providerY-Z" in output
    assert "missing" in output
    assert "blocked by providerY-Z" in output


def test_cli_reports_dependency_cycles(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _no_entry_points(monkeypatch)
    (tmp_path / "site.manifests.yml").write_text(
        "manifests:\n  A:\n    dependencies: [[site, B]]\n  B:\n    dependencies: [[site, A]]\n",
        encoding="utf-8",
    )
    (tmp_path / ".manifestrun.yml").write_text("providers:\n  paths: ['.']\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["-c", str(tmp_path), "run"])

    assert excinfo.value.code == 1
    assert "Dependency cycle" in capsys.readouterr().err


def test_cli_log_file_records_debug_output(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    root = _seed_project(tmp_path / "project", monkeypatch)
    log_file = tmp_path / "logs" / "manifestrun.log"

    main(["--log-file", str(log_file), "-c", str(root), "run"])

    contents = log_file.read_text(encoding="utf-8")
    assert "manifestrun.orchestrator: Collected 2 manifests" in contents
    assert "Resolved 2 manifests (0 missing)" in contents
    assert "Completed 2 manifests" in contents
    captured = capsys.readouterr()
    assert "Collected 2 manifests" not in captured.err
    assert captured.out.splitlines()[-1] == "All 2 manifests completed successfully."


def test_cli_log_file_appends_across_invocations(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    root = _seed_project(tmp_path / "project", monkeypatch)
    log_file = tmp_path / "manifestrun.log"

    main(["--log-file", str(log_file), "-c", str(root), "status"])
    main(["--log-file", str(log_file), "-c", str(root), "status"])

    assert log_file.read_text(encoding="utf-8").count("Resolved 2 manifests") == 2
