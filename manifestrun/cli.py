"""CLI entrypoints for manifestrun commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .graph import DependencyCycleError
from .logging import configure_logging
from .messages import describe_failure, describe_status, describe_step
from .models import ManifestInfo, StepStatus
from .orchestrator import Orchestrator
from .providers import ProviderError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="manifestrun",
        description="Resolve provider manifests and run them in dependency order.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-c",
        "--config",
        default=".",
        help="Path to .manifestrun.yml or the directory containing it (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Append a DEBUG-level log of the invocation to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run",
        aliases=["r"],
        help="Run every manifest in dependency order, stopping at the first failure.",
    )
    _add_verbose_option(run_parser, suppress_default=True)

    status_parser = subparsers.add_parser(
        "status",
        aliases=["s"],
        help="Show the resolved order and whether each manifest can run.",
    )
    _add_verbose_option(status_parser, suppress_default=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for manifestrun commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    try:
        orchestrator = Orchestrator(config=load_config(Path(args.config)))
        context = orchestrator.resolve()
    except DependencyCycleError as exc:
        parser.exit(1, f"{exc}\nBreak the cycle before running manifests.\n")
    except (ConfigError, ProviderError, ValueError) as exc:
        parser.exit(1, f"manifestrun failed: {exc}\nRun with --verbose for more details.\n")

    if args.command in ("run", "r"):
        outcome = orchestrator.run(progress=_print_step)
        if not outcome.success and outcome.failure is not None:
            parser.exit(1, f"{describe_failure(outcome.failure)}\n")
        print(f"All {len(outcome.completed)} manifests completed successfully.")
    elif args.command in ("status", "s"):
        if not context.order:
            print("No manifests declared.")
        for info in context.order:
            print(describe_status(info))
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _print_step(info: ManifestInfo, status: StepStatus) -> None:
    print(describe_step(info, status))


if __name__ == "__main__":
    main(sys.argv[1:])
