"""CLI entrypoints for witpack commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, WitpackConfig, load_config
from .errors import WitpackError
from .logging import configure_logging
from .models import OUTCOME_FAILED, OUTCOME_OK, OUTCOME_SKIPPED, BatchResult
from .pipelines import (
    PackagePipeline,
    Pipeline,
    PublishPipeline,
    StagePipeline,
    ValidatePipeline,
)
from .report import write_report


def _add_common_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    def default(value: object) -> object:
        return argparse.SUPPRESS if suppress_default else value

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default(False),
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--root",
        default=default("."),
        help="Project root holding wit/ and .witpack.yml (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        default=default(None),
        help="Also write a DEBUG-level log of the run to this file.",
    )
    parser.add_argument(
        "--report",
        default=default(None),
        help="Write a JSON report of the batch to this path.",
    )


def _add_out_dir_option(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument("--out-dir", default=None, help=help_text)


def _add_dry_run_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the actions that would be taken without building, logging in or pushing.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="witpack",
        description="Stage, package, validate and publish WIT interface packages.",
    )
    _add_common_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    package_parser = subparsers.add_parser(
        "package",
        help="Build a binary package for every WIT source (honours DRY_RUN=1).",
    )
    _add_common_options(package_parser, suppress_default=True)
    _add_out_dir_option(package_parser, "Directory receiving the .wasm artifacts.")
    _add_dry_run_option(package_parser)

    validate_parser = subparsers.add_parser(
        "validate",
        help="Check every WIT source with wit-bindgen and wasm-tools.",
    )
    _add_common_options(validate_parser, suppress_default=True)

    publish_parser = subparsers.add_parser(
        "publish",
        help="Build and push all WIT packages to an OCI registry.",
        description=(
            "Requires GHCR_USER (registry account) and GHCR_TOKEN "
            "(token with write:packages) in the environment."
        ),
    )
    _add_common_options(publish_parser, suppress_default=True)
    _add_out_dir_option(publish_parser, "Directory holding the .wasm artifacts.")
    publish_parser.add_argument(
        "--registry",
        default=None,
        help="Registry host to push to (defaults to ghcr.io).",
    )
    _add_dry_run_option(publish_parser)
    publish_parser.add_argument(
        "--skip-package",
        action="store_true",
        help="Reuse previously built artifacts instead of packaging first.",
    )

    stage_parser = subparsers.add_parser(
        "stage",
        help="Write staged package trees (package.wit + deps/) for every WIT source.",
    )
    _add_common_options(stage_parser, suppress_default=True)
    _add_out_dir_option(stage_parser, "Directory receiving the staged trees.")
    _add_dry_run_option(stage_parser)

    return parser


def _apply_overrides(config: WitpackConfig, args: argparse.Namespace) -> None:
    out_dir = getattr(args, "out_dir", None)
    if out_dir:
        resolved = Path(out_dir).expanduser().resolve()
        if args.command == "stage":
            config.staging_dir = resolved
        else:
            config.out_dir = resolved
    registry = getattr(args, "registry", None)
    if registry:
        config.publish.registry = registry
    if getattr(args, "dry_run", False):
        config.dry_run = True


def _build_pipeline(config: WitpackConfig, args: argparse.Namespace) -> Pipeline:
    if args.command == "package":
        return PackagePipeline(config)
    if args.command == "validate":
        return ValidatePipeline(config)
    if args.command == "publish":
        return PublishPipeline(config, skip_package=bool(getattr(args, "skip_package", False)))
    if args.command == "stage":
        return StagePipeline(config)
    raise ValueError(f"Unknown command: {args.command}")  # pragma: no cover - argparse enforces choices


def _summary(result: BatchResult) -> str:
    return (
        f"{result.pipeline}: {result.count(OUTCOME_OK)} ok, "
        f"{result.count(OUTCOME_SKIPPED)} skipped, {result.count(OUTCOME_FAILED)} failed"
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for witpack commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file).expanduser() if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    try:
        config = load_config(Path(args.root))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")
    _apply_overrides(config, args)

    pipeline = _build_pipeline(config, args)
    try:
        result = pipeline.run()
    except WitpackError as exc:
        parser.exit(1, f"{exc}\n")

    if args.report:
        write_report(result, Path(args.report).expanduser())

    if result.outcomes:
        print(_summary(result))
    if result.failed:
        parser.exit(1, f"witpack {args.command} failed; see errors above.\n")


if __name__ == "__main__":
    main(sys.argv[1:])
