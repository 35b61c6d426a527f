"""Command-line entry points.

``sn-update-deps``
    Patch ``package.json`` with the ServiceNow dependencies (and optionally
    run ``npm install``).

``sn-scaffold``
    Create a ServiceNow TypeScript project skeleton.
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from sn_devkit.config import Config, ScaffoldConfig, split_csv
from sn_devkit.patcher import DependencyPatcher, PatchError
from sn_devkit.scaffolder import ProjectScaffolder
from sn_devkit.utils import Reporter


def _load_config(path: Optional[str], reporter: Reporter) -> Optional[Config]:
    """Load ``--config`` (if any) and overlay ``SN_*`` environment variables."""
    try:
        base = Config.load(Path(path)) if path else None
        return Config.from_env(base)
    except OSError as exc:
        reporter.error(f"Error: cannot read config file {path}: {exc}")
    except (ValidationError, ValueError) as exc:
        reporter.error(f"Error: invalid configuration: {exc}")
    return None


# ---------------------------------------------------------------------------
# sn-update-deps
# ---------------------------------------------------------------------------


def build_update_deps_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sn-update-deps",
        description=(
            "Updates package.json with ServiceNow dependencies:\n"
            "  - Updates @servicenow/glide to use git repository\n"
            "  - Adds sn-sdk-mock dependency"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  sn-update-deps --install    # Update and install dependencies\n"
            "  sn-update-deps              # Update only (manual npm install required)\n"
        ),
    )
    parser.add_argument(
        "--install", "-i",
        action="store_true",
        help="Install dependencies after updating package.json",
    )
    parser.add_argument(
        "--manifest", "-m",
        default=None,
        help="Manifest to patch (default: ./package.json)",
    )
    parser.add_argument(
        "--editor",
        choices=["builtin", "jq"],
        default=None,
        help="JSON editing backend (default: builtin)",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="JSON configuration file",
    )
    return parser


def update_deps_main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for ``sn-update-deps``; returns the exit code."""
    args = build_update_deps_parser().parse_args(argv)
    reporter = Reporter()

    config = _load_config(args.config, reporter)
    if config is None:
        return 1

    patcher_config = config.patcher
    if args.editor:
        patcher_config = patcher_config.model_copy(update={"editor": args.editor})

    patcher = DependencyPatcher(patcher_config, reporter)
    try:
        return asyncio.run(patcher.run(args.manifest, install=args.install))
    except PatchError as exc:
        reporter.error(str(exc))
        for line in exc.hint:
            reporter.info(line)
        return 1


# ---------------------------------------------------------------------------
# sn-scaffold
# ---------------------------------------------------------------------------


def build_scaffold_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sn-scaffold",
        description="Create a ServiceNow TypeScript project skeleton",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  sn-scaffold\n"
            "  sn-scaffold --name my-app --files package.json,tsconfig.json\n"
        ),
    )
    parser.add_argument(
        "--name", "-n",
        default=None,
        help="Project name (default: sn-dev-project)",
    )
    parser.add_argument(
        "--node-version",
        default=None,
        help="Node.js version written to .node-version (default: 22.16.0)",
    )
    parser.add_argument(
        "--files",
        default=None,
        help="Comma-separated files to scaffold "
        "(default: package.json,tsconfig.json,.eslintrc.js,.gitignore)",
    )
    parser.add_argument(
        "--output", "-o",
        default=".",
        help="Directory in which the project folder is created (default: .)",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="JSON configuration file",
    )
    return parser


def scaffold_main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for ``sn-scaffold``; returns the exit code."""
    args = build_scaffold_parser().parse_args(argv)
    reporter = Reporter()

    config = _load_config(args.config, reporter)
    if config is None:
        return 1

    overrides: dict[str, object] = {}
    if args.name:
        overrides["project_name"] = args.name
    if args.node_version:
        overrides["node_version"] = args.node_version
    if args.files is not None:
        overrides["files"] = split_csv(args.files)

    try:
        scaffold_config = ScaffoldConfig.model_validate(
            {**config.scaffold.model_dump(), **overrides}
        )
    except ValidationError as exc:
        reporter.error(f"Error: {exc}")
        return 1

    scaffolder = ProjectScaffolder(scaffold_config, config.patcher.rules, reporter)
    try:
        result = asyncio.run(scaffolder.scaffold(args.output))
    except OSError as exc:
        reporter.error(f"Error: scaffolding failed: {exc}")
        return 1

    scaffolder.print_next_steps(result)
    return 0
