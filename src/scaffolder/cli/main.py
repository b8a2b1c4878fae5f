#!/usr/bin/env python3
"""Entry point for the scaffold CLI."""

from __future__ import annotations

import argparse
import json
import shutil
import sys
from collections import deque
from pathlib import Path
from textwrap import dedent

from scaffolder import __version__
from scaffolder.adapters.catalog_sources import resolve_catalog_source
from scaffolder.adapters.console_prompter import ConsolePrompter
from scaffolder.app.acquisition import AcquisitionEngine
from scaffolder.app.command_runner import CommandRunner, CommandWhitelist
from scaffolder.app.installation import InstallationEngine
from scaffolder.app.workflow import BootstrapWorkflow, WorkflowState
from scaffolder.domain.errors import ScaffoldError
from scaffolder.ports.package_cache import PackageCacheFactory
from scaffolder.ports.prompter import Prompter
from scaffolder.settings import SETTINGS, RuntimeSettings
from scaffolder.utils.console import Reporter, default_reporter
from scaffolder.utils.telemetry import clear as telemetry_clear
from scaffolder.utils.telemetry import iter_events as telemetry_iter
from scaffolder.utils.telemetry import summarize as telemetry_summarize
from scaffolder.utils.update_notice import check_for_update

HELP_OVERVIEW = dedent(
    """
    Scaffold a project from a published template.

    Quick start:
      - mkdir my-app && cd my-app
      - scaffold init my-app

    Environment:
      - SCAFFOLDER_HOME      cache/state location (default: ~/.scaffolder)
      - SCAFFOLDER_CATALOG   template catalog file or http(s) URL
      - SCAFFOLDER_REGISTRY  npm registry (default: https://registry.npmjs.org)
      - SCAFFOLDER_UPDATE_URL release index for new-version notices (off when unset)
      - SCAFFOLDER_DEBUG=1   verbose output and tracebacks
    """
)


def _runtime_settings(args: argparse.Namespace) -> RuntimeSettings:
    return SETTINGS.with_debug(SETTINGS.debug or bool(getattr(args, "debug", False)))


def build_workflow(
    settings: RuntimeSettings,
    reporter: Reporter,
    *,
    project_name: str = "",
    force: bool = False,
    target_dir: Path | None = None,
    prompter: Prompter | None = None,
    cache_factory: PackageCacheFactory | None = None,
    runner: CommandRunner | None = None,
) -> BootstrapWorkflow:
    prompter = prompter or ConsolePrompter()
    runner = runner or CommandRunner(CommandWhitelist())
    return BootstrapWorkflow(
        settings,
        catalog_source=resolve_catalog_source(settings),
        prompter=prompter,
        reporter=reporter,
        acquisition=AcquisitionEngine(settings, reporter, cache_factory),
        installation=InstallationEngine(runner, reporter),
        target_dir=target_dir,
        project_name=project_name,
        force=force,
    )


def _init_cmd(args: argparse.Namespace) -> int:
    settings = _runtime_settings(args)
    reporter = default_reporter(settings.debug)
    reporter.verbose("version", settings.cli_version)
    check_for_update(settings, reporter)
    workflow = build_workflow(
        settings,
        reporter,
        project_name=args.project_name or "",
        force=args.force,
    )
    state = workflow.run()
    return 0 if state is WorkflowState.DONE else 1


def _templates_cmd(args: argparse.Namespace) -> int:
    settings = _runtime_settings(args)
    reporter = default_reporter(settings.debug)
    source = resolve_catalog_source(settings)
    try:
        templates = list(source.load())
    except ScaffoldError as exc:
        reporter.exception(exc)
        return 1
    if not templates:
        reporter.error(f"No templates available in {source.describe()}")
        return 1
    for template in templates:
        print(f"{template.name}  {template.package_id}@{template.version}  [{template.kind}]")
    return 0


def _cleanup_cmd(args: argparse.Namespace) -> int:
    settings = _runtime_settings(args)
    reporter = default_reporter(settings.debug)
    template_dir = settings.template_dir
    if not template_dir.exists():
        print("No template cache found.")
        return 0
    try:
        shutil.rmtree(template_dir)
    except OSError as exc:
        reporter.exception(exc, f"Unable to remove template cache {template_dir}: {exc}")
        return 1
    print(f"Removed template cache {template_dir}")
    return 0


def _telemetry_cmd(args: argparse.Namespace) -> int:
    settings = _runtime_settings(args)
    if args.telemetry_command == "report":
        recent = getattr(args, "recent", 0)
        if recent and recent > 0:
            events = list(deque(telemetry_iter(settings), maxlen=recent))
        else:
            events = list(telemetry_iter(settings))
        print(json.dumps(telemetry_summarize(events), indent=2, ensure_ascii=False))
        return 0
    if args.telemetry_command == "clear":
        if telemetry_clear(settings):
            print("Telemetry log cleared")
        else:
            print("No telemetry log found.")
        return 0
    print("Unsupported telemetry command", file=sys.stderr)
    return 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scaffold",
        description=HELP_OVERVIEW,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"scaffold {__version__}")
    parser.add_argument("-d", "--debug", action="store_true", help="Verbose output and tracebacks")

    sub = parser.add_subparsers(dest="command", required=True)

    init_cmd = sub.add_parser("init", help="Create a project from a template in the current directory")
    init_cmd.add_argument("project_name", nargs="?", help="Project name (prompted when missing or invalid)")
    init_cmd.add_argument("-f", "--force", action="store_true", help="Skip the non-empty directory confirmation")
    init_cmd.set_defaults(func=_init_cmd)

    templates_cmd = sub.add_parser("templates", help="List available templates")
    templates_cmd.set_defaults(func=_templates_cmd)

    cleanup_cmd = sub.add_parser("cleanup", help="Remove the local template cache")
    cleanup_cmd.set_defaults(func=_cleanup_cmd)

    telemetry_cmd = sub.add_parser("telemetry", help="Inspect local telemetry logs")
    telemetry_sub = telemetry_cmd.add_subparsers(dest="telemetry_command", required=True)
    telemetry_report = telemetry_sub.add_parser("report", help="Print aggregated telemetry stats")
    telemetry_report.add_argument("--recent", type=int, default=0, help="Only summarise the last N events")
    telemetry_report.set_defaults(func=_telemetry_cmd)
    telemetry_clear_cmd = telemetry_sub.add_parser("clear", help="Remove the telemetry log")
    telemetry_clear_cmd.set_defaults(func=_telemetry_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
