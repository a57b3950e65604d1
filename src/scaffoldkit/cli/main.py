#!/usr/bin/env python3
"""Entry point for the scaffold CLI."""

from __future__ import annotations

import argparse
import json
import os
import sys
import traceback
from pathlib import Path
from textwrap import dedent

from scaffoldkit import __version__
from scaffoldkit.adapters.console_prompter import ConsolePrompter
from scaffoldkit.adapters.http_registry import HTTPTemplateRegistry
from scaffoldkit.adapters.npm_store import NpmPackageStore
from scaffoldkit.app.init_service import InitOptions, InitService
from scaffoldkit.app.package_cache import PackageCache
from scaffoldkit.app.resolver import filter_templates
from scaffoldkit.domain.errors import ScaffoldError
from scaffoldkit.domain.project import InitType
from scaffoldkit.ports.prompter import Prompter
from scaffoldkit.settings import SETTINGS, RuntimeSettings, load_settings
from scaffoldkit.utils import telemetry
from scaffoldkit.utils.telemetry import RUN_EVENT, RunLog

HELP_OVERVIEW = dedent(
    """
    Scaffold projects and components from registry templates.

      scaffold init                 - pick a template and populate the current directory
      scaffold templates            - list templates published in the catalog
      scaffold cache list           - list template packages cached locally

    Configuration lives in ~/.scaffoldkit/config.yaml (catalog_url, npm_registry,
    install_command); SCAFFOLDKIT_HOME moves the whole home directory.
    """
)


def _default_target_path(path_arg: str | None) -> Path:
    if path_arg:
        return Path(path_arg).expanduser().resolve()
    return Path(os.getcwd())


def _resolve_settings(args: argparse.Namespace) -> RuntimeSettings:
    home = getattr(args, "cli_home", None)
    if home:
        return load_settings(Path(home))
    return SETTINGS


def _build_registry(settings: RuntimeSettings) -> HTTPTemplateRegistry:
    return HTTPTemplateRegistry(settings.catalog_url, timeout=settings.request_timeout)


def _build_cache(settings: RuntimeSettings) -> PackageCache:
    store = NpmPackageStore(settings.npm_registry)
    return PackageCache(store, settings.template_cache_dir)


def _build_prompter() -> Prompter:
    return ConsolePrompter()


def _report_error(exc: BaseException, *, debug: bool) -> None:
    if debug:
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
    else:
        print(f"scaffold: {exc}", file=sys.stderr)


def _init_cmd(args: argparse.Namespace) -> int:
    settings = _resolve_settings(args)
    target = _default_target_path(args.target_path)
    run_log = RunLog(settings)
    service = InitService(
        _build_registry(settings),
        _build_cache(settings),
        _build_prompter(),
        settings,
        notify=print,
        run_log=run_log,
    )
    try:
        result = service.run(InitOptions(target_path=target, force=args.force))
    except ScaffoldError as exc:
        _report_error(exc, debug=args.debug)
        run_log.record(
            RUN_EVENT,
            {"target": str(target), "error": str(exc), "error_type": type(exc).__name__},
            level="error",
            status="failed",
        )
        return exc.exit_code
    if result.status == "aborted":
        print("Project creation cancelled.")
        run_log.record(RUN_EVENT, {"target": str(target)}, status="aborted")
        return 0
    template = result.template
    run_log.record(
        RUN_EVENT,
        {
            "target": str(target),
            "template": template.package_id if template else None,
            "version": result.entry.version if result.entry else None,
        },
        status="ok",
    )
    print(f"Project initialised at {target}")
    return 0


def _templates_cmd(args: argparse.Namespace) -> int:
    settings = _resolve_settings(args)
    try:
        templates = _build_registry(settings).fetch_templates()
    except ScaffoldError as exc:
        _report_error(exc, debug=args.debug)
        return exc.exit_code
    if args.type:
        templates = filter_templates(InitType(args.type), templates)
    if args.json:
        print(json.dumps([template.to_payload() for template in templates], indent=2, ensure_ascii=False))
        return 0
    if not templates:
        print("No templates found", file=sys.stderr)
        return 1
    for template in templates:
        tags = ", ".join(template.tags) or "-"
        print(f"{template.name} ({template.package_id}@{template.version}) [{tags}] {template.template_type}")
    return 0


def _cache_cmd(args: argparse.Namespace) -> int:
    settings = _resolve_settings(args)
    cache = _build_cache(settings)
    entries = list(cache.list_entries())
    if args.json:
        payload = [
            {"package": entry.package_id, "version": entry.version, "path": str(entry.root)}
            for entry in entries
        ]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0
    if not entries:
        print(f"No templates cached under {cache.root}")
        return 0
    for entry in entries:
        print(f"{entry.package_id}@{entry.version}  {entry.root}")
    return 0


def _telemetry_cmd(args: argparse.Namespace) -> int:
    settings = _resolve_settings(args)
    if args.telemetry_command == "report":
        if args.run:
            events = telemetry.group_runs(telemetry.read_events(settings)).get(args.run)
            if not events:
                print(f"No events recorded for run {args.run}", file=sys.stderr)
                return 1
            print(json.dumps(events, indent=2, ensure_ascii=False))
            return 0
        print(json.dumps(telemetry.summarize(telemetry.read_events(settings)), indent=2, ensure_ascii=False))
        return 0
    if args.telemetry_command == "clear":
        removed = telemetry.clear(settings)
        print("Telemetry log cleared" if removed else f"No telemetry log at {telemetry.log_path(settings)}")
        return 0
    if args.telemetry_command == "tail":
        for evt in telemetry.tail(settings, args.limit):
            print(json.dumps(evt, ensure_ascii=False))
        return 0
    print("Unsupported telemetry command", file=sys.stderr)
    return 2


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--cli-home", help="Home directory for cache, state and logs (default: ~/.scaffoldkit)")
    parser.add_argument("--debug", action="store_true", help="Print full tracebacks on failure")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scaffold",
        description=HELP_OVERVIEW,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"scaffold {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    init_cmd = sub.add_parser("init", help="Create a project or component from a template")
    init_cmd.add_argument("--target-path", help="Target directory (default: current directory)")
    init_cmd.add_argument("--force", action="store_true", help="Skip the non-empty directory question")
    _add_common_options(init_cmd)
    init_cmd.set_defaults(func=_init_cmd)

    templates_cmd = sub.add_parser("templates", help="List templates published in the catalog")
    templates_cmd.add_argument("--type", choices=[kind.value for kind in InitType], help="Only show one kind")
    templates_cmd.add_argument("--json", action="store_true", help="Emit JSON")
    _add_common_options(templates_cmd)
    templates_cmd.set_defaults(func=_templates_cmd)

    cache_cmd = sub.add_parser("cache", help="Inspect the local template cache")
    cache_sub = cache_cmd.add_subparsers(dest="cache_command", required=True)
    cache_list = cache_sub.add_parser("list", help="List cached template packages")
    cache_list.add_argument("--json", action="store_true", help="Emit JSON")
    _add_common_options(cache_list)
    cache_list.set_defaults(func=_cache_cmd)

    telemetry_cmd = sub.add_parser("telemetry", help="Inspect local telemetry logs")
    telemetry_sub = telemetry_cmd.add_subparsers(dest="telemetry_command", required=True)
    telemetry_report = telemetry_sub.add_parser("report", help="Summarise recorded runs")
    telemetry_report.add_argument("--run", help="Print the events of one run id instead")
    _add_common_options(telemetry_report)
    telemetry_clear_cmd = telemetry_sub.add_parser("clear", help="Remove telemetry log file")
    _add_common_options(telemetry_clear_cmd)
    telemetry_tail = telemetry_sub.add_parser("tail", help="Print the last N recorded events")
    telemetry_tail.add_argument("-n", "--limit", type=int, default=20)
    _add_common_options(telemetry_tail)
    telemetry_cmd.set_defaults(func=_telemetry_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nscaffold: interrupted", file=sys.stderr)
        return 130
    except Exception as exc:  # noqa: BLE001
        _report_error(exc, debug=getattr(args, "debug", False))
        return 1


if __name__ == "__main__":
    sys.exit(main())
