from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml

from .compat import FeatureCompat, detect_niri_version
from .config import EditorConfig
from .errors import NirifyError
from .health import check_config_health, ensure_required_files_exist, repair_corrupted_configs
from .importer import import_from_niri_config
from .ipc import request_reload, validate_config
from .loader import load_settings
from .paths import ConfigPaths
from .registry import ALL, HEALTH_CHECK
from .storage import add_include_line, save_settings

DEBUG_ENV = "NIRIFY_DEBUG"

logger = logging.getLogger("nirify")


def _configure_logging(verbose: bool) -> None:
    if not (verbose or os.environ.get(DEBUG_ENV)):
        return
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s:%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


def _paths(args: argparse.Namespace) -> ConfigPaths:
    cfg = args.editor_config
    if args.niri_dir is not None:
        return ConfigPaths.from_niri_dir(args.niri_dir, cfg.managed_dir_name)
    return ConfigPaths.default(cfg.managed_dir_name)


def _sandbox_root(args: argparse.Namespace) -> Path | None:
    """Includes stay inside the chosen niri directory."""
    return args.niri_dir


def _feature_compat(args: argparse.Namespace) -> FeatureCompat:
    version = args.editor_config.niri_version or detect_niri_version()
    return FeatureCompat.from_version(version)


def _emit(data: dict[str, Any], fmt: str, text_lines: list[str]) -> None:
    if fmt == "yaml":
        print(yaml.safe_dump(data, sort_keys=False).rstrip())
    else:
        for line in text_lines:
            print(line)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_paths(args: argparse.Namespace) -> int:
    paths = _paths(args)
    print(f"niri config: {paths.niri_config}")
    print(f"managed dir: {paths.managed_dir}")
    print(f"main.kdl:    {paths.main_kdl}")
    print(f"backups:     {paths.backup_dir}")
    return 0


def cmd_categories(args: argparse.Namespace) -> int:
    for category in ALL:
        marker = "" if category in HEALTH_CHECK else " (optional)"
        print(f"{category.name.lower():<16} {category.value}{marker}")
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    paths = _paths(args)
    compat = _feature_compat(args)
    if paths.is_first_run():
        result = import_from_niri_config(paths.niri_config, sandbox_root=_sandbox_root(args))
        for warning in result.warnings:
            print(f"warning: {warning}", file=sys.stderr)
        count = save_settings(paths, result.settings, compat)
        print(result.summary())
        print(f"Wrote {count} files to {paths.managed_dir}")
    else:
        settings, _ = load_settings(paths, sandbox_root=_sandbox_root(args))
        created = ensure_required_files_exist(paths, settings, compat)
        if created:
            print("Created missing files: " + ", ".join(created))
        else:
            print("Managed config already initialized")
    if add_include_line(paths):
        print(f"Added include line to {paths.niri_config}")
    return 0


def cmd_health(args: argparse.Namespace) -> int:
    report = check_config_health(_paths(args))
    lines = [f"{c.value:<32} {h}" for c, h in report.statuses.items()]
    lines.append("healthy" if report.is_healthy() else "unhealthy")
    _emit(report.to_dict(), args.format, lines)
    return 0 if report.is_healthy() else 1


def cmd_repair(args: argparse.Namespace) -> int:
    paths = _paths(args)
    settings, _ = load_settings(paths, sandbox_root=_sandbox_root(args))
    repaired = repair_corrupted_configs(paths, settings, _feature_compat(args))
    if repaired:
        print("Repaired: " + ", ".join(repaired))
    else:
        print("Nothing to repair")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    paths = _paths(args)
    source = args.path if args.path is not None else paths.niri_config
    result = import_from_niri_config(source, sandbox_root=_sandbox_root(args))
    lines = [result.summary(), *(f"warning: {w}" for w in result.warnings)]
    if not args.dry_run:
        count = save_settings(paths, result.settings, _feature_compat(args))
        lines.append(f"Wrote {count} files to {paths.managed_dir}")
    _emit(result.to_dict(), args.format, lines)
    return 0


def cmd_reload(args: argparse.Namespace) -> int:
    result = request_reload()
    print(result.message)
    return 0 if result.success else 1


def cmd_validate(args: argparse.Namespace) -> int:
    print(validate_config())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nirify", description="Manage niri settings")
    parser.add_argument("--niri-dir", type=Path, help="niri config directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    sub = parser.add_subparsers(dest="cmd")

    p_paths = sub.add_parser("paths", help="Show resolved paths")
    p_paths.set_defaults(func=cmd_paths)

    p_cat = sub.add_parser("categories", help="List settings categories")
    p_cat.set_defaults(func=cmd_categories)

    p_init = sub.add_parser("init", help="Create the managed config and include it")
    p_init.set_defaults(func=cmd_init)

    p_health = sub.add_parser("health", help="Check managed files")
    p_health.add_argument("--format", choices=["text", "yaml"], default="text")
    p_health.set_defaults(func=cmd_health)

    p_repair = sub.add_parser("repair", help="Back up and regenerate corrupted files")
    p_repair.set_defaults(func=cmd_repair)

    p_import = sub.add_parser("import", help="Import settings from a niri config")
    p_import.add_argument("path", nargs="?", type=Path)
    p_import.add_argument("--format", choices=["text", "yaml"], default="text")
    p_import.add_argument("--dry-run", action="store_true", help="Report without writing")
    p_import.set_defaults(func=cmd_import)

    p_reload = sub.add_parser("reload", help="Ask niri to reload its config")
    p_reload.set_defaults(func=cmd_reload)

    p_validate = sub.add_parser("validate", help="Run niri validate")
    p_validate.set_defaults(func=cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 1
    try:
        args.editor_config = EditorConfig.load()
        return int(func(args))
    except NirifyError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
