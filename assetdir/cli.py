#!/usr/bin/env python3
"""
assetdir CLI

Inspect an asset directory with the record type that owns it:
  assetdir list  - Print loaded identifiers
  assetdir show  - Print one record and the file it came from
  assetdir check - Reload and report duplicates / skipped productions

Usage:
  assetdir list <dir> -t <module:Class> [--kind asset|generator|identity] [--localized]
  assetdir show <dir> <identifier> -t <module:Class> [--locale <tag>]
  assetdir check <dir> -t <module:Class> [--json]
"""

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import StoreConfig, load_config
from .errors import AssetDirError
from .factory import ManagerFactory
from .manager import BaseManager

KINDS = ("asset", "generator", "identity")


def import_type(name: str) -> type:
    """
    Resolve ``module:Class`` (or ``module.Class``) to a class.

    Raises:
        ValueError: Malformed name or missing attribute
    """
    if ":" in name:
        module_name, _, attr = name.partition(":")
    else:
        module_name, _, attr = name.rpartition(".")
    if not module_name or not attr:
        raise ValueError(f"Invalid type: {name}. Expected module:Class")
    module = importlib.import_module(module_name)
    target = module
    for part in attr.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise ValueError(f"{module_name} has no attribute {attr}") from e
    if not isinstance(target, type):
        raise ValueError(f"{name} is not a class")
    return target


def build_config(args) -> StoreConfig:
    config = load_config(args.config)
    changes = {}
    if args.suffix:
        changes["suffix"] = args.suffix
    if args.default_locale:
        changes["default_locale"] = args.default_locale
    if args.strict:
        changes["fail_on_null_field"] = True
    if changes:
        config = StoreConfig.from_dict({**config.to_dict(), **changes})
    return config


def build_manager(args) -> BaseManager:
    """Unloaded manager for the directory and type named on the command line."""
    factory = ManagerFactory(build_config(args))
    record_type = import_type(args.type)
    localized = args.localized or bool(getattr(args, "locale", None))
    if args.kind == "generator":
        return factory.unloaded_generator_manager(record_type, args.directory, localized=localized)
    if args.kind == "identity":
        return factory.unloaded_identity_manager(record_type, args.directory, localized=localized)
    return factory.unloaded_asset_manager(record_type, args.directory, localized=localized)


def cmd_list(args) -> int:
    """Print identifiers, one per line."""
    manager = build_manager(args)
    manager.reload()
    if args.locale:
        for identifier in sorted(manager.identifiers()):
            entry = manager.fetch(identifier, args.locale)
            if entry is not None:
                print(identifier)
    else:
        for identifier in sorted(manager.identifiers()):
            print(identifier)
    return 0


def cmd_show(args) -> int:
    """Print one record as YAML, preceded by its source path."""
    manager = build_manager(args)
    manager.reload()
    entry = manager.fetch(args.identifier, args.locale)
    if entry is None:
        print(f"Not found: {args.identifier}", file=sys.stderr)
        return 1
    print(f"# {entry.path}")
    sys.stdout.write(manager.codec.encode(entry.value).decode("utf-8"))
    return 0


def cmd_check(args) -> int:
    """Reload and summarise; non-zero exit when anything was overwritten or skipped."""
    manager = build_manager(args)
    report = manager.reload()

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
        return 0 if report.clean else 1

    print(f"Directory: {report.directory}")
    print(f"Files: {report.files_scanned}")
    print(f"Loaded: {report.loaded}")
    if args.kind != "asset":
        print(f"Produced: {report.produced}")
    if manager.localized:
        print(f"Locales: {', '.join(manager.locales()) or '-'}")

    for duplicate in report.duplicates:
        print(f"  [DUPLICATE] {duplicate.describe()}")
    for path in report.null_productions:
        print(f"  [NULL] {path}")

    print(f"\nSummary: {len(report.duplicates)} duplicates, "
          f"{len(report.null_productions)} null productions ({report.elapsed:.3f}s)")
    return 0 if report.clean else 1


def _add_common(parser: argparse.ArgumentParser):
    parser.add_argument("directory", type=Path, help="Asset directory")
    parser.add_argument("-t", "--type", required=True,
                        help="Record type: module:Class")
    parser.add_argument("-k", "--kind", choices=KINDS, default="asset",
                        help="Manager kind (default: asset)")
    parser.add_argument("--localized", action="store_true",
                        help="Partition by locale")
    parser.add_argument("--suffix", help="Record file suffix (default: .yml)")
    parser.add_argument("--default-locale", help="Default locale (default: en_us)")
    parser.add_argument("--strict", action="store_true",
                        help="Reject records with missing or null fields")
    parser.add_argument("--config", type=Path, help="YAML config file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assetdir",
        description="assetdir - Directory-backed YAML asset store",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # list command
    list_parser = subparsers.add_parser("list", help="List identifiers")
    _add_common(list_parser)
    list_parser.add_argument("--locale", help="Only identifiers resolvable in this locale")

    # show command
    show_parser = subparsers.add_parser("show", help="Show one record")
    _add_common(show_parser)
    show_parser.add_argument("identifier", help="Identifier to show")
    show_parser.add_argument("--locale", help="Locale to look up")

    # check command
    check_parser = subparsers.add_parser("check", help="Reload and report problems")
    _add_common(check_parser)
    check_parser.add_argument("--json", action="store_true", help="Print the report as JSON")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {"list": cmd_list, "show": cmd_show, "check": cmd_check}
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    try:
        return command(args)
    except (AssetDirError, ValueError, ImportError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
