#!/usr/bin/env python3
"""
smartmerge command line entry point.

Merges the notes of a vault (a directory of Markdown files) into
SmartMerger_<YYYYMMDD>_<HHMMSS>_part<N>.md files, either all of them or the
ones referenced by [[wiki]] / [label](target) links.
"""
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from ..adapters.filesystem import LocalSink
from ..adapters.vault import FsVault
from ..core.errors import ConfigError, MergeAlreadyRunning
from ..service.config import SettingsStore, default_settings_path
from ..service.logging_provider import LoggingStatusSink, StreamNotifier
from ..service.runner import MergeRunner

EXIT_OK = 0
EXIT_EMPTY = 1
EXIT_BUSY = 2


def _read_links(args: argparse.Namespace) -> Optional[str]:
    if args.links is not None:
        return args.links
    if args.links_file:
        return Path(args.links_file).expanduser().read_text(encoding="utf-8")
    if sys.stdin.isatty():
        print("Paste links, then press Ctrl-D:", file=sys.stderr)
    text = sys.stdin.read()
    # EOF before any input is a cancel; blank text still goes to the parser
    return text if text else None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="smartmerge")
    parser.add_argument("--vault", default=os.environ.get("SMARTMERGE_VAULT", "."),
                        help="Vault directory (default: SMARTMERGE_VAULT or cwd)")
    parser.add_argument("--settings", default=None, help="Settings file (default: <vault>/.smartmerge/settings.yml)")
    parser.add_argument("-v", "--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("merge-all", help="Merge every note in the vault")

    sel = sub.add_parser("merge-selected", help="Merge the notes referenced by links")
    src = sel.add_mutually_exclusive_group()
    src.add_argument("--links", default=None, help="Link text, e.g. '[[A]] [[B]]'")
    src.add_argument("--links-file", default=None, help="Read link text from a file")

    cfg = sub.add_parser("config", help="Show or change output settings")
    cfg_sub = cfg.add_subparsers(dest="config_command", required=True)
    cfg_sub.add_parser("show")
    cfg_set = cfg_sub.add_parser("set")
    cfg_set.add_argument("--destination", choices=["vault", "external", "both"], default=None)
    cfg_set.add_argument("--external-dir", default=None)
    return parser


def _config_command(args: argparse.Namespace, settings: SettingsStore) -> int:
    if args.config_command == "set":
        try:
            config = settings.update(
                output_destination=args.destination,
                external_dir=args.external_dir,
            )
        except ConfigError as e:
            print(f"[smartmerge] Error: {e}", file=sys.stderr)
            return EXIT_EMPTY
    else:
        config = settings.load()
    print(f"output_destination: {config.output_destination}")
    print(f"external_dir: {config.external_dir}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        stream=sys.stderr,
        format="[%(levelname)s] %(message)s",
    )

    vault_path = Path(args.vault).expanduser().resolve()
    if not vault_path.is_dir():
        print(f"[smartmerge] Error: Vault path is not a directory: {vault_path}", file=sys.stderr)
        return EXIT_EMPTY

    settings_path = Path(args.settings).expanduser() if args.settings else default_settings_path(vault_path)
    settings = SettingsStore(settings_path)
    settings.load()

    if args.command == "config":
        return _config_command(args, settings)

    runner = MergeRunner(
        FsVault(vault_path),
        settings.snapshot,
        sink=LocalSink(),
        status=LoggingStatusSink(),
        notify=StreamNotifier(),
    )

    try:
        if args.command == "merge-all":
            result = runner.merge_all()
        else:
            result = runner.merge_selected(lambda: _read_links(args))
    except MergeAlreadyRunning as e:
        print(f"[smartmerge] {e}", file=sys.stderr)
        return EXIT_BUSY
    except OSError as e:
        print(f"[smartmerge] Error: Could not read links: {e}", file=sys.stderr)
        return EXIT_EMPTY

    if result is None:
        print("[smartmerge] Canceled.", file=sys.stderr)
        return EXIT_EMPTY
    if result.status in ("no-links", "no-match"):
        return EXIT_EMPTY
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
