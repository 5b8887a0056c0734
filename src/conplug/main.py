import argparse
import sys
from typing import List, Optional

from conplug.core.settings import load_settings
from conplug.core.utils.logging import configure_logging
from conplug.entry_command_context import CommandContext
from conplug.entry_commands import run_cmd
from conplug.version import __version__


def _selection_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--profile", "-p", action="append", default=[],
                       help="Profile to use (repeatable)")
    group.add_argument("--all", action="store_true",
                       help="Ignore profiles and use every file under every root")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="conplug",
        description="Concatenate project files selected by .conplug profiles.",
    )
    parser.add_argument("--version", action="version", version=f"conplug {__version__}")
    parser.add_argument("--root", "-r", action="append", default=[],
                        help="Project root (repeatable, default: current directory)")
    parser.add_argument("--settings", help="JSON settings file")
    parser.add_argument("--include-git-ignored", action="store_true", default=None,
                        help="Do not drop files matched by the root's .gitignore")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("profiles", help="List profiles of all roots")

    files = sub.add_parser("files", help="Print the resolved file list")
    _selection_args(files)

    render = sub.add_parser("render", help="Render the selected files into one text")
    _selection_args(render)
    render.add_argument("--yes", "-y", action="store_true", help="Do not ask before all-files mode")
    render.add_argument("--output", "-o", help="Write to this file instead of stdout")
    render.add_argument("--max-bytes", type=int, help="Override the content size limit")

    select = sub.add_parser("select", help="Show or persist the profile selection")
    _selection_args(select)
    select.add_argument("--clear", action="store_true", help="Clear the selection")

    sub.add_parser("doctor", help="Print diagnostic information")
    return parser


def main(argv: Optional[List[str]] = None, ctx: Optional[CommandContext] = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    try:
        settings_obj = load_settings(ns.settings, INCLUDE_GIT_IGNORED=ns.include_git_ignored)
    except ValueError as e:
        print(f"[conplug] {e}", file=(ctx.stderr if ctx else sys.stderr))
        return 2
    configure_logging(settings_obj)
    return run_cmd(ns, settings_obj, ctx)


if __name__ == "__main__":
    raise SystemExit(main())
