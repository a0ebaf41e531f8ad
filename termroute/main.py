from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass

from termroute.config import AppConfig, ConfigError, load_config
from termroute.log_setup import setup_logging
from termroute.process_enumerator import ProcessEnumerator
from termroute.pty_session import SessionError
from termroute.terminal_matcher import TerminalMatcher

logger = logging.getLogger(__name__)


@dataclass
class PidSession:
    """Session identified only by a root pid given on the command line."""

    name: str
    pid: int

    async def get_root_pid(self) -> int | None:
        return self.pid

    def send_text(self, text: str, execute: bool = False) -> None:
        raise SessionError(f"Session {self.name} cannot accept text")

    def show(self) -> None:
        pass

    def hide(self) -> None:
        pass

    def dispose(self) -> None:
        pass


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="termroute",
        description="Find the terminal whose process tree runs a target application",
    )
    parser.add_argument("--config", default=None,
                        help="Path to YAML config file (defaults apply when omitted)")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug mode (verbose logging)")
    parser.add_argument("--trace", action="store_true",
                        help="Enable trace mode (writes trace file to debug/)")
    parser.add_argument("--verbose", action="store_true",
                        help="With --trace, also send trace output to terminal")

    sub = parser.add_subparsers(dest="command", required=True)

    children = sub.add_parser("children", help="List the immediate children of a process")
    children.add_argument("pid", type=int)

    find = sub.add_parser("find", help="Find the first root pid running a target application")
    find.add_argument("pids", type=int, nargs="+", metavar="PID",
                      help="Root pids to search, in priority order")
    find.add_argument("--app", action="append", default=None, dest="apps",
                      help="Target application (repeatable); overrides the config")
    return parser.parse_args(argv)


async def _list_children(enumerator: ProcessEnumerator, pid: int) -> int:
    for record in await enumerator.get_child_processes(pid):
        print(f"{record.pid}\t{record.command_line}")
    return 0


async def _find(enumerator: ProcessEnumerator, config: AppConfig, pids: list[int], apps: list[str] | None) -> int:
    targets = apps if apps is not None else config.auto_paste.target_applications()
    targets = [t.strip() for t in targets if t.strip()]
    if not targets:
        print("No target applications configured", file=sys.stderr)
        return 1

    sessions = [PidSession(name=str(pid), pid=pid) for pid in pids]
    match = await TerminalMatcher(enumerator).find_matching_terminal(sessions, targets)
    if match is None:
        print(f"No process tree runs any of: {', '.join(targets)}")
        return 1
    print(match.pid)
    return 0


async def main(argv: list[str] | None = None) -> int:
    """Entry point for the termroute command line."""
    args = _parse_args(argv)

    try:
        config = load_config(args.config) if args.config else AppConfig()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    setup_logging(
        debug=args.debug or config.debug.enabled,
        trace=args.trace or config.debug.trace,
        verbose=args.verbose or config.debug.verbose,
        trace_dir=config.debug.trace_dir,
    )

    enumerator = ProcessEnumerator(query_timeout=config.process.query_timeout)
    if enumerator.family is None:
        logger.warning("Process enumeration is not supported on this platform")

    if args.command == "children":
        return await _list_children(enumerator, args.pid)
    return await _find(enumerator, config, args.pids, args.apps)


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
