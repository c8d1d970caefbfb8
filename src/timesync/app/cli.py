"""Command-line entry point.

Master mode (default) prints one line per target:

    <local_host> <local_time> <remote_host> <remote_time>

Slave mode is selected with the hidden ``--slave`` flag and is what the
remote launcher runs on each target.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from pydantic import ValidationError

from timesync.config.settings import Settings
from timesync.config.targets import load_targets
from timesync.protocol.errors import TimeSyncError
from timesync.roles.slave import run_slave
from timesync.session.orchestrator import SessionOrchestrator
from timesync.utils.logging_config import setup_logging

DESCRIPTION = (
    "Calculate the clock difference with other hosts.\n\n"
    "To avoid PATH problems, you might prefer running this program like this:\n"
    "`which rastro-timesync` {hostname_1 hostname_2 ...}"
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rastro-timesync",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("targets", nargs="*", metavar="HOST", help="Hosts to compare against")
    parser.add_argument("-z", "--sample", type=int, dest="sample_size",
                        help="Sampling size (default is 1000)")
    parser.add_argument("-r", "--remote", dest="remote_launcher",
                        help="Remote login program (default is ssh)")
    parser.add_argument("--hosts-file", help="Read additional hosts from FILE, one per line")
    parser.add_argument("--log-level", help="Logging level (default WARNING)")
    parser.add_argument("--log-path", help="Write logs to a file instead of stderr")
    # used by the launcher to start the remote side
    parser.add_argument("-s", "--slave", action="store_true", help=argparse.SUPPRESS)
    parser.add_argument("-m", "--master-host", help=argparse.SUPPRESS)
    parser.add_argument("-p", "--master-port", type=int, help=argparse.SUPPRESS)
    return parser


def build_settings(args: argparse.Namespace, program: str) -> Settings:
    overrides = {}
    if args.sample_size is not None:
        overrides["SAMPLE_SIZE"] = args.sample_size
    if args.remote_launcher:
        overrides["REMOTE_LAUNCHER"] = args.remote_launcher
    if args.log_level:
        overrides["LOG_LEVEL"] = args.log_level
    if args.log_path:
        overrides["LOG_PATH"] = args.log_path
    settings = Settings(**overrides)
    if settings.PROGRAM is None:
        settings = settings.model_copy(update={"PROGRAM": program})
    return settings


def _run_master(settings: Settings, targets: List[str]) -> int:
    orchestrator = SessionOrchestrator(settings)
    failures = 0
    for outcome in orchestrator.run(targets):
        if outcome.ok:
            print(outcome.result.format_line(), flush=True)
        else:
            failures += 1
            print(f"{outcome.target}: {outcome.error}", file=sys.stderr, flush=True)
    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    program = sys.argv[0] if sys.argv and sys.argv[0] else "rastro-timesync"
    try:
        settings = build_settings(args, program)
    except ValidationError as e:
        parser.error(str(e))

    if args.slave:
        if not args.master_host or args.master_port is None:
            parser.error("--slave requires --master-host and --master-port")
        log = setup_logging(settings.LOG_LEVEL, component="slave", log_path=settings.LOG_PATH)
        try:
            run_slave(args.master_host, args.master_port, settings)
        except TimeSyncError as e:
            log.error("Slave failed", error_type=type(e).__name__, error=str(e))
            return 1
        return 0

    targets = list(args.targets)
    if args.hosts_file:
        try:
            targets.extend(t for t in load_targets(args.hosts_file) if t not in targets)
        except (OSError, ValueError) as e:
            parser.error(str(e))
    if not targets:
        parser.error("at least one HOST is required")

    setup_logging(settings.LOG_LEVEL, component="master", log_path=settings.LOG_PATH)
    return _run_master(settings, targets)


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
