#!/usr/bin/env python3
"""Run rastro-timesync from a source checkout.

Usage examples:
  - python scripts/run_timesync.py node-01 node-02
  - python scripts/run_timesync.py -z 200 -r rsh --hosts-file hosts.txt

When launching slaves from a checkout, point TIMESYNC_PROGRAM at a command
that exists on the remote hosts (e.g. an installed ``rastro-timesync``).
"""

from __future__ import annotations

import sys
from pathlib import Path


# Ensure src is on sys.path (similar to the test modules)
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from timesync.app.cli import main  # type: ignore  # noqa: E402


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
