"""Target host list loader.

One hostname per line; blank lines and ``#`` comments are ignored:

    # lab machines
    node-01
    node-02   # spare
"""

from __future__ import annotations

from typing import List


def parse_targets(text: str) -> List[str]:
    targets: List[str] = []
    seen = set()
    for lineno, line in enumerate(text.splitlines(), start=1):
        host = line.split("#", 1)[0].strip()
        if not host:
            continue
        if any(ch.isspace() for ch in host):
            raise ValueError(f"Line {lineno}: expected one hostname, got {host!r}")
        if host in seen:
            raise ValueError(f"Duplicate target {host!r} on line {lineno}")
        seen.add(host)
        targets.append(host)
    return targets


def load_targets(path: str) -> List[str]:
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    targets = parse_targets(text)
    if not targets:
        raise ValueError(f"No targets defined in {path}")
    return targets
