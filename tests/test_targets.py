import sys
from pathlib import Path


# Ensure src is importable
ROOT = Path(__file__).parent.parent
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))


import pytest  # noqa: E402

from timesync.config.targets import load_targets, parse_targets  # noqa: E402


def test_comments_and_blank_lines_ignored():
    text = """
# lab machines
node-01
  node-02   # spare

node-03
"""
    assert parse_targets(text) == ["node-01", "node-02", "node-03"]


def test_duplicate_targets_rejected():
    with pytest.raises(ValueError, match="Duplicate target"):
        parse_targets("a\nb\na\n")


def test_one_host_per_line():
    with pytest.raises(ValueError, match="Line 1"):
        parse_targets("a b\n")


def test_load_from_file(tmp_path):
    hosts = tmp_path / "hosts.txt"
    hosts.write_text("alpha\nbeta\n")
    assert load_targets(str(hosts)) == ["alpha", "beta"]


def test_empty_file_rejected(tmp_path):
    hosts = tmp_path / "hosts.txt"
    hosts.write_text("# nothing here\n")
    with pytest.raises(ValueError, match="No targets"):
        load_targets(str(hosts))
