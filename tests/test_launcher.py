import sys
from pathlib import Path


# Ensure src is importable
ROOT = Path(__file__).parent.parent
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))


import pytest  # noqa: E402

from timesync.protocol.errors import LaunchError  # noqa: E402
from timesync.session.launcher import RemoteLauncher  # noqa: E402


def test_command_line_shape():
    launcher = RemoteLauncher("ssh", "/usr/local/bin/rastro-timesync")
    assert launcher.command("node-07", "master.lab", 40123) == [
        "ssh", "node-07",
        "/usr/local/bin/rastro-timesync",
        "--slave",
        "--master-host", "master.lab",
        "--master-port", "40123",
    ]


def test_exit_status_is_observable():
    handle = RemoteLauncher("false", "prog").launch("host", "master", 1)
    assert handle.reap(timeout=5.0) == 1
    assert handle.poll() == 1


def test_successful_launcher():
    handle = RemoteLauncher("true", "prog").launch("host", "master", 1)
    assert handle.reap(timeout=5.0) == 0


def test_describe_mentions_manual_check():
    handle = RemoteLauncher("false", "prog").launch("node-3", "master", 1)
    handle.reap(timeout=5.0)
    text = handle.describe()
    assert "node-3" in text
    assert "\tprog" in text
    assert text.endswith("$ false node-3 ls")


def test_unexecutable_launcher():
    with pytest.raises(LaunchError):
        RemoteLauncher("/nonexistent/remote-shell", "prog").launch("host", "master", 1)
