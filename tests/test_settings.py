import sys
from pathlib import Path


# Ensure src is importable
ROOT = Path(__file__).parent.parent
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))


import pytest  # noqa: E402
from pydantic import ValidationError  # noqa: E402

from timesync.config.settings import Settings  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ("TIMESYNC_SAMPLE_SIZE", "TIMESYNC_REMOTE_LAUNCHER", "TIMESYNC_IO_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    s = Settings()
    assert s.SAMPLE_SIZE == 1000
    assert s.REMOTE_LAUNCHER == "ssh"
    assert s.PROGRAM is None
    assert s.PORT_BASE == 0
    assert s.ACCEPT_TIMEOUT > 0


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("TIMESYNC_SAMPLE_SIZE", "250")
    monkeypatch.setenv("TIMESYNC_REMOTE_LAUNCHER", "rsh")
    s = Settings()
    assert s.SAMPLE_SIZE == 250
    assert s.REMOTE_LAUNCHER == "rsh"


def test_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text("TIMESYNC_SAMPLE_SIZE=42\n")
    assert Settings().SAMPLE_SIZE == 42


def test_explicit_values_beat_environment(monkeypatch):
    monkeypatch.setenv("TIMESYNC_SAMPLE_SIZE", "250")
    assert Settings(SAMPLE_SIZE=7).SAMPLE_SIZE == 7


def test_frozen():
    s = Settings()
    with pytest.raises(ValidationError):
        s.SAMPLE_SIZE = 5


@pytest.mark.parametrize("field,value", [
    ("SAMPLE_SIZE", 0),
    ("PORT_BASE", 70000),
    ("PORT_ATTEMPTS", 0),
    ("ACCEPT_TIMEOUT", 0),
])
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})
