"""
Pytest configuration and shared fixtures.
"""

import subprocess
from typing import Dict, List

import pytest

from auroractl.logger import StructuredLogger, reset_logger


class FakeRunner:
    """Stands in for subprocess.run, keyed by the aurora subcommand args."""

    def __init__(self):
        self.calls: List[dict] = []
        self.responses: Dict[tuple, tuple] = {}
        self.errors: Dict[tuple, Exception] = {}

    def respond(self, key: tuple, stdout=b"", returncode: int = 0):
        """Register output; str is encoded to UTF-8 like a real process would print it."""
        if isinstance(stdout, str):
            stdout = stdout.encode("utf-8")
        self.responses[key] = (returncode, stdout)

    def fail(self, key: tuple, error: Exception):
        self.errors[key] = error

    def __call__(self, cmd, **kwargs):
        self.calls.append({"cmd": cmd, **kwargs})
        key = tuple(a for a in cmd[1:] if a != "--verbose")
        if key in self.errors:
            raise self.errors[key]
        returncode, raw = self.responses.get(key, (0, b""))
        # decode the way subprocess.run does for the given keyword arguments
        if kwargs.get("encoding") or kwargs.get("errors") or kwargs.get("text"):
            stdout = raw.decode(kwargs.get("encoding") or "utf-8", kwargs.get("errors") or "strict")
        else:
            stdout = raw
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def logger(tmp_path) -> StructuredLogger:
    """Quiet logger for tests."""
    return StructuredLogger(name="auroractl-test", enable_console=False)


@pytest.fixture(autouse=True)
def _fresh_global_logger():
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def sample_list_output() -> str:
    """Sample `aurora config list` output."""
    return (
        "Loading config...\n"
        "jobs=[west/www-data/prod/hello, west/batch/devel/cron, east/www-data/staging/hello]\n"
    )


@pytest.fixture
def clean_update_diff() -> str:
    """Sample `aurora job diff` output with an update only."""
    return (
        "This job update will:\n"
        "update instances: [0-2]\n"
        "with diff:\n"
        "\n"
        "59c59,60\n"
        "<   -com.twitter.finagle.netty3.numWorkers=3\n"
        "---\n"
        ">   -com.twitter.finagle.netty3.numWorkers=6\n"
    )


@pytest.fixture
def scale_diff() -> str:
    """Sample `aurora job diff` output adding and removing instances."""
    return (
        "This job update will:\n"
        "remove instances: [3]\n"
        "add instances: [4-5]\n"
    )


@pytest.fixture
def freeform_diff() -> str:
    """Sample `aurora job diff` output without the header."""
    return (
        "--- current\n"
        "+++ proposed\n"
        "@@ -1,3 +1,3 @@\n"
        "-  'ram': 128\n"
        "+  'ram': 256\n"
    )
