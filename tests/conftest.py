"""Shared test fixtures for shkit test suite."""

import io
import os
from unittest.mock import patch

import pytest

from shkit.lib.log_lib import FixedTracer, Logger, StackFrame, reset_logger


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: starts extra interpreters or child processes")


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    """Keep SHKIT_* variables, ~/.shkit and stray .shkit.json out of tests.

    Also closes the module-level Logger after each test so output files
    opened through init_logger() are released.
    """
    for key in list(os.environ):
        if key.startswith("SHKIT_"):
            monkeypatch.delenv(key)
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    yield
    reset_logger()


@pytest.fixture
def tmp_config_home(tmp_path):
    """Provide a temporary home directory for ~/.shkit/config.json."""
    home = tmp_path / "home"
    home.mkdir()
    with patch.dict(os.environ, {"HOME": str(home), "USERPROFILE": str(home)}):
        with patch("pathlib.Path.home", return_value=home):
            yield home


# ---------------------------------------------------------------------------
# Logger fixtures
# ---------------------------------------------------------------------------
DEMO_FRAMES = [StackFrame("main", "demo.sh", 7)]


@pytest.fixture
def out_buf():
    """StringIO standing in for stdout."""
    return io.StringIO()


@pytest.fixture
def err_buf():
    """StringIO standing in for stderr."""
    return io.StringIO()


@pytest.fixture
def logger(out_buf, err_buf):
    """A Logger on StringIO streams with a one-frame fixed tracer."""
    log = Logger(stdout=out_buf, stderr=err_buf, tracer=FixedTracer(DEMO_FRAMES))
    yield log
    log.close()


@pytest.fixture
def fatal_calls():
    """List that records (status, plain text) for each fatal record."""
    return []


@pytest.fixture
def recording_logger(out_buf, err_buf, fatal_calls):
    """Like `logger`, but FATAL records are recorded instead of raised."""
    def on_fatal(status, record):
        fatal_calls.append((status, record.text()))

    log = Logger(stdout=out_buf, stderr=err_buf,
                 tracer=FixedTracer(DEMO_FRAMES), on_fatal=on_fatal)
    yield log
    log.close()

