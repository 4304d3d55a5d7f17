"""Root conftest: shared fixtures, quiet logging and a test suite time limit."""

import os
import time
from typing import Final

import pytest

from imbue.one_testing.logging import setup_logging
from imbue.one_testing.primitives import LogLevel

# Register fixture modules so pytest discovers fixtures defined in fixtures.py files.
# This must be in the top-level conftest.py (pytest disallows pytest_plugins elsewhere).
pytest_plugins = [
    "imbue.one_testing.fixtures",
]

_DEFAULT_MAX_DURATION_SECONDS: Final[float] = 30.0


@pytest.hookimpl(tryfirst=True)
def pytest_sessionstart(session: pytest.Session) -> None:
    """Record the start time and keep loguru output to warnings unless asked otherwise."""
    setup_logging(os.environ.get("ONE_TESTING_LOG_LEVEL", LogLevel.WARNING))
    setattr(session, "start_time", time.time())


@pytest.hookimpl(trylast=True)
def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    """Fail the run if the test suite took longer than PYTEST_MAX_DURATION seconds."""
    if not hasattr(session, "start_time"):
        return
    duration = time.time() - session.start_time
    max_duration = float(os.environ.get("PYTEST_MAX_DURATION", _DEFAULT_MAX_DURATION_SECONDS))
    if duration > max_duration:
        pytest.exit(
            f"Test suite took {duration:.2f}s, exceeding the {max_duration}s limit",
            returncode=1,
        )
