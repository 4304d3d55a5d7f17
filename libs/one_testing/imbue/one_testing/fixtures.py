import time

import pytest

from imbue.one_testing.config import OneTestingSettings
from imbue.one_testing.config import PollSettings
from imbue.one_testing.primitives import NonNegativeFloat
from imbue.one_testing.primitives import NonNegativeInt
from imbue.one_testing.primitives import UserName
from imbue.one_testing.testing import InMemoryUserPool
from imbue.one_testing.testing import UserRecord
from imbue.one_testing.testing import build_user_pool_document

TEST_USERS: tuple[UserRecord, ...] = (
    UserRecord(user_id=0, name="oneadmin", group_id=0, group_name="oneadmin"),
    UserRecord(user_id=1, name="serveradmin", group_id=0, group_name="oneadmin"),
    UserRecord(user_id=5, name="alice", group_id=100, group_name="users"),
    UserRecord(user_id=7, name="orphan", group_id=100, group_name=None),
    UserRecord(user_id=9, name="blank-group", group_id=101, group_name=""),
)


@pytest.fixture
def user_pool() -> InMemoryUserPool:
    """A user pool holding TEST_USERS."""
    return InMemoryUserPool(document=build_user_pool_document(TEST_USERS))


@pytest.fixture
def fast_poll_settings() -> PollSettings:
    return PollSettings(max_attempts=NonNegativeInt(5), interval_seconds=NonNegativeFloat(0.01))


@pytest.fixture
def one_testing_settings(fast_poll_settings: PollSettings) -> OneTestingSettings:
    return OneTestingSettings(poll=fast_poll_settings, caller_user_name=UserName("alice"))


@pytest.fixture
def recorded_sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Replace time.sleep with a recorder so polling tests run instantly.

    Returns the list of requested delays, in call order.
    """
    sleeps: list[float] = []
    monkeypatch.setattr(time, "sleep", sleeps.append)
    return sleeps


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove any ONE_TESTING_* variable inherited from the developer's shell."""
    for name in (
        "ONE_TESTING_CONFIG",
        "ONE_TESTING_POLL_MAX_ATTEMPTS",
        "ONE_TESTING_POLL_INTERVAL",
        "ONE_TESTING_USER",
        "ONE_TESTING_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
