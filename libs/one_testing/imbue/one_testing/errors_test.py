"""Tests for errors module."""

from imbue.one_testing.errors import BaseOneTestingError
from imbue.one_testing.errors import InvalidPollSettingsError
from imbue.one_testing.errors import InvalidXPathError
from imbue.one_testing.errors import ResourceWaitTimeoutError
from imbue.one_testing.errors import UserGroupNotFoundError
from imbue.one_testing.errors import UserInfoError
from imbue.one_testing.errors import UserNotFoundError
from imbue.one_testing.errors import XPathNotFoundError
from imbue.one_testing.errors import XPathValueParseError


def test_format_message_appends_help_text() -> None:
    error = UserNotFoundError("mallory")

    assert str(error) == "Cannot retrieve user ID for mallory"
    assert error.format_message().startswith("Cannot retrieve user ID for mallory  [Check that the user exists")


def test_format_message_without_help_text() -> None:
    error = XPathNotFoundError("/VM/ID")

    assert error.format_message() == "Could not find /VM/ID"


def test_value_parse_error_mentions_path_and_value() -> None:
    error = XPathValueParseError("/VM/ID", "abc")

    assert "/VM/ID" in str(error)
    assert "'abc'" in str(error)


def test_group_not_found_message_names_user() -> None:
    error = UserGroupNotFoundError("orphan", "/USER/GNAME")

    assert str(error) == "Could not get group name of user orphan (missing /USER/GNAME)"
    assert error.path == "/USER/GNAME"


def test_errors_inherit_matching_builtins() -> None:
    assert isinstance(InvalidPollSettingsError("x"), ValueError)
    assert isinstance(InvalidXPathError("/[", "bad"), ValueError)
    assert isinstance(XPathNotFoundError("/VM/ID"), LookupError)
    assert isinstance(XPathValueParseError("/VM/ID", "x"), ValueError)
    assert isinstance(UserNotFoundError("bob"), LookupError)
    assert isinstance(ResourceWaitTimeoutError("slow"), TimeoutError)


def test_all_errors_share_a_base() -> None:
    for error in (
        InvalidPollSettingsError("x"),
        XPathNotFoundError("/VM/ID"),
        UserInfoError(3, "down"),
        ResourceWaitTimeoutError("slow"),
    ):
        assert isinstance(error, BaseOneTestingError)
