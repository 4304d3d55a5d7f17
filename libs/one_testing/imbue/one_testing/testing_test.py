"""Tests for the in-memory user pool."""

import pytest

from imbue.one_testing.errors import UserInfoError
from imbue.one_testing.errors import UserNotFoundError
from imbue.one_testing.primitives import ResourceId
from imbue.one_testing.primitives import ResourceKind
from imbue.one_testing.primitives import UserName
from imbue.one_testing.resource import extract_resource_id
from imbue.one_testing.testing import InMemoryUserPool
from imbue.one_testing.testing import UserRecord
from imbue.one_testing.testing import build_user_pool_document


def test_build_user_pool_document_renders_users() -> None:
    document = build_user_pool_document([UserRecord(user_id=3, name="carol", group_id=1, group_name="users")])

    assert document.root_tag == "USER_POOL"
    assert document.xpath_text("/USER_POOL/USER/NAME") == "carol"
    assert document.xpath_text("/USER_POOL/USER/GNAME") == "users"
    assert document.xpath_text("/USER_POOL/USER/ID") == "3"


def test_build_user_pool_document_omits_missing_group_name() -> None:
    document = build_user_pool_document([UserRecord(user_id=3, name="carol", group_name=None)])

    assert document.xpath_text("/USER_POOL/USER/GNAME") is None


def test_lookup_user_id(user_pool: InMemoryUserPool) -> None:
    assert user_pool.lookup_user_id(UserName("alice")) == ResourceId(5)
    assert user_pool.lookup_user_id(UserName("oneadmin")) == ResourceId(0)


def test_lookup_user_id_handles_quotes_in_names() -> None:
    pool = InMemoryUserPool(document=build_user_pool_document([UserRecord(user_id=4, name="o'brien")]))

    assert pool.lookup_user_id(UserName("o'brien")) == 4


def test_lookup_user_id_raises_for_unknown_user(user_pool: InMemoryUserPool) -> None:
    with pytest.raises(UserNotFoundError):
        user_pool.lookup_user_id(UserName("mallory"))


def test_fetch_user_info_returns_user_document(user_pool: InMemoryUserPool) -> None:
    info = user_pool.fetch_user_info(ResourceId(5))

    assert info.root_tag == "USER"
    assert extract_resource_id(info, ResourceKind.USER) == 5
    assert info.xpath_text("/USER/GNAME") == "users"


def test_fetch_user_info_raises_for_unknown_id(user_pool: InMemoryUserPool) -> None:
    with pytest.raises(UserInfoError):
        user_pool.fetch_user_info(ResourceId(404))


def test_fetch_user_info_raises_for_unavailable_user(user_pool: InMemoryUserPool) -> None:
    failing_pool = InMemoryUserPool(document=user_pool.document, unavailable_user_ids=frozenset({0}))

    with pytest.raises(UserInfoError):
        failing_pool.fetch_user_info(ResourceId(0))
