"""Tests for the name generator module."""

import re

import pytest

from imbue.one_testing import name_generator
from imbue.one_testing.name_generator import _suffix_for
from imbue.one_testing.name_generator import generate_unique_name
from imbue.one_testing.primitives import ResourceName

_SUFFIX_PATTERN = re.compile(r"-[0-9a-f]{6}$")


def test_generate_unique_name_appends_six_hex_characters() -> None:
    name = generate_unique_name("test-vm")

    assert isinstance(name, ResourceName)
    assert name.startswith("test-vm-")
    assert len(name) == len("test-vm-") + 6
    assert _SUFFIX_PATTERN.search(name) is not None


def test_generate_unique_name_differs_between_immediate_calls() -> None:
    first = generate_unique_name("test-image")
    second = generate_unique_name("test-image")

    assert first != second


def test_generate_unique_name_differs_within_the_same_clock_tick(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(name_generator.time, "time_ns", lambda: 1_700_000_000_000_000_000)

    names = {generate_unique_name("test-host") for _ in range(10)}

    assert len(names) == 10


def test_generate_unique_name_generates_mostly_unique_names() -> None:
    names = {generate_unique_name("test-vnet") for _ in range(100)}

    assert len(names) >= 95


def test_generate_unique_name_without_base_uses_a_slug() -> None:
    name = generate_unique_name()

    assert _SUFFIX_PATTERN.search(name) is not None
    base = _SUFFIX_PATTERN.sub("", name)
    assert len(base) > 0


def test_generate_unique_name_strips_base() -> None:
    assert generate_unique_name("  test-user ").startswith("test-user-")


@pytest.mark.parametrize("base", ["", "   "])
def test_generate_unique_name_rejects_empty_base(base: str) -> None:
    with pytest.raises(ValueError):
        generate_unique_name(base)


def test_suffix_is_derived_from_md5_of_timestamp() -> None:
    assert _suffix_for(123, 0) == _suffix_for(123, 0)
    assert _suffix_for(123, 0) != _suffix_for(124, 0)
    assert len(_suffix_for(123, 0)) == 6


def test_generate_unique_name_is_stripped_base_plus_suffix() -> None:
    name = generate_unique_name(" test-vm ")

    assert name[: -len("-xxxxxx")] == "test-vm"
    assert _SUFFIX_PATTERN.fullmatch(name[len("test-vm") :]) is not None
