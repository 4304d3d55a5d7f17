import math
from enum import StrEnum
from enum import auto
from typing import Any
from typing import Final
from typing import Self

from pydantic import GetCoreSchemaHandler
from pydantic_core import CoreSchema
from pydantic_core import core_schema

# Largest identifier OpenNebula can hand out (ids are unsigned 64-bit on the wire).
MAX_RESOURCE_ID: Final[int] = 2**64 - 1


class UpperCaseStrEnum(StrEnum):
    """A StrEnum whose auto() values are the upper-cased member names."""

    @staticmethod
    def _generate_next_value_(
        name: str,
        start: int,
        count: int,
        last_values: list[str],
    ) -> str:
        return name.upper()


# === Enums ===


class LogLevel(UpperCaseStrEnum):
    """Log verbosity level."""

    TRACE = auto()
    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()
    NONE = auto()


class ResourceKind(UpperCaseStrEnum):
    """Root element name of an OpenNebula resource document."""

    VM = auto()
    HOST = auto()
    IMAGE = auto()
    TEMPLATE = auto()
    VNET = auto()
    USER = auto()
    GROUP = auto()
    DATASTORE = auto()
    CLUSTER = auto()
    DOCUMENT = auto()
    ZONE = auto()
    SECURITY_GROUP = auto()
    VDC = auto()
    VROUTER = auto()
    MARKETPLACE = auto()
    MARKETPLACEAPP = auto()
    VM_GROUP = auto()
    HOOK = auto()
    BACKUPJOB = auto()


# === Validated scalars ===


class NonEmptyStr(str):
    """A string that cannot be empty or whitespace-only. Surrounding whitespace is stripped."""

    def __new__(cls, value: str) -> Self:
        if not value or not value.strip():
            raise ValueError(f"{cls.__name__} cannot be empty")
        return super().__new__(cls, value.strip())

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.str_schema(min_length=1),
            serialization=core_schema.to_string_ser_schema(),
        )


class NonNegativeInt(int):
    """An integer that must be >= 0."""

    def __new__(cls, value: int) -> Self:
        if value < 0:
            raise ValueError(f"{cls.__name__} must be >= 0, got {value}")
        return super().__new__(cls, value)

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.int_schema(ge=0),
        )


class NonNegativeFloat(float):
    """A float that must be >= 0. NaN and infinity are rejected."""

    def __new__(cls, value: float) -> Self:
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"{cls.__name__} must be a finite number >= 0, got {value}")
        return super().__new__(cls, value)

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: GetCoreSchemaHandler,
    ) -> CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.float_schema(ge=0, allow_inf_nan=False),
        )


class ResourceId(NonNegativeInt):
    """Numeric identifier of an OpenNebula resource."""

    def __new__(cls, value: int) -> Self:
        if value > MAX_RESOURCE_ID:
            raise ValueError(f"{cls.__name__} must be <= {MAX_RESOURCE_ID}, got {value}")
        return super().__new__(cls, value)


class ResourceName(NonEmptyStr):
    """Name given to a resource created by a test."""


class UserName(NonEmptyStr):
    """Login name of an OpenNebula user."""


class GroupName(NonEmptyStr):
    """Name of an OpenNebula group."""
