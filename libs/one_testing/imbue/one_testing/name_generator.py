import hashlib
import itertools
import time
from typing import Final

from coolname import generate_slug

from imbue.one_testing.primitives import ResourceName
from imbue.one_testing.pure import pure

SUFFIX_LENGTH: Final[int] = 6

# Mixed into the hashed timestamp so two calls landing on the same clock tick still differ.
_call_counter = itertools.count()


@pure
def _suffix_for(timestamp_ns: int, sequence: int) -> str:
    digest = hashlib.md5(f"{timestamp_ns}-{sequence}".encode(), usedforsecurity=False).hexdigest()
    return digest[:SUFFIX_LENGTH]


def generate_unique_name(base: str | None = None) -> ResourceName:
    """Append a short hash of the current time to a name, e.g. 'test-vm' -> 'test-vm-3fa9c1'.

    Surrounding whitespace is stripped from base first, so the result is
    base.strip() + "-" + suffix.

    Without a base, a random two-word slug is used instead. Uniqueness is
    practical, not guaranteed: the suffix is 6 hex characters.
    """
    if base is None:
        base = generate_slug(2)
    elif not base.strip():
        raise ValueError("Base name cannot be empty")
    suffix = _suffix_for(time.time_ns(), next(_call_counter))
    return ResourceName(f"{base.strip()}-{suffix}")
