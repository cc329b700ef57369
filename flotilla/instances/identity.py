"""Stable instance naming from fleet ordinals.

Ordinals map to lowercase letter sequences using bijective base-26
(spreadsheet column style): 0 -> "a", 25 -> "z", 26 -> "aa", 701 -> "zz",
702 -> "aaa". The mapping is a pure function, so any component can recompute
an instance's name from its ordinal alone.
"""

import string
from typing import List

from ..core.enums import DaemonRole
from ..core.value_objects import DaemonInstance

_ALPHABET = string.ascii_lowercase
_BASE = len(_ALPHABET)


def identity_of(ordinal: int) -> str:
    """Return the letter-sequence identity for a fleet ordinal.

    Args:
        ordinal: Zero-based position of the instance within its fleet

    Returns:
        Lowercase identity such as "a", "z", "aa"
    """
    if ordinal < 0:
        raise ValueError(f"Ordinal must be non-negative: {ordinal}")

    letters = []
    n = ordinal + 1
    while n > 0:
        n, remainder = divmod(n - 1, _BASE)
        letters.append(_ALPHABET[remainder])
    return "".join(reversed(letters))


def ordinal_of(identity: str) -> int:
    """Inverse of identity_of."""
    if not identity or not all(c in _ALPHABET for c in identity):
        raise ValueError(f"Not an instance identity: {identity!r}")

    n = 0
    for c in identity:
        n = n * _BASE + _ALPHABET.index(c) + 1
    return n - 1


def instance_for(ordinal: int, role: DaemonRole) -> DaemonInstance:
    """Create the DaemonInstance for an ordinal."""
    return DaemonInstance(ordinal=ordinal, identity=identity_of(ordinal), role=role)


def instances_in_range(start: int, stop: int, role: DaemonRole) -> List[DaemonInstance]:
    """Instances for ordinals in [start, stop)."""
    return [instance_for(ordinal, role) for ordinal in range(start, stop)]
