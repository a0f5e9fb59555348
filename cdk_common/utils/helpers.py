"""Small helpers shared by configuration records and naming code."""

from __future__ import annotations

import hashlib
import secrets
import string
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Mapping

K = TypeVar("K")
V = TypeVar("V")

STABLE_ID_LENGTH = 15
RANDOM_ID_LENGTH = 10


def merge_maps(*maps: Mapping[K, V] | None) -> dict[K, V]:
    """Merge *maps* left to right; a later map wins on key conflicts.

    ``None`` entries are skipped.  The inputs are never mutated.
    """
    merged: dict[K, V] = {}
    for mapping in maps:
        if mapping:
            merged.update(mapping)
    return merged


def stable_id(seed: str) -> str:
    """Derive a short deterministic id from *seed*.

    The id is lower-case ASCII letters only, so it always starts with a
    letter and is safe in bucket names and stack names.
    """
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    letters = string.ascii_lowercase
    return "".join(letters[b % len(letters)] for b in digest[:STABLE_ID_LENGTH])


def random_id() -> str:
    """Return a random lower-case id for resources that must not collide."""
    return "".join(secrets.choice(string.ascii_lowercase) for _ in range(RANDOM_ID_LENGTH))
