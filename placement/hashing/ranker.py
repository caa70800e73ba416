"""Rendezvous ranking using xxh3_128.
- hash(candidate + ":" + salt) per candidate, sorted by unsigned digest bytes
- no seed, no cache: the same (candidate, salt) always ranks the same way
"""
from __future__ import annotations

from typing import Callable, Iterable, List, TypeVar

import xxhash

T = TypeVar("T")


def rendezvous_digest(value: str, salt: str) -> bytes:
    """16-byte XXH3-128 digest of ``value:salt`` (big-endian canonical form)."""
    return xxhash.xxh3_128_digest(f"{value}:{salt}".encode("utf-8"))


def rank(candidates: Iterable[T], salt: str, key: Callable[[T], str] = str) -> List[T]:
    """
    Return candidates ordered ascending by rendezvous digest for salt.
    Digests compare as unsigned bytes; on a digest collision the candidate string decides,
    so the result never depends on input order.
    """
    scored = []
    for candidate in candidates:
        name = key(candidate)
        scored.append((rendezvous_digest(name, salt), name, candidate))
    scored.sort(key=lambda entry: (entry[0], entry[1]))
    return [candidate for _, _, candidate in scored]
