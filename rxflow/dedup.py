"""Consecutive deduplication adaptors."""

from __future__ import annotations

import operator
from collections.abc import Callable
from typing import Any, TypeVar

from .poll import CLOSED, Item, PullSource, PullStream, Signal, release

T = TypeVar("T")
K = TypeVar("K")

_MISSING: Any = object()


class Dedup(PullStream[T]):
    """Drops items equal to the item emitted just before them.

    Only the last emitted value is remembered, so ``[1, 1, 2, 1]`` becomes
    ``[1, 2, 1]``. Suppressed items are skipped within the same poll.
    """

    __slots__ = ("_source", "_eq", "_last")

    def __init__(
        self,
        source: PullSource[T],
        *,
        eq: Callable[[T, T], bool] | None = None,
    ) -> None:
        self._source = source
        self._eq = eq or operator.eq
        self._last: T = _MISSING

    def poll(self) -> Item[T] | Signal:
        while True:
            result = self._source.poll()
            if not isinstance(result, Item):
                return result
            if self._last is _MISSING or not self._eq(self._last, result.value):
                self._last = result.value
                return result

    def close(self) -> None:
        self._last = _MISSING
        source, self._source = self._source, CLOSED
        release(source)


class DedupByKey(PullStream[T]):
    """Drops items whose ``key_fn`` projection equals the previous emitted key.

    The original item is emitted; only its key is remembered.
    """

    __slots__ = ("_source", "_key_fn", "_last_key")

    def __init__(self, source: PullSource[T], key_fn: Callable[[T], K]) -> None:
        self._source = source
        self._key_fn = key_fn
        self._last_key: K = _MISSING

    def poll(self) -> Item[T] | Signal:
        while True:
            result = self._source.poll()
            if not isinstance(result, Item):
                return result
            key = self._key_fn(result.value)
            if self._last_key is _MISSING or self._last_key != key:
                self._last_key = key
                return result

    def close(self) -> None:
        self._last_key = _MISSING
        source, self._source = self._source, CLOSED
        release(source)


def dedup(
    source: PullSource[T], eq: Callable[[T, T], bool] | None = None
) -> Dedup[T]:
    """Deduplicate consecutive equal items of ``source``."""

    return Dedup(source, eq=eq)


def dedup_by_key(source: PullSource[T], key_fn: Callable[[T], K]) -> DedupByKey[T]:
    """Deduplicate consecutive items of ``source`` sharing the same key."""

    return DedupByKey(source, key_fn)


__all__ = ["Dedup", "DedupByKey", "dedup", "dedup_by_key"]
