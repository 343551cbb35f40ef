"""Helpers for unit-testing rxflow pipelines.

``ScriptedSource`` replays a fixed sequence of poll outcomes and records when it
was released; the ``assert_*`` helpers check a single poll each.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Any

from .poll import DONE, PENDING, Item, PullSource, PullStream, Signal


class ScriptedSource(PullStream[Any]):
    """Replays ``script`` one entry per poll.

    Entries are :data:`PENDING`, :data:`DONE`, :class:`Item` instances or bare
    values (wrapped in ``Item``). After the script runs out the source reports
    ``DONE``, or ``PENDING`` forever when ``then_pending`` is set.
    """

    def __init__(self, script: Iterable[Any] = (), *, then_pending: bool = False) -> None:
        self._script: deque[Any] = deque(script)
        self._then_pending = then_pending
        self.polls = 0
        self.closed = False
        self.polled_after_done = False
        self._done = False

    def push(self, *entries: Any) -> None:
        self._script.extend(entries)

    def poll(self) -> Item[Any] | Signal:
        self.polls += 1
        if self._done:
            self.polled_after_done = True
            return DONE
        if self._script:
            entry = self._script.popleft()
        else:
            entry = PENDING if self._then_pending else DONE
        if entry is DONE:
            self._done = True
            return DONE
        if entry is PENDING or isinstance(entry, Item):
            return entry
        return Item(entry)

    def close(self) -> None:
        self.closed = True


def assert_next_eq(source: PullSource[Any], expected: Any) -> None:
    result = source.poll()
    assert isinstance(result, Item), f"expected Item({expected!r}), got {result!r}"
    assert result.value == expected, f"expected Item({expected!r}), got {result!r}"


def assert_pending(source: PullSource[Any]) -> None:
    result = source.poll()
    assert result is PENDING, f"expected Pending, got {result!r}"


def assert_closed(source: PullSource[Any]) -> None:
    result = source.poll()
    assert result is DONE, f"expected Done, got {result!r}"


__all__ = ["ScriptedSource", "assert_closed", "assert_next_eq", "assert_pending"]
