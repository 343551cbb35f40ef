"""Switch adaptor: follow only the most recent inner source.

The outer source produces inner sources. Every poll first drains the outer
of whatever inners it has ready, adopting the newest and releasing each one it
supersedes, and only then polls the surviving inner. A value the superseded
inner had ready is never observed.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, TypeVar

from .poll import DONE, PENDING, Item, PullSource, PullStream, Signal, release

logger = logging.getLogger("rxflow.switch")

T = TypeVar("T")


class SwitchState(str, Enum):
    AWAITING_INNER = "awaiting_inner"
    ACTIVE = "active"
    OUTER_EXHAUSTED = "outer_exhausted"
    COMPLETE = "complete"


class Switch(PullStream[T]):
    """Flattens a source of sources, preempting stale inners."""

    __slots__ = ("_outer", "_inner", "_state", "_generation")

    def __init__(self, outer: PullSource[PullSource[T]]) -> None:
        self._outer: PullSource[PullSource[T]] | None = outer
        self._inner: PullSource[T] | None = None
        self._state = SwitchState.AWAITING_INNER
        self._generation = 0

    @property
    def state(self) -> SwitchState:
        return self._state

    @property
    def generation(self) -> int:
        """Number of inner sources adopted so far."""

        return self._generation

    def poll(self) -> Item[T] | Signal:
        if self._state is SwitchState.COMPLETE:
            return DONE

        if self._outer is not None:
            while True:
                result = self._outer.poll()
                if isinstance(result, Item):
                    self._replace_inner(result.value)
                    continue
                if result is DONE:
                    self._release_outer()
                    if self._inner is None:
                        self._complete()
                        return DONE
                    self._state = SwitchState.OUTER_EXHAUSTED
                break

        if self._inner is None:
            return PENDING

        result = self._inner.poll()
        if result is not DONE:
            return result

        self._release_inner()
        if self._state is SwitchState.OUTER_EXHAUSTED:
            self._complete()
            return DONE
        self._state = SwitchState.AWAITING_INNER
        return PENDING

    def _replace_inner(self, inner: PullSource[T]) -> None:
        # the superseded inner is fully released before the new one is polled
        self._release_inner()
        self._inner = inner
        self._generation += 1
        self._state = SwitchState.ACTIVE
        logger.debug(
            "switch_inner_replaced",
            extra={"generation": self._generation, "inner": type(inner).__name__},
        )

    def _release_inner(self) -> None:
        inner, self._inner = self._inner, None
        if inner is not None:
            release(inner)

    def _release_outer(self) -> None:
        outer, self._outer = self._outer, None
        if outer is not None:
            release(outer)

    def _complete(self) -> None:
        self._state = SwitchState.COMPLETE
        logger.debug("switch_complete", extra={"generation": self._generation})

    def close(self) -> None:
        self._state = SwitchState.COMPLETE
        try:
            self._release_inner()
        finally:
            self._release_outer()


def switch(outer: PullSource[PullSource[Any]]) -> Switch[Any]:
    """Emit items from the most recently produced inner source of ``outer``."""

    return Switch(outer)


__all__ = ["Switch", "SwitchState", "switch"]
