"""Poll contract shared by every rxflow source and adaptor.

A :class:`PullSource` is advanced one step at a time by ``poll()`` and answers
with exactly one of :data:`PENDING`, :class:`Item` or :data:`DONE`. Once
``DONE`` has been returned the source must not be polled again.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar

from .errors import ReleaseError

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .batch import Batch, BatchOnSignal, BatchPolicy
    from .dedup import Dedup, DedupByKey
    from .switch import Switch

logger = logging.getLogger("rxflow.poll")

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


@dataclass(frozen=True, slots=True)
class Signal:
    """Payload-free poll outcome."""

    name: str

    def __repr__(self) -> str:
        return self.name


PENDING = Signal("Pending")
DONE = Signal("Done")


@dataclass(frozen=True, slots=True)
class Item(Generic[T]):
    """Poll outcome carrying a produced value."""

    value: T


PollResult = Item[T] | Signal


class PullSource(Protocol[T_co]):
    """Anything that can be polled for its next value.

    ``close()`` is optional; owners call it through :func:`release` when they
    give up the source.
    """

    def poll(self) -> Item[T_co] | Signal: ...


def release(source: Any) -> None:
    """Synchronously release ``source`` if it exposes ``close()``.

    A failing ``close()`` is re-raised as :class:`ReleaseError`.
    """

    close = getattr(source, "close", None)
    if close is None:
        return
    try:
        close()
    except Exception as exc:
        logger.error(
            "source_release_failed",
            extra={"source": type(source).__name__, "exception": exc},
        )
        raise ReleaseError(source) from exc


class PullStream(ABC, Generic[T]):
    """Base class for rxflow sources and adaptors.

    Provides release-on-exit context management and the fluent adaptor
    methods, so pipelines read left to right::

        with iter_source(values).dedup().batch_with(MaxSize(3)) as batches:
            ...
    """

    __slots__ = ()

    @abstractmethod
    def poll(self) -> Item[T] | Signal:
        """Advance by one step."""
        raise NotImplementedError

    def close(self) -> None:  # noqa: B027 - optional hook
        """Release owned resources. The default owns nothing."""

    def __enter__(self) -> PullStream[T]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def dedup(self, eq: Callable[[T, T], bool] | None = None) -> Dedup[T]:
        from .dedup import Dedup

        return Dedup(self, eq=eq)

    def dedup_by_key(self, key_fn: Callable[[T], Any]) -> DedupByKey[T]:
        from .dedup import DedupByKey

        return DedupByKey(self, key_fn)

    def batch_with(self, policy: BatchPolicy[T]) -> Batch[T]:
        from .batch import Batch

        return Batch(self, policy)

    def batch_on_signal(self, signal: PullSource[Any]) -> BatchOnSignal[T]:
        from .batch import BatchOnSignal

        return BatchOnSignal(self, signal)

    def switch(self) -> Switch[Any]:
        from .switch import Switch

        return Switch(self)


class _Wrapped(PullStream[T]):
    __slots__ = ("_source",)

    def __init__(self, source: PullSource[T]) -> None:
        self._source = source

    def poll(self) -> Item[T] | Signal:
        return self._source.poll()

    def close(self) -> None:
        release(self._source)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"stream({self._source!r})"


class _Closed:
    """Stand-in upstream left behind by a closed adaptor."""

    __slots__ = ()

    def poll(self) -> Signal:
        return DONE


CLOSED = _Closed()


def stream(source: PullSource[T]) -> PullStream[T]:
    """Give any :class:`PullSource` the fluent :class:`PullStream` surface."""

    if isinstance(source, PullStream):
        return source
    return _Wrapped(source)


__all__ = [
    "CLOSED",
    "DONE",
    "PENDING",
    "Item",
    "PollResult",
    "PullSource",
    "PullStream",
    "Signal",
    "release",
    "stream",
]
