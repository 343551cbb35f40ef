"""Ready-made batch policies.

Each policy implements the single ``decide(batch, item)`` operation of
:class:`rxflow.batch.BatchPolicy`. Policies that keep state (``FlushSignal``)
belong to exactly one :class:`~rxflow.batch.Batch`.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .batch import BatchDecision
from .poll import DONE, Item, PullSource, release

T = TypeVar("T")


class AlwaysAppend:
    """Never flushes; the whole input becomes one batch on completion."""

    __slots__ = ()

    def decide(self, batch: Sequence[Any], item: Any) -> BatchDecision:
        return BatchDecision.APPEND


@dataclass(frozen=True, slots=True)
class MaxSize:
    """Flush once the batch holds ``max_size`` items."""

    max_size: int

    def __post_init__(self) -> None:
        if self.max_size < 1:
            raise ValueError("max_size must be >= 1")

    def decide(self, batch: Sequence[Any], item: Any) -> BatchDecision:
        if len(batch) >= self.max_size:
            return BatchDecision.FLUSH_THEN_APPEND
        return BatchDecision.APPEND


@dataclass(frozen=True, slots=True)
class Delimiter(Generic[T]):
    """Split batches on items matching ``is_delimiter``.

    By default the delimiter closes the current batch and is dropped. With
    ``leading=True`` it opens the next batch instead.
    """

    is_delimiter: Callable[[T], bool]
    leading: bool = False

    def decide(self, batch: Sequence[T], item: T) -> BatchDecision:
        if not self.is_delimiter(item):
            return BatchDecision.APPEND
        if self.leading:
            return BatchDecision.FLUSH_THEN_APPEND
        return BatchDecision.FLUSH_WITHOUT_ITEM


class FunctionPolicy(Generic[T]):
    """Adapts a plain ``fn(batch, item) -> BatchDecision`` to a policy."""

    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[[Sequence[T], T], BatchDecision]) -> None:
        self._fn = fn

    def decide(self, batch: Sequence[T], item: T) -> BatchDecision:
        return self._fn(batch, item)


class FlushSignal:
    """Flush before an item whenever ``signal`` has produced a value.

    ``signal`` is polled once per incoming item and released once it
    completes. Signals that arrive while no item does take effect on the next
    item; use :func:`rxflow.batch.batch_on_signal` to emit on the signal alone.
    """

    __slots__ = ("_signal",)

    def __init__(self, signal: PullSource[Any]) -> None:
        self._signal: PullSource[Any] | None = signal

    def decide(self, batch: Sequence[Any], item: Any) -> BatchDecision:
        if self._signal is None:
            return BatchDecision.APPEND
        result = self._signal.poll()
        if isinstance(result, Item):
            return BatchDecision.FLUSH_THEN_APPEND
        if result is DONE:
            self.close()
        return BatchDecision.APPEND

    def close(self) -> None:
        signal, self._signal = self._signal, None
        if signal is not None:
            release(signal)


__all__ = [
    "AlwaysAppend",
    "Delimiter",
    "FlushSignal",
    "FunctionPolicy",
    "MaxSize",
]
