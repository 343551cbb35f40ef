"""Policy-driven batching adaptor.

:class:`Batch` pulls items eagerly and asks a :class:`BatchPolicy` what to do
with each one. The policy answers with a :class:`BatchDecision`; the adaptor
owns the partial batch and never emits an empty one. :class:`BatchOnSignal`
emits whatever it has collected each time a companion signal source fires.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum
from typing import Any, Protocol, TypeVar

from .errors import InvalidBatchDecisionError
from .poll import CLOSED, DONE, PENDING, Item, PullSource, PullStream, Signal, release

logger = logging.getLogger("rxflow.batch")

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)


class BatchDecision(str, Enum):
    """What to do with an incoming item."""

    APPEND = "append"  # add to the batch, keep collecting
    FLUSH_THEN_APPEND = "flush_then_append"  # emit the batch, start a new one with the item
    FLUSH_WITHOUT_ITEM = "flush_without_item"  # emit the batch, drop the item


class BatchPolicy(Protocol[T_contra]):
    """Decides, per incoming item, how the current batch evolves."""

    def decide(self, batch: Sequence[T_contra], item: T_contra) -> BatchDecision: ...


class Batch(PullStream[list[T]]):
    """Groups upstream items into ordered, non-empty lists."""

    __slots__ = ("_source", "_policy", "_batch", "_terminated")

    def __init__(self, source: PullSource[T], policy: BatchPolicy[T]) -> None:
        self._source = source
        self._policy = policy
        self._batch: list[T] = []
        self._terminated = False

    @property
    def pending_count(self) -> int:
        """Number of items collected but not yet emitted."""

        return len(self._batch)

    def poll(self) -> Item[list[T]] | Signal:
        if self._terminated:
            return DONE

        while True:
            result = self._source.poll()
            if not isinstance(result, Item):
                if result is not DONE:
                    return result
                self._terminated = True
                if not self._batch:
                    return DONE
                return self._flush("upstream_done")

            item = result.value
            decision = self._decide(item)
            if decision is BatchDecision.APPEND:
                self._batch.append(item)
            elif decision is BatchDecision.FLUSH_THEN_APPEND:
                if not self._batch:
                    self._batch.append(item)
                    continue
                flushed = self._flush("flush_then_append")
                self._batch.append(item)
                return flushed
            elif self._batch:
                # the item is dropped either way
                return self._flush("flush_without_item")

    def _decide(self, item: T) -> BatchDecision:
        decision = self._policy.decide(tuple(self._batch), item)
        try:
            return BatchDecision(decision)
        except (TypeError, ValueError):
            raise InvalidBatchDecisionError(self._policy, decision) from None

    def _flush(self, reason: str) -> Item[list[T]]:
        batch, self._batch = self._batch, []
        return _emit(batch, reason)

    def close(self) -> None:
        self._terminated = True
        self._batch = []
        source, self._source = self._source, CLOSED
        try:
            release(source)
        finally:
            release(self._policy)


class BatchOnSignal(PullStream[list[T]]):
    """Collects upstream items and emits them whenever ``signal`` produces a value.

    Every ready upstream item is collected before the signal is polled. A
    signal value that meets an empty batch is consumed without emitting. Once
    the signal completes it is released and the remaining items are emitted
    when upstream completes.
    """

    __slots__ = ("_source", "_signal", "_batch", "_terminated")

    def __init__(self, source: PullSource[T], signal: PullSource[Any]) -> None:
        self._source = source
        self._signal: PullSource[Any] = signal
        self._batch: list[T] = []
        self._terminated = False

    @property
    def pending_count(self) -> int:
        return len(self._batch)

    def poll(self) -> Item[list[T]] | Signal:
        if self._terminated:
            return DONE

        while True:
            result = self._source.poll()
            if isinstance(result, Item):
                self._batch.append(result.value)
                continue
            if result is DONE:
                self._terminated = True
                if not self._batch:
                    return DONE
                return self._flush("upstream_done")
            break

        signal = self._signal.poll()
        if signal is DONE:
            signal_source, self._signal = self._signal, CLOSED
            release(signal_source)
            return PENDING
        if not isinstance(signal, Item) or not self._batch:
            return PENDING
        return self._flush("signal")

    def _flush(self, reason: str) -> Item[list[T]]:
        batch, self._batch = self._batch, []
        return _emit(batch, reason)

    def close(self) -> None:
        self._terminated = True
        self._batch = []
        source, self._source = self._source, CLOSED
        signal, self._signal = self._signal, CLOSED
        try:
            release(source)
        finally:
            release(signal)


def _emit(batch: list[T], reason: str) -> Item[list[T]]:
    logger.debug("batch_flushed", extra={"size": len(batch), "reason": reason})
    return Item(batch)


def batch_with(source: PullSource[T], policy: BatchPolicy[T]) -> Batch[T]:
    """Batch the items of ``source`` according to ``policy``."""

    return Batch(source, policy)


def batch_on_signal(source: PullSource[T], signal: PullSource[Any]) -> BatchOnSignal[T]:
    """Batch the items of ``source``, emitting whenever ``signal`` produces a value."""

    return BatchOnSignal(source, signal)


__all__ = [
    "Batch",
    "BatchDecision",
    "BatchOnSignal",
    "BatchPolicy",
    "batch_on_signal",
    "batch_with",
]
