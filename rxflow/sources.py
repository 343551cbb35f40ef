"""In-process sources that feed rxflow adaptors."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Iterator
from typing import Any, TypeVar

from .errors import ChannelClosedError
from .poll import DONE, PENDING, Item, PullSource, PullStream, Signal, release

logger = logging.getLogger("rxflow.sources")

T = TypeVar("T")


class IterSource(PullStream[T]):
    """Yields every value of an iterable, then completes. Never pending."""

    __slots__ = ("_iterator",)

    def __init__(self, values: Iterable[T]) -> None:
        self._iterator: Iterator[T] | None = iter(values)

    def poll(self) -> Item[T] | Signal:
        if self._iterator is None:
            return DONE
        try:
            return Item(next(self._iterator))
        except StopIteration:
            self._iterator = None
            return DONE

    def close(self) -> None:
        iterator, self._iterator = self._iterator, None
        if iterator is not None:
            release(iterator)


class _Empty(PullStream[Any]):
    __slots__ = ()

    def poll(self) -> Signal:
        return DONE


class _Pending(PullStream[Any]):
    __slots__ = ()

    def poll(self) -> Signal:
        return PENDING


class Chain(PullStream[T]):
    """Polls each source in turn, moving on when the current one completes."""

    __slots__ = ("_sources",)

    def __init__(self, sources: Iterable[PullSource[T]]) -> None:
        self._sources: deque[PullSource[T]] = deque(sources)

    def poll(self) -> Item[T] | Signal:
        while self._sources:
            result = self._sources[0].poll()
            if result is not DONE:
                return result
            release(self._sources.popleft())
        return DONE

    def close(self) -> None:
        while self._sources:
            release(self._sources.popleft())


class _ChannelState:
    __slots__ = ("buffer", "sender_closed", "receiver_closed")

    def __init__(self) -> None:
        self.buffer: deque[Any] = deque()
        self.sender_closed = False
        self.receiver_closed = False


class Sender:
    """Producer half of :func:`channel`."""

    __slots__ = ("_state",)

    def __init__(self, state: _ChannelState) -> None:
        self._state = state

    def send(self, value: Any) -> None:
        if self._state.sender_closed or self._state.receiver_closed:
            raise ChannelClosedError("channel is closed")
        self._state.buffer.append(value)

    def close(self) -> None:
        """End the input; buffered values are still delivered."""

        self._state.sender_closed = True

    @property
    def closed(self) -> bool:
        return self._state.sender_closed or self._state.receiver_closed


class Receiver(PullStream[T]):
    """Consumer half of :func:`channel`; pending while the buffer is empty."""

    __slots__ = ("_state",)

    def __init__(self, state: _ChannelState) -> None:
        self._state = state

    def poll(self) -> Item[T] | Signal:
        state = self._state
        if state.buffer:
            return Item(state.buffer.popleft())
        if state.sender_closed or state.receiver_closed:
            return DONE
        return PENDING

    def close(self) -> None:
        """Drop buffered values and refuse further sends."""

        self._state.receiver_closed = True
        dropped = len(self._state.buffer)
        self._state.buffer.clear()
        logger.debug("receiver_released", extra={"dropped": dropped})

    @property
    def closed(self) -> bool:
        return self._state.receiver_closed


def iter_source(values: Iterable[T]) -> IterSource[T]:
    return IterSource(values)


def empty() -> PullStream[Any]:
    """A source that completes immediately."""

    return _Empty()


def pending() -> PullStream[Any]:
    """A source that never produces anything and never completes."""

    return _Pending()


def chain(*sources: PullSource[T]) -> Chain[T]:
    return Chain(sources)


def channel() -> tuple[Sender, Receiver[Any]]:
    """Create an unbounded in-memory channel."""

    state = _ChannelState()
    return Sender(state), Receiver(state)


__all__ = [
    "Chain",
    "IterSource",
    "Receiver",
    "Sender",
    "chain",
    "channel",
    "empty",
    "iter_source",
    "pending",
]
