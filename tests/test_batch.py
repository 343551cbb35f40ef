"""Tests for the policy-driven batching adaptor."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pytest

from rxflow import (
    PENDING,
    AlwaysAppend,
    BatchDecision,
    FunctionPolicy,
    InvalidBatchDecisionError,
    MaxSize,
    batch_with,
    channel,
    drain,
    empty,
    iter_source,
)
from rxflow.testkit import ScriptedSource, assert_closed, assert_next_eq, assert_pending


class _RecordingPolicy:
    def __init__(self, decisions: Sequence[BatchDecision]) -> None:
        self._decisions = list(decisions)
        self.seen: list[tuple[tuple[Any, ...], Any]] = []
        self.closed = False

    def decide(self, batch: Sequence[Any], item: Any) -> BatchDecision:
        self.seen.append((tuple(batch), item))
        return self._decisions.pop(0)

    def close(self) -> None:
        self.closed = True


def test_size_bounded_batches_flush_remainder_on_completion() -> None:
    stream = batch_with(iter_source("abcdefg"), MaxSize(3))
    assert drain(stream) == [["a", "b", "c"], ["d", "e", "f"], ["g"]]


def test_always_append_emits_once_on_completion() -> None:
    sender, receiver = channel()
    stream = batch_with(receiver, AlwaysAppend())

    assert_pending(stream)
    for value in (1, 2, 3):
        sender.send(value)
    assert_pending(stream)
    assert stream.pending_count == 3

    sender.send(4)
    sender.close()

    assert_next_eq(stream, [1, 2, 3, 4])
    assert_closed(stream)


def test_empty_upstream_never_emits() -> None:
    stream = batch_with(empty(), AlwaysAppend())
    assert_closed(stream)


def test_done_after_final_batch_does_not_poll_upstream_again() -> None:
    source = ScriptedSource([1, 2])
    stream = batch_with(source, AlwaysAppend())

    assert_next_eq(stream, [1, 2])
    assert_closed(stream)
    assert_closed(stream)
    assert not source.polled_after_done


def test_partial_batch_survives_pending() -> None:
    source = ScriptedSource([1, PENDING, 2, PENDING, 3, 4])
    stream = batch_with(source, MaxSize(3))

    assert_pending(stream)
    assert_pending(stream)
    assert_next_eq(stream, [1, 2, 3])
    assert_next_eq(stream, [4])
    assert_closed(stream)


def test_flush_then_append_on_empty_batch_appends() -> None:
    policy = _RecordingPolicy(
        [BatchDecision.FLUSH_THEN_APPEND, BatchDecision.APPEND, BatchDecision.FLUSH_THEN_APPEND]
    )
    stream = batch_with(iter_source(["x", "y", "z"]), policy)

    assert_next_eq(stream, ["x", "y"])
    assert_next_eq(stream, ["z"])
    assert_closed(stream)
    assert policy.seen == [((), "x"), (("x",), "y"), (("x", "y"), "z")]


def test_flush_without_item_drops_the_item() -> None:
    policy = _RecordingPolicy(
        [
            BatchDecision.FLUSH_WITHOUT_ITEM,  # empty batch: dropped, keep pulling
            BatchDecision.APPEND,
            BatchDecision.APPEND,
            BatchDecision.FLUSH_WITHOUT_ITEM,
            BatchDecision.APPEND,
        ]
    )
    stream = batch_with(iter_source(["|", "a", "b", "|", "c"]), policy)

    assert_next_eq(stream, ["a", "b"])
    assert_next_eq(stream, ["c"])
    assert_closed(stream)


def test_policy_sees_read_only_snapshot() -> None:
    snapshots: list[Any] = []

    def record(batch: Sequence[int], item: int) -> BatchDecision:
        snapshots.append(batch)
        return BatchDecision.APPEND

    drain(batch_with(iter_source([1, 2]), FunctionPolicy(record)))
    assert snapshots == [(), (1,)]
    assert all(isinstance(snapshot, tuple) for snapshot in snapshots)


def test_string_decisions_are_accepted() -> None:
    policy = FunctionPolicy(
        lambda batch, item: "flush_then_append" if len(batch) == 2 else "append"
    )
    assert drain(batch_with(iter_source(range(5)), policy)) == [[0, 1], [2, 3], [4]]


def test_unknown_decision_raises() -> None:
    stream = batch_with(iter_source([1]), FunctionPolicy(lambda batch, item: "maybe"))
    with pytest.raises(InvalidBatchDecisionError):
        stream.poll()


def test_policy_errors_propagate() -> None:
    def boom(batch: Sequence[int], item: int) -> BatchDecision:
        raise ZeroDivisionError

    stream = batch_with(iter_source([1]), FunctionPolicy(boom))
    with pytest.raises(ZeroDivisionError):
        stream.poll()


def test_no_item_is_lost_or_duplicated() -> None:
    values = list(range(23))
    batches = drain(batch_with(iter_source(values), MaxSize(4)))
    assert all(batches)
    assert [item for batch in batches for item in batch] == values


def test_close_discards_partial_batch_and_releases() -> None:
    source = ScriptedSource([1, 2], then_pending=True)
    policy = _RecordingPolicy([BatchDecision.APPEND, BatchDecision.APPEND])
    stream = batch_with(source, policy)

    assert_pending(stream)
    assert stream.pending_count == 2

    stream.close()

    assert source.closed
    assert policy.closed
    assert stream.pending_count == 0
    assert_closed(stream)


def test_context_manager_releases() -> None:
    source = ScriptedSource(then_pending=True)
    with batch_with(source, AlwaysAppend()) as stream:
        assert_pending(stream)
    assert source.closed


def test_batches_compose_over_dedup() -> None:
    stream = iter_source([1, 1, 2, 3, 3, 3, 4, 5]).dedup().batch_with(MaxSize(2))
    assert drain(stream) == [[1, 2], [3, 4], [5]]


class _ClockedPolicy:
    """Caller-owned time-assisted policy: flush when the batch outlives ``window``."""

    def __init__(self, clock: list[float], window: float) -> None:
        self._clock = clock
        self._window = window
        self._opened_at = 0.0

    def decide(self, batch: Sequence[Any], item: Any) -> BatchDecision:
        now = self._clock[0]
        if not batch:
            self._opened_at = now
            return BatchDecision.APPEND
        if now - self._opened_at >= self._window:
            self._opened_at = now
            return BatchDecision.FLUSH_THEN_APPEND
        return BatchDecision.APPEND


def test_time_assisted_policy_consults_its_own_clock() -> None:
    clock = [0.0]
    source = ScriptedSource([1, 2, PENDING, 3, PENDING, 4])
    stream = batch_with(source, _ClockedPolicy(clock, window=5.0))

    assert_pending(stream)
    clock[0] = 4.9
    assert_pending(stream)
    clock[0] = 5.0
    assert_next_eq(stream, [1, 2, 3])
    assert_next_eq(stream, [4])
    assert_closed(stream)
