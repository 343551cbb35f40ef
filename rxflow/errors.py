"""Exception types raised by rxflow adaptors, sources and drivers."""

from __future__ import annotations

from typing import Any


class RxFlowError(Exception):
    """Base class for rxflow errors."""


class InvalidBatchDecisionError(RxFlowError, TypeError):
    """Raised when a batch policy returns something other than a BatchDecision."""

    def __init__(self, policy: Any, decision: Any) -> None:
        policy_name = type(policy).__name__
        super().__init__(
            f"Batch policy {policy_name} returned {decision!r}; expected a BatchDecision"
        )
        self.policy = policy
        self.decision = decision


class StalledSourceError(RxFlowError):
    """Raised when a source stays pending where it was required to make progress."""

    def __init__(self, detail: str, *, idle_polls: int | None = None) -> None:
        super().__init__(detail)
        self.idle_polls = idle_polls


class ReleaseError(RxFlowError):
    """Raised when closing an owned source fails.

    Cleanup faults are fatal: the adaptor that owned the source is left
    without it and the original exception is chained as ``__cause__``.
    """

    def __init__(self, source: Any) -> None:
        super().__init__(f"Failed to release {type(source).__name__}")
        self.source = source


class ChannelClosedError(RxFlowError):
    """Raised when sending into a closed channel."""


__all__ = [
    "ChannelClosedError",
    "InvalidBatchDecisionError",
    "ReleaseError",
    "RxFlowError",
    "StalledSourceError",
]
