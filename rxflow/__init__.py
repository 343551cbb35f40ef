"""Public package surface for rxflow."""

from __future__ import annotations

from . import testkit
from .batch import (
    Batch,
    BatchDecision,
    BatchOnSignal,
    BatchPolicy,
    batch_on_signal,
    batch_with,
)
from .config import BatchPolicyConfig, DriverConfig, PolicyKind, policy_from_config
from .dedup import Dedup, DedupByKey, dedup, dedup_by_key
from .driver import aiterate, drain
from .errors import (
    ChannelClosedError,
    InvalidBatchDecisionError,
    ReleaseError,
    RxFlowError,
    StalledSourceError,
)
from .policies import AlwaysAppend, Delimiter, FlushSignal, FunctionPolicy, MaxSize
from .poll import DONE, PENDING, Item, PollResult, PullSource, PullStream, Signal, release, stream
from .sources import Receiver, Sender, chain, channel, empty, iter_source, pending
from .switch import Switch, SwitchState, switch

__all__ = [
    "__version__",
    "AlwaysAppend",
    "Batch",
    "BatchDecision",
    "BatchOnSignal",
    "BatchPolicy",
    "BatchPolicyConfig",
    "ChannelClosedError",
    "DONE",
    "Dedup",
    "DedupByKey",
    "Delimiter",
    "DriverConfig",
    "FlushSignal",
    "FunctionPolicy",
    "InvalidBatchDecisionError",
    "Item",
    "MaxSize",
    "PENDING",
    "PolicyKind",
    "PollResult",
    "PullSource",
    "PullStream",
    "Receiver",
    "ReleaseError",
    "RxFlowError",
    "Sender",
    "Signal",
    "StalledSourceError",
    "Switch",
    "SwitchState",
    "aiterate",
    "batch_on_signal",
    "batch_with",
    "chain",
    "channel",
    "dedup",
    "dedup_by_key",
    "drain",
    "empty",
    "iter_source",
    "pending",
    "policy_from_config",
    "release",
    "stream",
    "switch",
    "testkit",
]

__version__ = "0.1.0"
