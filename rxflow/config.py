"""Configuration models for batch policies and the asyncio driver."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from .batch import BatchPolicy
from .policies import AlwaysAppend, MaxSize


class PolicyKind(str, Enum):
    """Batch policies that can be built from configuration."""

    ALWAYS_APPEND = "always_append"
    MAX_SIZE = "max_size"


class BatchPolicyConfig(BaseModel):
    """Declarative description of a batch policy."""

    kind: PolicyKind = PolicyKind.ALWAYS_APPEND
    max_size: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def validate_config(self) -> BatchPolicyConfig:
        """Require the parameter matching ``kind``."""
        if self.kind == PolicyKind.MAX_SIZE and self.max_size is None:
            raise ValueError("kind=max_size requires max_size")
        return self


class DriverConfig(BaseModel):
    """Settings for :func:`rxflow.driver.aiterate`."""

    idle_sleep_s: float = Field(
        default=0.0,
        ge=0.0,
        description="Delay before re-polling a pending source (0 yields to the loop once)",
    )
    max_idle_polls: int | None = Field(
        default=None,
        ge=1,
        description="Consecutive pending polls tolerated before giving up (None = forever)",
    )


def policy_from_config(config: BatchPolicyConfig) -> BatchPolicy[object]:
    """Build the batch policy described by ``config``."""

    if config.kind == PolicyKind.MAX_SIZE:
        if config.max_size is None:
            raise ValueError("kind=max_size requires max_size")
        return MaxSize(config.max_size)
    return AlwaysAppend()


__all__ = [
    "BatchPolicyConfig",
    "DriverConfig",
    "PolicyKind",
    "policy_from_config",
]
