"""Bridges from the poll contract to Python iteration.

Adaptors never block; these helpers are the only place that waits. On
``PENDING`` :func:`aiterate` hands control back to the asyncio event loop
before polling again.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import TypeVar

from .config import DriverConfig
from .errors import StalledSourceError
from .poll import DONE, Item, PullSource, release

logger = logging.getLogger("rxflow.driver")

T = TypeVar("T")


async def aiterate(
    source: PullSource[T],
    *,
    config: DriverConfig | None = None,
) -> AsyncIterator[T]:
    """Poll ``source`` to completion, yielding each produced value.

    The source is released when iteration stops early (``break``, exception,
    cancellation) as well as after completion.
    """

    cfg = config or DriverConfig()
    idle_polls = 0
    try:
        while True:
            result = source.poll()
            if isinstance(result, Item):
                idle_polls = 0
                yield result.value
                continue
            if result is DONE:
                return
            idle_polls += 1
            if cfg.max_idle_polls is not None and idle_polls >= cfg.max_idle_polls:
                logger.warning(
                    "driver_source_stalled",
                    extra={"source": type(source).__name__, "idle_polls": idle_polls},
                )
                raise StalledSourceError(
                    f"{type(source).__name__} stayed pending for {idle_polls} polls",
                    idle_polls=idle_polls,
                )
            await asyncio.sleep(cfg.idle_sleep_s)
    finally:
        release(source)


def drain(source: PullSource[T]) -> list[T]:
    """Collect every value of a source that never goes pending.

    Raises :class:`StalledSourceError` on the first ``PENDING``. The source is
    released in all cases.
    """

    values: list[T] = []
    try:
        while True:
            result = source.poll()
            if isinstance(result, Item):
                values.append(result.value)
            elif result is DONE:
                return values
            else:
                raise StalledSourceError(
                    f"{type(source).__name__} went pending after {len(values)} items"
                )
    finally:
        release(source)


__all__ = ["aiterate", "drain"]
