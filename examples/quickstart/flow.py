"""Quickstart: dedup, batch and switch driven from an asyncio task."""

from __future__ import annotations

import asyncio

from rxflow import MaxSize, aiterate, channel


async def produce(sessions_tx, values: list[list[int]]) -> None:
    for session in values:
        tx, rx = channel()
        sessions_tx.send(rx)
        for value in session:
            tx.send(value)
            await asyncio.sleep(0)
        tx.close()
        await asyncio.sleep(0.01)
    sessions_tx.close()


async def main() -> None:
    sessions_tx, sessions_rx = channel()
    pipeline = sessions_rx.switch().dedup().batch_with(MaxSize(3))

    producer = asyncio.create_task(
        produce(sessions_tx, [[1, 1, 2, 3, 3, 4], [10, 10, 11, 12, 13]])
    )
    async for batch in aiterate(pipeline):
        print(batch)
    await producer


if __name__ == "__main__":  # pragma: no cover - example entrypoint
    asyncio.run(main())
