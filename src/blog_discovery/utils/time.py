"""Time utilities."""

from __future__ import annotations

import asyncio
import time


def current_time_ms() -> int:
    return int(time.time() * 1000)


def elapsed_ms(start_time_ms: int) -> int:
    return max(0, current_time_ms() - start_time_ms)


async def polite_delay(delay_ms: int) -> None:
    if delay_ms > 0:
        await asyncio.sleep(delay_ms / 1000)
