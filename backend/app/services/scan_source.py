"""
Scan event sources.

A scan source yields raw scanned strings. The camera/decoder pipeline lives on
the host device; here a source is anything that can produce those strings,
e.g. a keyboard-wedge barcode scanner typing one code per line into stdin.
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable
from typing import Protocol, TextIO

from app.schemas.parts import ResolutionResult

logger = logging.getLogger(__name__)


class ScanSource(Protocol):
    def produce_scan_events(self) -> AsyncIterator[str]:
        """
        Lazily yield raw scans. The sequence may be infinite, can only be
        consumed once, and stops when the caller closes the iterator.
        """
        ...


class LineScanSource:
    """One scan per line of a text stream."""

    def __init__(self, stream: TextIO):
        self.stream = stream
        self._started = False

    async def produce_scan_events(self) -> AsyncIterator[str]:
        if self._started:
            raise RuntimeError("Scan source already consumed")
        self._started = True
        while True:
            line = await asyncio.to_thread(self.stream.readline)
            if not line:
                logger.info("Scan stream closed")
                return
            yield line.rstrip("\r\n")


async def suppress_repeats(
    events: AsyncIterator[str],
    cooldown: float,
    clock: Callable[[], float] = time.monotonic,
) -> AsyncIterator[str]:
    """Drop a scan equal to the previous one if it arrives within `cooldown` seconds."""
    last_value: str | None = None
    last_time = 0.0
    async for value in events:
        now = clock()
        if value == last_value and now - last_time < cooldown:
            logger.debug(f"Ignoring repeated scan {value}")
            continue
        last_value = value
        last_time = now
        yield value


async def run_scan_loop(
    source: ScanSource,
    session,
    on_result: Callable[[str, ResolutionResult], None],
    cooldown: float = 0.0,
) -> int:
    """Resolve every scan from `source` through `session`. Returns the number of scans handled."""
    handled = 0
    events = suppress_repeats(source.produce_scan_events(), cooldown)
    try:
        async for raw in events:
            result = await session.search(raw)
            on_result(raw, result)
            handled += 1
    finally:
        await events.aclose()
    return handled
