"""Tests for scan sources and the scan loop."""

import io

import pytest

from app.schemas.parts import Found, NotFound, Rejected
from app.services.lookup_state import LookupSession
from app.services.part_importer import PartImporter
from app.services.part_resolver import PartResolver
from app.services.scan_source import LineScanSource, run_scan_loop, suppress_repeats


async def _collect(events):
    return [value async for value in events]


async def _from_list(values):
    for value in values:
        yield value


class FakeClock:
    def __init__(self, times):
        self.times = iter(times)

    def __call__(self):
        return next(self.times)


@pytest.mark.asyncio
async def test_line_source_strips_terminators_only():
    source = LineScanSource(io.StringIO("P4123\r\n A1 \n\nlast"))
    assert await _collect(source.produce_scan_events()) == ["P4123", " A1 ", "", "last"]


@pytest.mark.asyncio
async def test_line_source_not_restartable():
    source = LineScanSource(io.StringIO("A1\n"))
    await _collect(source.produce_scan_events())
    with pytest.raises(RuntimeError):
        await _collect(source.produce_scan_events())


@pytest.mark.asyncio
async def test_line_source_can_be_closed_early():
    source = LineScanSource(io.StringIO("A1\nB2\nC3\n"))
    events = source.produce_scan_events()
    assert await events.__anext__() == "A1"
    await events.aclose()


@pytest.mark.asyncio
async def test_repeats_within_cooldown_dropped():
    clock = FakeClock([0.0, 0.5, 1.0, 3.5, 3.6])
    events = suppress_repeats(_from_list(["A1", "A1", "A1", "A1", "B2"]), cooldown=2.0, clock=clock)
    assert await _collect(events) == ["A1", "A1", "B2"]


@pytest.mark.asyncio
async def test_zero_cooldown_keeps_everything():
    events = suppress_repeats(_from_list(["A1", "A1"]), cooldown=0.0)
    assert await _collect(events) == ["A1", "A1"]


@pytest.mark.asyncio
async def test_scan_loop_resolves_each_scan(store, sample_parts):
    await store.replace_all(sample_parts)
    session = LookupSession(PartResolver(store), PartImporter(store))
    results = []

    handled = await run_scan_loop(
        LineScanSource(io.StringIO("P4123\nNOPE\n\nP0123\n")),
        session,
        lambda raw, result: results.append((raw, type(result))),
    )

    assert handled == 4
    assert results == [
        ("P4123", Found),
        ("NOPE", NotFound),
        ("", Rejected),
        ("P0123", Found),
    ]
