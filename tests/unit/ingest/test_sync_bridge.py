"""Unit tests for the blocking source facade."""

from __future__ import annotations

import asyncio

from ingest.sync_bridge import BlockingSource, open_blocking
from tests.fake_registry import FakeRegistry, legacy_routes


def test_open_blocking_runs_async_operations(source_factory) -> None:
    """The facade should drive index, info, and member calls."""
    source = source_factory(FakeRegistry(legacy_routes()))

    with open_blocking(source) as blocking:
        header = blocking.index().get("DEMO_SET")
        info = blocking.info(header)
        member = blocking.member(header, 0)
        cached = blocking.cached_sets()

    assert info.year == 2024
    assert member.pids == (1, 21)
    assert cached == ["DEMO_SET"]


def test_caller_owned_runner_stays_open(source_factory) -> None:
    """A runner passed in by the caller is not closed by the facade."""
    source = source_factory(FakeRegistry(legacy_routes()))

    with asyncio.Runner() as runner:
        blocking = BlockingSource(source, runner)
        first = blocking.index()
        second = blocking.index()
        loop_open = not runner.get_loop().is_closed()

    assert len(first) == len(second) == 3
    assert loop_open
