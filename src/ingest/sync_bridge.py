"""Blocking access to a Source.

Synchronous callers run the async pipeline on an ``asyncio.Runner`` they
own. There is no hidden process-wide event loop: whoever creates the
runner closes it, usually through :func:`open_blocking`.
"""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from typing import Iterator

from core.types import Header
from grid.info import Info
from grid.member import Member
from ingest.index import Index
from ingest.source import Source


class BlockingSource:
    """Synchronous facade over :class:`Source`.

    A runner executes one coroutine at a time, so an instance must not be
    shared between threads.
    """

    def __init__(self, source: Source, runner: asyncio.Runner) -> None:
        self._source = source
        self._runner = runner

    @property
    def source(self) -> Source:
        return self._source

    def index(self) -> Index:
        return self._runner.run(self._source.index())

    def info(self, header: Header) -> Info:
        return self._runner.run(self._source.info(header))

    def set(self, header: Header) -> None:
        self._runner.run(self._source.set(header))

    def member(self, header: Header, member: int) -> Member:
        return self._runner.run(self._source.member(header, member))

    def cached_sets(self) -> list[str]:
        return self._runner.run(self._source.cached_sets())


@contextmanager
def open_blocking(source: Source) -> Iterator[BlockingSource]:
    """Yield a blocking facade backed by a dedicated runner.

    Args:
        source: Async source to drive.

    Yields:
        Facade whose runner is closed when the context exits.
    """
    with asyncio.Runner() as runner:
        yield BlockingSource(source, runner)
