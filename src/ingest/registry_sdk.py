"""Python SDK over configured registries.

This module exposes blocking, high-level APIs for index lookup and set
loading. Set handles memoize metadata and members after the first load.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from pathlib import Path

from core.config import PartonsConfig
from core.errors import PartonsLookupError
from core.types import Header, SourceConfig
from engine.interface import PdfBackend
from engine.noop import NoopBackend
from grid.info import Info
from grid.member import Member
from ingest.index import Index
from ingest.source import Source
from ingest.sync_bridge import open_blocking


class PartonsClient:
    """Primary SDK entry point for registry access."""

    def __init__(
        self,
        config: PartonsConfig | None = None,
        backend: PdfBackend | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            backend: Optional physics-engine backend; the no-op one when omitted.
        """
        self._config = config or PartonsConfig.from_env()
        self._backend: PdfBackend = backend or NoopBackend()

    @property
    def config(self) -> PartonsConfig:
        return self._config

    @property
    def backend(self) -> PdfBackend:
        return self._backend

    def sources(self) -> tuple[SourceConfig, ...]:
        """Return configured registries in file order."""
        return self._config.sources

    def source(self, source_name: str | None = None) -> Source:
        """Build an async source for a configured registry.

        Args:
            source_name: Registry name; the first configured one when omitted.

        Raises:
            PartonsConfigError: If the registry is not configured.
        """
        return Source.from_config(self._config, source_name)

    def index(self, source_name: str | None = None) -> Index:
        """Fetch the index of a registry.

        Args:
            source_name: Registry name; the first configured one when omitted.

        Returns:
            Parsed registry index.
        """
        with open_blocking(self.source(source_name)) as blocking:
            return blocking.index()

    def cached_sets(self, source_name: str | None = None) -> list[str]:
        """List sets already present in a registry's local cache."""
        return self.source(source_name).cache.sets()

    def set(self, pattern: str, source_name: str | None = None) -> "PartonSet":
        """Resolve a set by name pattern.

        Args:
            pattern: Regular expression matched against full set names.
            source_name: Registry name; the first configured one when omitted.

        Returns:
            Lazily loading set handle.

        Raises:
            SetNotFoundError: If no set matches.
            AmbiguousPatternError: If several sets match.
        """
        source = self.source(source_name)
        with open_blocking(source) as blocking:
            header = blocking.index().get(pattern)
        return PartonSet(source, header)

    def with_data_root(self, data_root: str) -> "PartonsClient":
        """Clone the client with a different local data root.

        Args:
            data_root: New data root path.

        Returns:
            New SDK client instance.
        """
        resolved_root = Path(data_root).expanduser().resolve()
        return PartonsClient(replace(self._config, data_root=resolved_root), self._backend)


class PartonSet:
    """Handle on one set of a registry."""

    def __init__(self, source: Source, header: Header) -> None:
        self._source = source
        self._header = header
        self._info: Info | None = None
        self._members: dict[int, Member] = {}

    @property
    def header(self) -> Header:
        return self._header

    @property
    def name(self) -> str:
        return self._header.name

    def __len__(self) -> int:
        return self._header.member_count

    def info(self) -> Info:
        """Return set metadata, loading it on first access."""
        if self._info is None:
            with open_blocking(self._source) as blocking:
                self._info = blocking.info(self._header)
        return self._info

    def member(self, member: int) -> Member:
        """Return one member, loading it on first access.

        Raises:
            PartonsLookupError: If ``member`` is outside the set.
        """
        self._check_member(member)
        if member not in self._members:
            with open_blocking(self._source) as blocking:
                self._members[member] = blocking.member(self._header, member)
        return self._members[member]

    def members(self) -> list[Member]:
        """Return every member, loading missing ones concurrently."""
        missing = [
            member for member in range(self._header.member_count) if member not in self._members
        ]
        if missing:
            loaded = asyncio.run(self._load_members(missing))
            self._members.update(zip(missing, loaded))
        return [self._members[member] for member in range(self._header.member_count)]

    def materialize(self) -> None:
        """Download and unpack the whole set archive into the cache.

        Raises:
            PartonsConfigError: If the registry publishes one file per member.
        """
        with open_blocking(self._source) as blocking:
            blocking.set(self._header)

    async def _load_members(self, members: list[int]) -> list[Member]:
        return list(
            await asyncio.gather(
                *(self._source.member(self._header, member) for member in members)
            )
        )

    def _check_member(self, member: int) -> None:
        if not 0 <= member < self._header.member_count:
            raise PartonsLookupError(
                f"Member {member} is outside {self._header.identifier()}, "
                f"which has {self._header.member_count} members."
            )

    def __repr__(self) -> str:
        return f"PartonSet(name={self.name!r}, members={len(self)})"
