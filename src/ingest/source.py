"""Fetch, convert, and cache pipeline for one registry.

Each request walks a one-directional state machine. A cached regular
entry is served as is. A cached original entry is converted, stored as
regular, and served. Otherwise the original is downloaded first.
Concurrent requests for the same resource share one in-flight task.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import httpx

from core.config import PartonsConfig
from core.constants import (
    ARCHIVE_SUFFIXES,
    DEFAULT_HTTP_RETRIES,
    DEFAULT_HTTP_TIMEOUT,
    MEMBER_PLACEHOLDER,
    NAME_PLACEHOLDER,
)
from core.errors import CacheMissError, PartonsConfigError, PartonsParseError
from core.logging_config import get_logger
from core.types import Header, SourceConfig
from grid.info import Info
from grid.member import Member
from ingest.format_converter import convert
from ingest.index import Index
from ingest.remote_fetch import download
from store.file_cache import FileCache
from store.info_payload import load_info
from store.member_payload import decode_member
from store.resource import (
    Data,
    IndexData,
    InfoData,
    MemberData,
    Resource,
    SetData,
    State,
)

_LOGGER = get_logger(__name__)


class Source:
    """Async access to the index, metadata, and members of one registry."""

    def __init__(
        self,
        config: SourceConfig,
        cache: FileCache,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        retries: int = DEFAULT_HTTP_RETRIES,
    ) -> None:
        """Create a registry source.

        Args:
            config: Registry connection settings.
            cache: Cache rooted at this registry's directory.
            client: Optional shared HTTP client; owned by the caller.
            timeout: Per-request timeout in seconds.
            retries: Retry budget for transient network failures.
        """
        self._config = config
        self._cache = cache
        self._client = client
        self._timeout = timeout
        self._retries = retries
        self._in_flight: dict[Resource, asyncio.Future[bytes]] = {}

    @classmethod
    def from_config(
        cls,
        config: PartonsConfig,
        name: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> "Source":
        """Build a source for a configured registry.

        Args:
            config: Runtime configuration.
            name: Registry name; the first configured registry when omitted.
            client: Optional shared HTTP client.

        Returns:
            Source with a cache under the configured data root.

        Raises:
            PartonsConfigError: If the registry is not configured.
        """
        source_config = config.source(name)
        return cls(
            config=source_config,
            cache=FileCache.for_registry(config.data_root, source_config.name),
            client=client,
            timeout=config.http_timeout,
            retries=config.http_retries,
        )

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> SourceConfig:
        return self._config

    @property
    def cache(self) -> FileCache:
        return self._cache

    @property
    def cache_root(self) -> Path:
        return self._cache.root

    def is_archive(self) -> bool:
        """Return whether grids are published as one archive per set."""
        return self._config.patterns.grids.endswith(ARCHIVE_SUFFIXES)

    async def index(self) -> Index:
        """Fetch and parse the registry index.

        Raises:
            PartonsNetworkError: If the index cannot be downloaded.
            PartonsParseError: If the index is malformed.
        """
        content = await self.fetch(IndexData(), self._config.index)
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as error:
            raise PartonsParseError(
                f"Index of source '{self.name}' is not valid UTF-8: {error}."
            ) from error
        return Index.parse(text)

    async def info(self, header: Header) -> Info:
        """Fetch the metadata of a set.

        Raises:
            PartonsNetworkError: If the metadata cannot be downloaded.
            PartonsParseError: If the metadata cannot be decoded.
        """
        url = self.remote_url(self._config.patterns.info, header.name)
        try:
            content = await self.fetch(InfoData(header.name), url)
            return load_info(content)
        except PartonsParseError as error:
            raise PartonsParseError(
                f"Failed to decode info of {header.identifier()}: {error}"
            ) from error

    async def set(self, header: Header) -> None:
        """Materialize every file of a set archive in the cache.

        Raises:
            PartonsConfigError: If the registry publishes one file per member.
            PartonsNetworkError: If the archive cannot be downloaded.
            PartonsParseError: If the archive cannot be unpacked.
        """
        if not self.is_archive():
            raise PartonsConfigError(
                f"Source '{self.name}' publishes one grid file per member and has no set "
                "archive. Fetch members individually instead."
            )
        url = self.remote_url(self._config.patterns.grids, header.name)
        await self.fetch(SetData(header.name), url)

    async def member(self, header: Header, member: int) -> Member:
        """Fetch and decode one member of a set.

        For archive registries the set is materialized first and the member
        is converted from its unpacked entry.

        Args:
            header: Set header from the index.
            member: Zero-based member number.

        Returns:
            Decoded member.

        Raises:
            CacheMissError: If an archive registry's set has no such member.
            PartonsNetworkError: If the grid cannot be downloaded.
            PartonsParseError: If the grid cannot be decoded.
        """
        data = MemberData(header.name, member)
        try:
            if self.is_archive():
                await self.set(header)
                content = await self.fetch(data, None)
            else:
                url = self.remote_url(self._config.patterns.grids, header.name, member)
                content = await self.fetch(data, url)
            return decode_member(content)
        except PartonsParseError as error:
            raise PartonsParseError(
                f"Failed to decode member {member} of {header.identifier()}: {error}"
            ) from error

    async def cached_sets(self) -> list[str]:
        """List sets with files in this registry's cache.

        Raises:
            PartonsConfigError: If nothing was ever cached for the registry.
        """
        return await asyncio.to_thread(self._cache.sets)

    def remote_url(self, pattern: str, set_name: str, member: int | None = None) -> str:
        """Expand a remote path pattern against the registry base URL.

        Args:
            pattern: Path template with ``{name}`` and optional ``{member}``.
            set_name: Set name substituted for ``{name}``.
            member: Member number substituted, zero-padded, for ``{member}``.

        Returns:
            Absolute resource URL.

        Raises:
            PartonsConfigError: If the pattern needs a member number and none is given.
        """
        path = pattern.replace(NAME_PLACEHOLDER, set_name)
        if member is not None:
            width = self._config.format.member_width
            path = path.replace(MEMBER_PLACEHOLDER, f"{member:0{width}d}")
        if MEMBER_PLACEHOLDER in path:
            raise PartonsConfigError(
                f"Pattern '{pattern}' of source '{self.name}' needs a member number."
            )
        return f"{self._config.url.rstrip('/')}/{path.lstrip('/')}"

    async def fetch(self, data: Data, url: str | None) -> bytes:
        """Return the regular bytes of ``data``, fetching them if needed.

        Concurrent calls for the same data share one in-flight task.
        Cancelling one caller does not cancel the shared task.

        Args:
            data: Resource to load.
            url: Remote location; ``None`` when the resource only comes
                from an unpacked archive.

        Returns:
            Regular-state bytes.
        """
        resource = Resource(data)
        task = self._in_flight.get(resource)
        if task is None:
            task = asyncio.ensure_future(self._resolve(data, url))
            self._in_flight[resource] = task
            task.add_done_callback(lambda done: self._forget(resource, done))
        return await asyncio.shield(task)

    def _forget(self, resource: Resource, task: asyncio.Future[bytes]) -> None:
        if self._in_flight.get(resource) is task:
            del self._in_flight[resource]

    async def _resolve(self, data: Data, url: str | None) -> bytes:
        regular = Resource(data)
        original = Resource(data, State.ORIGINAL)
        if await asyncio.to_thread(self._cache.exists, regular):
            return await asyncio.to_thread(self._cache.read, regular)
        if await asyncio.to_thread(self._cache.exists, original):
            raw = await asyncio.to_thread(self._cache.read, original)
        elif url is None:
            raise CacheMissError(
                f"Resource '{original}' not found in cache at {self._cache.absolute(original)}. "
                "The set archive does not contain it."
            )
        else:
            raw = await download(url, self._client, self._timeout, self._retries)
            await asyncio.to_thread(self._cache.write, original, raw)
        unpacked = await asyncio.to_thread(self._cache.unpack, original, self._config.format, raw)
        converted = await asyncio.to_thread(convert, self._config.format, unpacked, data)
        await asyncio.to_thread(self._cache.write, regular, converted)
        _LOGGER.info(
            "resource_converted",
            source=self.name,
            resource=str(regular),
            format=self._config.format.value,
        )
        return converted
