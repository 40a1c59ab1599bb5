"""Unit tests for the registry fetch pipeline."""

from __future__ import annotations

import asyncio

import pytest

from core.errors import (
    CacheMissError,
    PartonsConfigError,
    PartonsNetworkError,
    PartonsParseError,
)
from core.types import DataFormat, Header, SourceConfig, SourcePatterns
from store.resource import InfoData, MemberData, Resource, SetData, State
from tests.fake_registry import (
    ARCHIVE_URL,
    LEGACY_URL,
    FakeRegistry,
    archive_routes,
    archive_source_config,
    legacy_routes,
)

DEMO = Header(id=1000, name="DEMO_SET", member_count=2)


def test_remote_url_pads_members_to_format_width(source_factory) -> None:
    """Legacy member numbers are padded to four digits."""
    source = source_factory(FakeRegistry({}))

    url = source.remote_url(source.config.patterns.grids, "DEMO_SET", 7)

    assert url == f"{LEGACY_URL}/DEMO_SET/DEMO_SET_0007.dat"


def test_remote_url_pads_native_members_to_six_digits(source_factory) -> None:
    """Native member numbers match the cache file width."""
    config = SourceConfig(name="native", url="https://native.example.org/", index="x")
    source = source_factory(FakeRegistry({}), config)

    url = source.remote_url(config.patterns.grids, "CT18", 3)

    assert url == "https://native.example.org/CT18/000003.member.lz4"


def test_index_is_downloaded_once(source_factory, tmp_path) -> None:
    """The second request should be served from the regular cache."""
    registry = FakeRegistry(legacy_routes())
    source = source_factory(registry)

    async def _run() -> None:
        await source.index()
        await source.index()

    asyncio.run(_run())

    assert registry.count(f"{LEGACY_URL}/index.csv") == 1
    assert (tmp_path / "legacy" / "index.csv").is_file()
    assert (tmp_path / "legacy" / "original.index.csv").is_file()


def test_info_is_converted_and_cached(source_factory) -> None:
    """Legacy metadata is stored raw and canonical."""
    registry = FakeRegistry(legacy_routes())
    source = source_factory(registry)

    info = asyncio.run(source.info(DEMO))

    assert info.description == "Demo set with two members"
    assert source.cache.exists(Resource(InfoData("DEMO_SET"), State.ORIGINAL))
    assert source.cache.exists(Resource(InfoData("DEMO_SET")))


def test_member_is_decoded_from_legacy_grid(source_factory, tmp_path) -> None:
    """Members should be converted and decoded."""
    source = source_factory(FakeRegistry(legacy_routes()))

    member = asyncio.run(source.member(DEMO, 1))

    assert member.pids == (1, 21, 2)
    assert (tmp_path / "legacy" / "DEMO_SET" / "000001.member.lz4").is_file()


def test_original_hit_skips_download(source_factory) -> None:
    """A cached original is converted without touching the network."""
    registry = FakeRegistry({})
    source = source_factory(registry)
    raw = legacy_routes()[f"{LEGACY_URL}/DEMO_SET/DEMO_SET_0000.dat"]
    source.cache.write(Resource(MemberData("DEMO_SET", 0), State.ORIGINAL), raw)

    member = asyncio.run(source.member(DEMO, 0))

    assert member.pids == (1, 21)
    assert registry.requests == []


def test_concurrent_requests_share_one_download(source_factory) -> None:
    """Requests for the same resource are coalesced."""
    registry = FakeRegistry(legacy_routes())
    source = source_factory(registry)

    async def _run() -> list[object]:
        return list(await asyncio.gather(*(source.info(DEMO) for _ in range(5))))

    infos = asyncio.run(_run())

    assert len({info.description for info in infos}) == 1
    assert registry.count(f"{LEGACY_URL}/DEMO_SET/DEMO_SET.info") == 1


def test_parse_errors_name_set_and_member(source_factory) -> None:
    """Decode failures should name the set identifier and member."""
    routes = legacy_routes()
    routes[f"{LEGACY_URL}/DEMO_SET/DEMO_SET_0001.dat"] = b"{}\n---\n0.1\n"
    source = source_factory(FakeRegistry(routes))

    with pytest.raises(PartonsParseError, match="member 1 of DEMO_SET:1000"):
        asyncio.run(source.member(DEMO, 1))


def test_failed_download_caches_nothing(source_factory) -> None:
    """Network failures leave the cache untouched."""
    source = source_factory(FakeRegistry({}))

    with pytest.raises(PartonsNetworkError):
        asyncio.run(source.info(DEMO))

    assert not source.cache.exists(Resource(InfoData("DEMO_SET"), State.ORIGINAL))


def test_archive_members_come_from_unpacked_set(source_factory) -> None:
    """Archive registries download the set once and convert entries."""
    registry = FakeRegistry(archive_routes())
    source = source_factory(registry, archive_source_config())

    async def _run() -> list[object]:
        return list(await asyncio.gather(source.member(DEMO, 0), source.member(DEMO, 1)))

    members = asyncio.run(_run())

    assert [member.pids for member in members] == [(1, 21), (1, 21, 2)]
    assert registry.count(f"{ARCHIVE_URL}/DEMO_SET.tar.gz") == 1
    assert source.cache.read(Resource(SetData("DEMO_SET"))) == b""


def test_archive_info_is_served_from_unpacked_set(source_factory) -> None:
    """Metadata unpacked from the archive is not downloaded again."""
    registry = FakeRegistry(archive_routes())
    source = source_factory(registry, archive_source_config())

    async def _run() -> str:
        await source.set(DEMO)
        return (await source.info(DEMO)).authors

    assert asyncio.run(_run()) == "A. Author, B. Author"
    assert registry.count(f"{ARCHIVE_URL}/DEMO_SET/DEMO_SET.info") == 0


def test_archive_without_member_is_a_cache_miss(source_factory) -> None:
    """Members absent from the archive cannot be fetched."""
    source = source_factory(FakeRegistry(archive_routes()), archive_source_config())

    with pytest.raises(CacheMissError):
        asyncio.run(source.member(DEMO, 5))


def test_cached_sets_lists_fetched_sets(source_factory) -> None:
    """Cached sets reflect what has been fetched so far."""
    source = source_factory(FakeRegistry(legacy_routes()))

    async def _run() -> list[str]:
        await source.info(DEMO)
        return await source.cached_sets()

    assert asyncio.run(_run()) == ["DEMO_SET"]


def test_native_registry_serves_bytes_verbatim(source_factory, tmp_path) -> None:
    """Native registries store the download as the regular form."""
    config = SourceConfig(
        name="native",
        url="https://native.example.org",
        index="https://native.example.org/index.csv",
        format=DataFormat.NATIVE,
        patterns=SourcePatterns(),
    )
    registry = FakeRegistry({"https://native.example.org/index.csv": b"5 CT18 1\n"})
    source = source_factory(registry, config)

    index = asyncio.run(source.index())

    assert index.get("CT18").id == 5
    assert (tmp_path / "native" / "index.csv").read_bytes() == b"5 CT18 1\n"


def test_repeated_fetch_is_idempotent(source_factory, monkeypatch: pytest.MonkeyPatch) -> None:
    """A second fetch reuses the cache byte for byte."""
    registry = FakeRegistry(legacy_routes())
    source = source_factory(registry)
    writes: list[Resource] = []
    write = source.cache.write

    def _record_write(resource: Resource, content: bytes) -> None:
        writes.append(resource)
        write(resource, content)

    monkeypatch.setattr(source.cache, "write", _record_write)
    url = source.remote_url(source.config.patterns.info, "DEMO_SET")

    async def _run() -> tuple[bytes, bytes]:
        first = await source.fetch(InfoData("DEMO_SET"), url)
        second = await source.fetch(InfoData("DEMO_SET"), url)
        return first, second

    first, second = asyncio.run(_run())

    assert first == second
    assert registry.count(url) == 1
    assert writes.count(Resource(InfoData("DEMO_SET"), State.ORIGINAL)) == 1


def test_set_requires_archive_registry(source_factory) -> None:
    """Per-member registries have no set archive to download."""
    registry = FakeRegistry(legacy_routes())
    source = source_factory(registry)

    with pytest.raises(PartonsConfigError, match="one grid file per member"):
        asyncio.run(source.set(DEMO))

    assert registry.requests == []


def test_remote_url_requires_member_for_member_patterns(source_factory) -> None:
    """A member pattern is never expanded without a member number."""
    source = source_factory(FakeRegistry({}))

    with pytest.raises(PartonsConfigError, match="needs a member number"):
        source.remote_url(source.config.patterns.grids, "DEMO_SET")
