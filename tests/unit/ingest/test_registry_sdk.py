"""Unit tests for the registry SDK client."""

from __future__ import annotations

import pytest

from core.errors import AmbiguousPatternError, PartonsLookupError
from engine.noop import NoopBackend
from ingest.registry_sdk import PartonsClient
from tests.fake_registry import (
    LEGACY_URL,
    FakeRegistry,
    legacy_routes,
    make_config,
    patch_downloads,
)


def test_set_resolves_pattern_and_loads_info(tmp_path, monkeypatch) -> None:
    """Set handles should resolve through the index and load metadata."""
    registry = FakeRegistry(legacy_routes())
    patch_downloads(monkeypatch, registry)
    client = PartonsClient(make_config(tmp_path))

    parton_set = client.set("DEMO.*")

    assert parton_set.header.identifier() == "DEMO_SET:1000"
    assert parton_set.info().authors == "A. Author, B. Author"


def test_set_memoizes_loaded_data(tmp_path, monkeypatch) -> None:
    """Repeated access should reuse loaded objects."""
    registry = FakeRegistry(legacy_routes())
    patch_downloads(monkeypatch, registry)
    parton_set = PartonsClient(make_config(tmp_path)).set("DEMO_SET")

    assert parton_set.info() is parton_set.info()
    assert parton_set.member(1) is parton_set.member(1)


def test_members_loads_every_member(tmp_path, monkeypatch) -> None:
    """All members are loaded in order."""
    registry = FakeRegistry(legacy_routes())
    patch_downloads(monkeypatch, registry)
    parton_set = PartonsClient(make_config(tmp_path)).set("DEMO_SET")

    members = parton_set.members()

    assert [member.pids for member in members] == [(1, 21), (1, 21, 2)]
    assert registry.count(f"{LEGACY_URL}/DEMO_SET/DEMO_SET_0000.dat") == 1


def test_member_outside_set_is_rejected(tmp_path, monkeypatch) -> None:
    """Member numbers must be below the header member count."""
    patch_downloads(monkeypatch, FakeRegistry(legacy_routes()))
    parton_set = PartonsClient(make_config(tmp_path)).set("DEMO_SET")

    with pytest.raises(PartonsLookupError):
        parton_set.member(2)


def test_ambiguous_set_pattern_is_rejected(tmp_path, monkeypatch) -> None:
    """Lookups that match several sets fail."""
    patch_downloads(monkeypatch, FakeRegistry(legacy_routes()))

    with pytest.raises(AmbiguousPatternError):
        PartonsClient(make_config(tmp_path)).set("OTHER.*")


def test_client_defaults_to_noop_backend(tmp_path) -> None:
    """Without an injected engine the no-op backend is used."""
    client = PartonsClient(make_config(tmp_path))

    assert isinstance(client.backend, NoopBackend)
    assert isinstance(client.with_data_root(str(tmp_path / "other")).backend, NoopBackend)


def test_with_data_root_moves_cache(tmp_path) -> None:
    """Cloned clients resolve caches under the new root."""
    client = PartonsClient(make_config(tmp_path)).with_data_root(str(tmp_path / "other"))

    assert client.source().cache_root == (tmp_path / "other" / "legacy").resolve()
