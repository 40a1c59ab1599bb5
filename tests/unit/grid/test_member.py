"""Unit tests for members and composite block keys."""

from __future__ import annotations

import numpy as np
import pytest

from core.errors import BlockNotFoundError, PartonsGridError, PidNotFoundError
from grid.block import Block
from grid.member import Member, block_index


def _single(pid: int, scale: float) -> Block:
    values = scale * np.array([[[1.0, 2.0], [3.0, 4.0]]])
    return Block(pids=[pid], xgrid=[0.1, 1.0], mu2grid=[2.0, 20.0], values=values)


def _member() -> Member:
    return Member(
        metadata={"PdfType": "central"},
        pids=[1, 21],
        blocks=[_single(1, 1.0), _single(1, 10.0), _single(21, 100.0)],
        keys=[block_index(0, 3), block_index(0, 4), block_index(1, 3)],
    )


@pytest.mark.parametrize(
    ("pid_slot", "flavor_count", "expected"),
    [(0, 3, 0), (0, 6, 3), (1, 3, 4), (2, 5, 10)],
)
def test_block_index_packs_slot_and_flavors(pid_slot: int, flavor_count: int, expected: int) -> None:
    """Keys should be pid_slot * 4 + (flavor_count - 3)."""
    assert block_index(pid_slot, flavor_count) == expected


@pytest.mark.parametrize(("pid_slot", "flavor_count"), [(-1, 3), (0, 2), (0, 7)])
def test_block_index_rejects_out_of_domain(pid_slot: int, flavor_count: int) -> None:
    """Arguments outside the key domain should raise ValueError."""
    with pytest.raises(ValueError):
        block_index(pid_slot, flavor_count)


def test_block_selects_by_pid_and_flavor_count() -> None:
    """Lookup should replay the parse-time key packing."""
    member = _member()

    assert member.block(1, 4).values[0, 0, 0] == 10.0
    assert member.block(21, 3).values[0, 0, 0] == 100.0


def test_block_lookup_failures_are_specific() -> None:
    """Missing pids and missing flavor counts should raise distinct errors."""
    member = _member()

    with pytest.raises(PidNotFoundError):
        member.block(2, 3)
    with pytest.raises(BlockNotFoundError):
        member.block(21, 4)


def test_member_rejects_mismatched_keys() -> None:
    """Every block needs exactly one key."""
    with pytest.raises(PartonsGridError):
        Member(metadata={}, pids=[1], blocks=[_single(1, 1.0)], keys=[])


def test_member_rejects_repeated_keys() -> None:
    """Block keys must be unique."""
    with pytest.raises(PartonsGridError):
        Member(
            metadata={},
            pids=[1],
            blocks=[_single(1, 1.0), _single(1, 2.0)],
            keys=[0, 0],
        )


def test_value_count_sums_blocks() -> None:
    """Value count should cover every block table."""
    assert _member().value_count() == 12


def test_evaluate_interpolates_elementwise() -> None:
    """Batch evaluation should match per-point block lookups."""
    member = _member()

    results = member.evaluate([1, 21], [1.0, 0.1], [20.0, 2.0], [4, 3])

    assert results.tolist() == [40.0, 100.0]


def test_evaluate_rejects_shape_mismatch() -> None:
    """Query arrays must share one shape."""
    with pytest.raises(PartonsGridError, match="shapes"):
        _member().evaluate([1, 21], [0.1], [2.0], [3])
