"""Set members and composite block indexing.

A member stitches single-pid blocks together. Blocks are addressed by
the composite key (pid slot, active-flavor count) packed by
:func:`block_index`; the loader records each block's key at parse time
and queries replay the same packing.
"""

from __future__ import annotations

from typing import Iterable, Mapping

import numpy as np

from core.constants import FLAVOR_SLOTS, MAX_FLAVOR_COUNT, MIN_FLAVOR_COUNT
from core.errors import BlockNotFoundError, PartonsGridError, PidNotFoundError
from grid.block import Block


def block_index(pid_slot: int, flavor_count: int) -> int:
    """Pack a (pid slot, flavor count) pair into one block key.

    Args:
        pid_slot: Position of the particle id on the member pid axis, ``>= 0``.
        flavor_count: Active flavors, between 3 and 6 inclusive.

    Returns:
        ``pid_slot * 4 + (flavor_count - 3)``.

    Raises:
        ValueError: If either argument is outside its domain.
    """
    if pid_slot < 0:
        raise ValueError(f"pid_slot must be non-negative, got {pid_slot}.")
    if not MIN_FLAVOR_COUNT <= flavor_count <= MAX_FLAVOR_COUNT:
        raise ValueError(
            f"flavor_count must be in [{MIN_FLAVOR_COUNT}, {MAX_FLAVOR_COUNT}], "
            f"got {flavor_count}."
        )
    return pid_slot * FLAVOR_SLOTS + (flavor_count - MIN_FLAVOR_COUNT)


class Member:
    """One replica or variation of a set."""

    def __init__(
        self,
        metadata: Mapping[str, str],
        pids: Iterable[int],
        blocks: Iterable[Block],
        keys: Iterable[int],
    ) -> None:
        """Assemble a member from keyed blocks.

        Args:
            metadata: Free-form member header entries.
            pids: Merged pid axis; a pid's position is its slot.
            blocks: Interpolation blocks.
            keys: Packed :func:`block_index` key of each block.

        Raises:
            PartonsGridError: If keys and blocks disagree or keys repeat.
        """
        self._metadata = {str(key): str(value) for key, value in metadata.items()}
        self._pids = tuple(int(pid) for pid in pids)
        self._blocks = tuple(blocks)
        self._keys = tuple(int(key) for key in keys)
        if len(self._keys) != len(self._blocks):
            raise PartonsGridError(
                f"Member has {len(self._blocks)} blocks but {len(self._keys)} block keys."
            )
        self._positions = {key: position for position, key in enumerate(self._keys)}
        if len(self._positions) != len(self._keys):
            raise PartonsGridError("Member block keys must be unique.")
        self._slots = {pid: slot for slot, pid in enumerate(self._pids)}

    @property
    def metadata(self) -> dict[str, str]:
        return dict(self._metadata)

    @property
    def pids(self) -> tuple[int, ...]:
        return self._pids

    @property
    def blocks(self) -> tuple[Block, ...]:
        return self._blocks

    @property
    def keys(self) -> tuple[int, ...]:
        return self._keys

    def pid_slot(self, pid: int) -> int:
        """Return the slot of ``pid`` on the member pid axis.

        Raises:
            PidNotFoundError: If the member has no table for ``pid``.
        """
        try:
            return self._slots[int(pid)]
        except KeyError as error:
            raise PidNotFoundError(int(pid)) from error

    def block(self, pid: int, flavor_count: int) -> Block:
        """Return the block serving ``pid`` with ``flavor_count`` active flavors.

        Raises:
            PidNotFoundError: If the member has no table for ``pid``.
            BlockNotFoundError: If no block carries that flavor count.
        """
        key = block_index(self.pid_slot(pid), flavor_count)
        position = self._positions.get(key)
        if position is None:
            raise BlockNotFoundError(
                f"No block for pid {pid} with {flavor_count} active flavors."
            )
        return self._blocks[position]

    def value_count(self) -> int:
        """Return the total number of tabulated values across blocks."""
        return sum(int(block.values.size) for block in self._blocks)

    def evaluate(
        self,
        pids: np.ndarray | list[int],
        xs: np.ndarray | list[float],
        mu2s: np.ndarray | list[float],
        flavor_counts: np.ndarray | list[int],
    ) -> np.ndarray:
        """Interpolate element-wise over equally shaped query arrays.

        Raises:
            PartonsGridError: If array shapes differ or a point is off-grid.
        """
        pid_array = np.asarray(pids, dtype=np.int64)
        x_array = np.asarray(xs, dtype=np.float64)
        mu2_array = np.asarray(mu2s, dtype=np.float64)
        nf_array = np.asarray(flavor_counts, dtype=np.int64)
        shapes = {pid_array.shape, x_array.shape, mu2_array.shape, nf_array.shape}
        if len(shapes) != 1:
            raise PartonsGridError(f"Incompatible array shapes: {sorted(shapes)}.")
        results = np.empty(x_array.shape, dtype=np.float64)
        for position in np.ndindex(x_array.shape):
            pid = int(pid_array[position])
            block = self.block(pid, int(nf_array[position]))
            results[position] = block.interpolate(
                pid, float(x_array[position]), float(mu2_array[position])
            )
        return results

    def __repr__(self) -> str:
        return f"Member(pids={list(self._pids)}, blocks={len(self._blocks)})"
