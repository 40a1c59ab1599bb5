"""Legacy member grid decoding.

A legacy member file is a YAML metadata header followed by sections
separated by ``---`` lines. Each section lists the x knots, the scale
knots, and the particle ids on its first three lines, then a dense table
with one row per (x, scale) pair and one column per particle id.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import yaml

from core.constants import FLAVOR_SLOTS, MIN_FLAVOR_COUNT, SECTION_DELIMITER
from core.errors import GridFormatError, PartonsGridError
from grid.block import Block
from grid.member import Member, block_index


@dataclass(frozen=True)
class GridSection:
    """One decoded section with values in ``(pid, x, mu2)`` layout."""

    xgrid: tuple[float, ...]
    mu2grid: tuple[float, ...]
    pids: tuple[int, ...]
    values: np.ndarray


def decode_legacy_grid(content: bytes) -> Member:
    """Decode a legacy member document into a Member.

    Raises:
        GridFormatError: If the header or any section is malformed.
    """
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as error:
        raise GridFormatError(f"Legacy grid is not valid UTF-8: {error}") from error
    chunks = split_chunks(text)
    metadata = parse_metadata("\n".join(chunks[0]))
    section_chunks = [lines for lines in chunks[1:] if any(line.strip() for line in lines)]
    sections = [
        parse_section(lines, number) for number, lines in enumerate(section_chunks)
    ]
    return assemble_member(metadata, sections)


def split_chunks(text: str) -> list[list[str]]:
    """Split a document on delimiter lines; the first chunk is the header."""
    chunks: list[list[str]] = [[]]
    for line in text.splitlines():
        if line.strip() == SECTION_DELIMITER:
            chunks.append([])
        else:
            chunks[-1].append(line)
    return chunks


def parse_metadata(header: str) -> dict[str, str]:
    """Parse the YAML header into a string map.

    Raises:
        GridFormatError: If the header is not a YAML mapping.
    """
    try:
        payload: Any = yaml.safe_load(header)
    except yaml.YAMLError as error:
        raise GridFormatError(f"Failed to parse legacy grid header: {error}") from error
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise GridFormatError("Legacy grid header must be a YAML mapping.")
    return {str(key): str(value) for key, value in payload.items()}


def parse_section(lines: list[str], number: int) -> GridSection:
    """Parse one section and reorder its table to ``(pid, x, mu2)``.

    Args:
        lines: Raw section lines.
        number: Zero-based section number, used in error messages.

    Raises:
        GridFormatError: If the section is truncated or its table shape
            does not match the knot and pid counts.
    """
    rows = list(lines)
    while rows and not rows[-1].strip():
        rows.pop()
    if len(rows) < 3:
        raise GridFormatError(
            f"Section {number} needs x knots, scale knots, and pids; found {len(rows)} lines."
        )
    xgrid = tuple(_parse_header_row(rows[0], float, number, "x knots"))
    mu2grid = tuple(_parse_header_row(rows[1], float, number, "scale knots"))
    pids = tuple(_parse_header_row(rows[2], int, number, "pids"))
    if len(set(pids)) != len(pids):
        raise GridFormatError(f"Section {number} repeats particle ids: {list(pids)}.")
    table_rows = rows[3:]
    expected_rows = len(xgrid) * len(mu2grid)
    if len(table_rows) != expected_rows:
        raise GridFormatError(
            f"Section {number} has {len(table_rows)} value rows, expected "
            f"{len(xgrid)} x {len(mu2grid)} = {expected_rows}."
        )
    table = np.empty((expected_rows, len(pids)), dtype=np.float64)
    for row_number, row in enumerate(table_rows):
        numbers = _parse_numbers(row, float, number, f"value row {row_number}")
        if len(numbers) != len(pids):
            raise GridFormatError(
                f"Section {number} value row {row_number} has {len(numbers)} columns, "
                f"expected {len(pids)}."
            )
        table[row_number] = numbers
    values = table.reshape(len(xgrid), len(mu2grid), len(pids)).transpose(2, 0, 1)
    return GridSection(
        xgrid=xgrid,
        mu2grid=mu2grid,
        pids=pids,
        values=np.ascontiguousarray(values),
    )


def assemble_member(metadata: dict[str, str], sections: list[GridSection]) -> Member:
    """Fold sections into single-pid blocks keyed by (pid slot, flavor count).

    Section ``s`` carries ``3 + s`` active flavors. The pid axis is the
    first-appearance union of every section's pids.

    Raises:
        GridFormatError: If there are more sections than flavor slots or a
            section grid is not strictly increasing.
    """
    if len(sections) > FLAVOR_SLOTS:
        raise GridFormatError(
            f"Legacy grid has {len(sections)} sections; at most {FLAVOR_SLOTS} are supported."
        )
    merged_pids: list[int] = []
    for section in sections:
        merged_pids.extend(pid for pid in section.pids if pid not in merged_pids)
    blocks: list[Block] = []
    keys: list[int] = []
    for slot, pid in enumerate(merged_pids):
        for number, section in enumerate(sections):
            if pid not in section.pids:
                continue
            position = section.pids.index(pid)
            try:
                block = Block(
                    pids=(pid,),
                    xgrid=section.xgrid,
                    mu2grid=section.mu2grid,
                    values=section.values[position : position + 1],
                )
            except PartonsGridError as error:
                raise GridFormatError(f"Section {number} is invalid: {error}") from error
            blocks.append(block)
            keys.append(block_index(slot, MIN_FLAVOR_COUNT + number))
    return Member(metadata=metadata, pids=merged_pids, blocks=blocks, keys=keys)


def _parse_numbers(row: str, kind: type, number: int, label: str) -> list[Any]:
    try:
        return [kind(token) for token in row.split()]
    except ValueError as error:
        raise GridFormatError(f"Section {number} has invalid {label}: {error}") from error


def _parse_header_row(row: str, kind: type, number: int, label: str) -> list[Any]:
    numbers = _parse_numbers(row, kind, number, label)
    if not numbers:
        raise GridFormatError(f"Section {number} has an empty line where {label} belong.")
    return numbers
