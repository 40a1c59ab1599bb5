"""Binary serialization for Member payloads.

Members carry large numeric tables, so their canonical encoding is
binary: an lz4 frame wrapping a magic tag, a format version, a
little-endian u64 payload length, and a msgpack document whose arrays
are raw little-endian float64 buffers.
"""

from __future__ import annotations

import struct
from typing import Any

import lz4.frame
import msgpack
import numpy as np

from core.constants import MEMBER_PAYLOAD_MAGIC, MEMBER_PAYLOAD_VERSION
from core.errors import PartonsGridError, PayloadFormatError
from grid.block import Block
from grid.member import Member

_HEADER = struct.Struct("<4sBQ")
_FLOAT_DTYPE = np.dtype("<f8")


def member_to_payload(member: Member) -> dict[str, object]:
    """Serialize Member into a msgpack-safe mapping."""
    return {
        "metadata": member.metadata,
        "pids": list(member.pids),
        "blocks": [
            _block_to_payload(key, block) for key, block in zip(member.keys, member.blocks)
        ],
    }


def member_from_payload(payload: dict[str, Any]) -> Member:
    """Deserialize a msgpack mapping into Member.

    Raises:
        PayloadFormatError: If the mapping is incomplete or inconsistent.
    """
    try:
        blocks_payload = list(payload["blocks"])
        keys = [int(item["key"]) for item in blocks_payload]
        blocks = [_block_from_payload(item) for item in blocks_payload]
        return Member(
            metadata=dict(payload["metadata"]),
            pids=list(payload["pids"]),
            blocks=blocks,
            keys=keys,
        )
    except (KeyError, TypeError, ValueError, PartonsGridError) as error:
        raise PayloadFormatError(f"Invalid member payload: {error}") from error


def encode_member(member: Member) -> bytes:
    """Encode Member into the canonical compressed binary form."""
    body = msgpack.packb(member_to_payload(member), use_bin_type=True)
    header = _HEADER.pack(MEMBER_PAYLOAD_MAGIC, MEMBER_PAYLOAD_VERSION, len(body))
    return lz4.frame.compress(header + body)


def decode_member(content: bytes) -> Member:
    """Decode the canonical compressed binary form into Member.

    Raises:
        PayloadFormatError: If the frame, header, or body is invalid.
    """
    try:
        framed = lz4.frame.decompress(content)
    except RuntimeError as error:
        raise PayloadFormatError(f"Member payload is not a valid lz4 frame: {error}") from error
    if len(framed) < _HEADER.size:
        raise PayloadFormatError("Member payload is shorter than its header.")
    magic, version, length = _HEADER.unpack_from(framed)
    if magic != MEMBER_PAYLOAD_MAGIC:
        raise PayloadFormatError(f"Unexpected member payload magic {magic!r}.")
    if version != MEMBER_PAYLOAD_VERSION:
        raise PayloadFormatError(f"Unsupported member payload version {version}.")
    body = framed[_HEADER.size :]
    if len(body) != length:
        raise PayloadFormatError(
            f"Member payload length mismatch: header says {length}, found {len(body)}."
        )
    try:
        payload = msgpack.unpackb(body, raw=False, strict_map_key=False)
    except (msgpack.UnpackException, ValueError) as error:
        raise PayloadFormatError(f"Failed to unpack member payload: {error}") from error
    if not isinstance(payload, dict):
        raise PayloadFormatError("Member payload must be a mapping.")
    return member_from_payload(payload)


def _block_to_payload(key: int, block: Block) -> dict[str, object]:
    return {
        "key": key,
        "pids": list(block.pids),
        "xgrid": block.xgrid.astype(_FLOAT_DTYPE).tobytes(),
        "mu2grid": block.mu2grid.astype(_FLOAT_DTYPE).tobytes(),
        "values": block.values.astype(_FLOAT_DTYPE).tobytes(),
        "shape": list(block.values.shape),
    }


def _block_from_payload(payload: dict[str, Any]) -> Block:
    pids = [int(pid) for pid in payload["pids"]]
    xgrid = np.frombuffer(payload["xgrid"], dtype=_FLOAT_DTYPE)
    mu2grid = np.frombuffer(payload["mu2grid"], dtype=_FLOAT_DTYPE)
    shape = tuple(int(extent) for extent in payload["shape"])
    values = np.frombuffer(payload["values"], dtype=_FLOAT_DTYPE).reshape(shape)
    return Block(pids=pids, xgrid=xgrid, mu2grid=mu2grid, values=values)
