"""Conversion from registry encodings to canonical cache content.

This module dispatches on the registry format. Native registries already
publish canonical bytes. Legacy registries are decoded into typed models
and re-encoded into the canonical Info and Member encodings.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath

from core.constants import INFO_FILE_NAME, LEGACY_INFO_SUFFIX
from core.errors import ArchiveMemberError
from core.types import DataFormat
from ingest.legacy_grid import decode_legacy_grid
from ingest.legacy_info import decode_legacy_info
from store.info_payload import dump_info
from store.member_payload import encode_member
from store.resource import Data, IndexData, InfoData, MemberData, SetData, member_file_name

_LEGACY_MEMBER_PATTERN = re.compile(r"(?<!\d)(\d{4})\.dat$")


def convert(data_format: DataFormat, content: bytes, data: Data) -> bytes:
    """Convert downloaded ``content`` of ``data`` into canonical bytes.

    Args:
        data_format: Encoding published by the registry.
        content: Original-state bytes.
        data: Kind of resource the bytes belong to.

    Returns:
        Regular-state bytes.

    Raises:
        PartonsParseError: If legacy content cannot be decoded.
    """
    if data_format is DataFormat.NATIVE:
        return content
    return _convert_legacy(content, data)


def convert_name(data_format: DataFormat, entry_name: str) -> str:
    """Map an archive entry name onto its canonical cache file name.

    Args:
        data_format: Encoding published by the registry.
        entry_name: Path of the entry inside the archive.

    Returns:
        Canonical leaf file name inside the set directory.

    Raises:
        ArchiveMemberError: If a legacy entry is neither metadata nor a
            numbered member grid.
    """
    base_name = PurePosixPath(entry_name).name
    if data_format is DataFormat.NATIVE:
        return base_name
    if base_name.endswith(LEGACY_INFO_SUFFIX):
        return INFO_FILE_NAME
    match = _LEGACY_MEMBER_PATTERN.search(base_name)
    if match is None:
        raise ArchiveMemberError(entry_name)
    return member_file_name(int(match.group(1)))


def _convert_legacy(content: bytes, data: Data) -> bytes:
    if isinstance(data, (IndexData, SetData)):
        return content
    if isinstance(data, InfoData):
        return dump_info(decode_legacy_info(content))
    if isinstance(data, MemberData):
        return encode_member(decode_legacy_grid(content))
    raise TypeError(f"Unsupported resource data: {data!r}")
