"""Cacheable resource addressing.

A resource is one cacheable artifact (index, set metadata, set archive,
or set member) crossed with its lifecycle state. This module maps
resources to cache-relative paths and performs no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import Union

from core.constants import (
    INDEX_FILE_NAME,
    INFO_FILE_NAME,
    MEMBER_FILE_PATTERN,
    MEMBER_FILE_WIDTH,
    MEMBER_PLACEHOLDER,
    ORIGINAL_MARKER,
    SET_FILE_NAME,
)


@dataclass(frozen=True)
class IndexData:
    """Registry index document."""

    def __str__(self) -> str:
        return "Index"


@dataclass(frozen=True)
class InfoData:
    """Metadata of one set."""

    set_name: str

    def __str__(self) -> str:
        return f"Info: {self.set_name}"


@dataclass(frozen=True)
class SetData:
    """Archive bundling all files of one set."""

    set_name: str

    def __str__(self) -> str:
        return f"Set: {self.set_name}"


@dataclass(frozen=True)
class MemberData:
    """Grid of one member of a set."""

    set_name: str
    member: int

    def __str__(self) -> str:
        return f"Grid: {self.set_name}-{self.member}"


Data = Union[IndexData, InfoData, SetData, MemberData]


class State(str, Enum):
    """Lifecycle state of a cached resource."""

    REGULAR = "regular"
    ORIGINAL = "original"


@dataclass(frozen=True)
class Resource:
    """Cache key: a data item in a given lifecycle state."""

    data: Data
    state: State = State.REGULAR

    def __str__(self) -> str:
        if self.state is State.ORIGINAL:
            return f"{ORIGINAL_MARKER} {self.data}"
        return str(self.data)


def member_file_name(member: int) -> str:
    """Return the canonical file name of a member grid."""
    return MEMBER_FILE_PATTERN.replace(MEMBER_PLACEHOLDER, f"{member:0{MEMBER_FILE_WIDTH}d}")


def regular_path(data: Data) -> PurePosixPath:
    """Return the cache-relative path of the converted form of ``data``."""
    if isinstance(data, IndexData):
        return PurePosixPath(INDEX_FILE_NAME)
    if isinstance(data, InfoData):
        return PurePosixPath(data.set_name, INFO_FILE_NAME)
    if isinstance(data, SetData):
        return PurePosixPath(data.set_name, SET_FILE_NAME)
    if isinstance(data, MemberData):
        return PurePosixPath(data.set_name, member_file_name(data.member))
    raise TypeError(f"Unsupported resource data: {data!r}")


def raw_path(data: Data) -> PurePosixPath:
    """Return the cache-relative path of the as-downloaded form of ``data``.

    The leaf file name carries the ``original.`` marker; the directory is
    the same as for the regular form.
    """
    path = regular_path(data)
    return path.with_name(original_name(path.name))


def original_name(file_name: str) -> str:
    """Prefix a canonical file name with the original-state marker."""
    return f"{ORIGINAL_MARKER}.{file_name}"


def resource_path(resource: Resource) -> PurePosixPath:
    """Return the cache-relative path of ``resource`` according to its state."""
    if resource.state is State.ORIGINAL:
        return raw_path(resource.data)
    return regular_path(resource.data)
