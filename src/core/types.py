"""Shared typed models.

This module defines immutable value types used by the config, ingest,
and store layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from core.constants import (
    DEFAULT_GRID_PATTERN,
    DEFAULT_INFO_PATTERN,
    LEGACY_MEMBER_WIDTH,
    MEMBER_FILE_WIDTH,
)


class DataFormat(str, Enum):
    """Encoding published by a registry."""

    NATIVE = "native"
    LEGACY = "legacy"

    @property
    def member_width(self) -> int:
        """Zero-padding width of member numbers in remote file names."""
        if self is DataFormat.LEGACY:
            return LEGACY_MEMBER_WIDTH
        return MEMBER_FILE_WIDTH


@dataclass(frozen=True)
class SourcePatterns:
    """Remote path templates relative to a registry base URL.

    Attributes:
        info: Metadata path with ``{name}`` placeholder.
        grids: Grid path with ``{name}`` and optional ``{member}`` placeholders.
    """

    info: str = DEFAULT_INFO_PATTERN
    grids: str = DEFAULT_GRID_PATTERN


@dataclass(frozen=True)
class SourceConfig:
    """Connection settings for one remote registry.

    Attributes:
        name: Registry name, also the cache directory name.
        url: Base URL that patterns are appended to.
        index: Absolute URL of the index document.
        format: Encoding used by the registry.
        patterns: Remote path templates.
    """

    name: str
    url: str
    index: str
    format: DataFormat = DataFormat.NATIVE
    patterns: SourcePatterns = field(default_factory=SourcePatterns)


@dataclass(frozen=True)
class Header:
    """Minimal dataset description listed in a registry index.

    Attributes:
        id: Numeric dataset id.
        name: Dataset name, unique within one index.
        member_count: Number of members in the dataset.
    """

    id: int
    name: str
    member_count: int

    def identifier(self) -> str:
        """Return the ``name:id`` label used in diagnostics."""
        return f"{self.name}:{self.id}"
