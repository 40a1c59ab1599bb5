"""Partons exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class PartonsError(Exception):
    """Base exception for all Partons failures."""


class PartonsConfigError(PartonsError):
    """Raised for invalid configuration or unregistered cache locations."""


class PartonsNetworkError(PartonsError):
    """Raised when a remote request fails or returns a non-success status."""

    def __init__(self, message: str, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class PartonsCacheError(PartonsError):
    """Raised for filesystem cache failures."""


class CacheMissError(PartonsCacheError):
    """Raised when a cache entry is read but does not exist."""


class PartonsParseError(PartonsError):
    """Raised when remote or cached content cannot be decoded."""


class MissingFieldError(PartonsParseError):
    """Raised when a required legacy metadata field is absent."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"Missing field {field_name}")
        self.field_name = field_name


class FieldTypeError(PartonsParseError):
    """Raised when a legacy metadata field holds the wrong scalar kind."""

    def __init__(self, field_name: str, expected: str) -> None:
        super().__init__(f"Wrong type for field {field_name}: expected {expected}")
        self.field_name = field_name
        self.expected = expected


class GridFormatError(PartonsParseError):
    """Raised for malformed legacy grid documents."""


class ArchiveMemberError(PartonsParseError):
    """Raised for archive entries with no canonical cache name."""

    def __init__(self, entry_name: str) -> None:
        super().__init__(f"Unrecognized archive member '{entry_name}'")
        self.entry_name = entry_name


class PayloadFormatError(PartonsParseError):
    """Raised when a canonical cached payload is corrupt."""


class PartonsLookupError(PartonsError):
    """Raised when an index lookup does not resolve to one dataset."""


class SetNotFoundError(PartonsLookupError):
    """Raised when no dataset matches a lookup pattern."""


class AmbiguousPatternError(PartonsLookupError):
    """Raised when several datasets match a lookup pattern."""

    def __init__(self, pattern: str, count: int) -> None:
        super().__init__(f"{count} sets found matching {pattern}")
        self.pattern = pattern
        self.count = count


class PartonsGridError(PartonsError):
    """Raised for invalid interpolation grids and queries."""


class PidNotFoundError(PartonsGridError):
    """Raised when a particle id is not part of a block."""

    def __init__(self, pid: int) -> None:
        super().__init__(f"PID not found: {pid}")
        self.pid = pid


class BlockNotFoundError(PartonsGridError):
    """Raised when a member has no block for a (pid, flavor count) pair."""
