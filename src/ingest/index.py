"""Registry index parsing and lookup.

An index lists one dataset header per line as whitespace-separated
``id name member_count`` fields. Lookups match a regular expression
against the full dataset name.
"""

from __future__ import annotations

import re
from typing import Iterator, Sequence

from core.errors import (
    AmbiguousPatternError,
    PartonsLookupError,
    PartonsParseError,
    SetNotFoundError,
)
from core.types import Header

_UNSIGNED_PATTERN = re.compile(r"[0-9]+")
_U32_LIMIT = 2**32


class Index:
    """Ordered, immutable collection of dataset headers."""

    def __init__(self, headers: Sequence[Header]) -> None:
        self._headers = tuple(headers)

    @classmethod
    def parse(cls, text: str) -> "Index":
        """Parse an index document.

        Args:
            text: Index document, one header per non-empty line.

        Returns:
            Parsed index.

        Raises:
            PartonsParseError: If any line is malformed.
        """
        headers: list[Header] = []
        for line_number, line in enumerate(text.splitlines(), start=1):
            tokens = line.split()
            if not tokens:
                continue
            if len(tokens) != 3:
                raise PartonsParseError(
                    f"Invalid index line {line_number}: expected 'id name member_count', "
                    f"got {len(tokens)} fields."
                )
            raw_id, name, raw_count = tokens
            headers.append(
                Header(
                    id=_parse_u32(raw_id, "id", line_number),
                    name=name,
                    member_count=_parse_u32(raw_count, "member_count", line_number),
                )
            )
        return cls(headers)

    def get(self, pattern: str) -> Header:
        """Return the only header whose full name matches ``pattern``.

        Args:
            pattern: Regular expression anchored to the whole name.

        Returns:
            Matching header.

        Raises:
            SetNotFoundError: If no name matches.
            AmbiguousPatternError: If several names match.
            PartonsLookupError: If ``pattern`` is not a valid expression.
        """
        try:
            expression = re.compile(pattern)
        except re.error as error:
            raise PartonsLookupError(f"Invalid set pattern '{pattern}': {error}.") from error
        matches = [header for header in self._headers if expression.fullmatch(header.name)]
        if not matches:
            raise SetNotFoundError(f"No set found matching {pattern}")
        if len(matches) > 1:
            raise AmbiguousPatternError(pattern, len(matches))
        return matches[0]

    def names(self) -> list[str]:
        """Return dataset names in index order."""
        return [header.name for header in self._headers]

    def __getitem__(self, position: int) -> Header:
        return self._headers[position]

    def __iter__(self) -> Iterator[Header]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"Index(headers={len(self._headers)})"


def _parse_u32(token: str, field: str, line_number: int) -> int:
    if _UNSIGNED_PATTERN.fullmatch(token) is None or int(token) >= _U32_LIMIT:
        raise PartonsParseError(
            f"Invalid index line {line_number}: {field} must be an unsigned 32-bit "
            f"integer, got '{token}'."
        )
    return int(token)
