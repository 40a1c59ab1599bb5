"""Unit tests for index parsing and lookup."""

from __future__ import annotations

import pytest

from core.errors import (
    AmbiguousPatternError,
    PartonsLookupError,
    PartonsParseError,
    SetNotFoundError,
)
from core.types import Header
from ingest.index import Index
from tests.fixture_paths import fixture_path


def _index() -> Index:
    return Index.parse(fixture_path("legacy/index.csv").read_text(encoding="utf-8"))


def test_parse_skips_blank_lines_and_keeps_order() -> None:
    """Headers should keep file order and ignore empty lines."""
    index = _index()

    assert len(index) == 3
    assert index[0] == Header(id=1000, name="DEMO_SET", member_count=2)
    assert index.names() == ["DEMO_SET", "OTHER_SET", "OTHER_SET_nf4"]


def test_parse_accepts_arbitrary_whitespace() -> None:
    """Fields may be separated by any whitespace run."""
    index = Index.parse("  7\t\tCT18   59  \n")

    assert list(index) == [Header(id=7, name="CT18", member_count=59)]


@pytest.mark.parametrize(
    "text",
    [
        "1 CT18\n",
        "1 CT18 59 extra\n",
        "x CT18 59\n",
        "1 CT18 many\n",
        "-1 CT18 5\n",
        "1 CT18 1_0\n",
        "1 CT18 +5\n",
        "4294967296 CT18 5\n",
    ],
)
def test_parse_rejects_malformed_lines(text: str) -> None:
    """Any malformed line fails the whole index."""
    with pytest.raises(PartonsParseError):
        Index.parse("2 NNPDF 101\n" + text)


def test_parse_accepts_largest_unsigned_fields() -> None:
    """Ids and member counts span the full unsigned 32-bit range."""
    header = Index.parse("4294967295 CT18 0\n").get("CT18")

    assert header.id == 4294967295 and header.member_count == 0


def test_get_matches_full_name() -> None:
    """Patterns are anchored to the whole set name."""
    assert _index().get("OTHER_SET").id == 2000


def test_get_accepts_regular_expressions() -> None:
    """A pattern matching exactly one name resolves it."""
    assert _index().get("DEMO.*").name == "DEMO_SET"


def test_get_reports_ambiguous_patterns() -> None:
    """Several matches should report the match count."""
    with pytest.raises(AmbiguousPatternError, match="2 sets found matching OTHER.*"):
        _index().get("OTHER.*")


def test_get_reports_missing_sets() -> None:
    """No match should raise the not-found error."""
    with pytest.raises(SetNotFoundError):
        _index().get("DEMO")


def test_get_rejects_invalid_patterns() -> None:
    """Broken regular expressions are lookup errors."""
    with pytest.raises(PartonsLookupError):
        _index().get("DEMO[")


def test_header_identifier_joins_name_and_id() -> None:
    """Diagnostics label sets as name:id."""
    assert Header(id=1000, name="DEMO_SET", member_count=2).identifier() == "DEMO_SET:1000"
