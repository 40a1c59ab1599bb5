"""Legacy set metadata decoding.

Legacy registries publish metadata as a flat, loosely typed YAML map.
Decoding runs an explicit schema validation that tags every known
field as present, missing, or mistyped, then builds the typed Info.
Keys outside the schema are kept verbatim in ``more_members``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

import yaml

from core.errors import FieldTypeError, MissingFieldError, PartonsParseError
from grid.info import Info


@dataclass(frozen=True)
class LegacyField:
    """Schema entry mapping a legacy key onto an Info attribute."""

    legacy_name: str
    attribute: str
    kind: type
    required: bool = False


@dataclass(frozen=True)
class FieldValue:
    """Field present with the expected scalar kind."""

    value: Any


@dataclass(frozen=True)
class MissingField:
    """Field absent from the legacy map."""


@dataclass(frozen=True)
class WrongType:
    """Field present with an unexpected scalar kind."""

    found: str


FieldResult = Union[FieldValue, MissingField, WrongType]

LEGACY_INFO_SCHEMA: tuple[LegacyField, ...] = (
    LegacyField("SetIndex", "id", int),
    LegacyField("SetDesc", "description", str, required=True),
    LegacyField("Authors", "authors", str, required=True),
    LegacyField("Year", "year", int),
    LegacyField("Reference", "reference", str),
    LegacyField("Particle", "particle", int),
    LegacyField("OrderQCD", "order_qcd", int),
    LegacyField("ErrorType", "error_type", str),
    LegacyField("DataVersion", "data_version", int),
    LegacyField("Note", "note", str),
)


def load_legacy_map(content: bytes) -> dict[str, Any]:
    """Parse a legacy metadata document into a string-keyed map.

    Raises:
        PartonsParseError: If the document is not a YAML mapping.
    """
    try:
        payload = yaml.safe_load(content.decode("utf-8"))
    except (UnicodeDecodeError, yaml.YAMLError) as error:
        raise PartonsParseError(f"Failed to parse legacy info document: {error}") from error
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise PartonsParseError("Legacy info document must be a YAML mapping.")
    return {str(key): value for key, value in payload.items()}


def validate_fields(raw: Mapping[str, Any]) -> dict[str, FieldResult]:
    """Tag each schema field of ``raw`` as present, missing, or mistyped.

    Args:
        raw: Legacy metadata map.

    Returns:
        Mapping from Info attribute name to its validation result.
    """
    results: dict[str, FieldResult] = {}
    for field in LEGACY_INFO_SCHEMA:
        if field.legacy_name not in raw:
            results[field.attribute] = MissingField()
            continue
        value = raw[field.legacy_name]
        if _has_kind(value, field.kind):
            results[field.attribute] = FieldValue(value)
        else:
            results[field.attribute] = WrongType(type(value).__name__)
    return results


def info_from_legacy(raw: Mapping[str, Any]) -> Info:
    """Build Info from a legacy metadata map.

    Raises:
        MissingFieldError: If a required field is absent.
        FieldTypeError: If a known field has the wrong scalar kind.
    """
    results = validate_fields(raw)
    values: dict[str, Any] = {}
    for field in LEGACY_INFO_SCHEMA:
        result = results[field.attribute]
        if isinstance(result, WrongType):
            raise FieldTypeError(field.attribute, field.kind.__name__)
        if isinstance(result, MissingField):
            if field.required:
                raise MissingFieldError(field.attribute)
            values[field.attribute] = None
            continue
        values[field.attribute] = result.value
    known = {field.legacy_name for field in LEGACY_INFO_SCHEMA}
    more_members = {key: value for key, value in raw.items() if key not in known}
    return Info(more_members=more_members, **values)


def decode_legacy_info(content: bytes) -> Info:
    """Decode a legacy metadata document into Info."""
    return info_from_legacy(load_legacy_map(content))


def _has_kind(value: Any, kind: type) -> bool:
    if kind is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, kind)
