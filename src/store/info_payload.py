"""Shared YAML serialization for Info payloads.

This module centralizes the canonical Info encoding. It is reused by the
legacy converter (encode) and by the source layer (decode).
"""

from __future__ import annotations

from typing import Any

import yaml

from core.errors import PayloadFormatError
from grid.info import Info

_OPTIONAL_INT_FIELDS = ("id", "year", "particle", "order_qcd", "data_version")
_OPTIONAL_STR_FIELDS = ("reference", "error_type", "note")


def info_to_payload(info: Info) -> dict[str, object]:
    """Serialize Info into a YAML-safe mapping with fixed keys."""
    return {
        "id": info.id,
        "description": info.description,
        "authors": info.authors,
        "year": info.year,
        "reference": info.reference,
        "particle": info.particle,
        "order_qcd": info.order_qcd,
        "error_type": info.error_type,
        "data_version": info.data_version,
        "note": info.note,
        "more_members": dict(info.more_members),
    }


def info_from_payload(payload: dict[str, Any]) -> Info:
    """Deserialize a canonical mapping into Info.

    Raises:
        PayloadFormatError: If required keys are missing or mistyped.
    """
    for key in ("description", "authors"):
        if not isinstance(payload.get(key), str):
            raise PayloadFormatError(f"Canonical info payload needs a string '{key}'.")
    optional: dict[str, Any] = {}
    for key in _OPTIONAL_INT_FIELDS:
        value = payload.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise PayloadFormatError(f"Canonical info field '{key}' must be an integer.")
        optional[key] = value
    for key in _OPTIONAL_STR_FIELDS:
        value = payload.get(key)
        optional[key] = None if value is None else str(value)
    more_members = payload.get("more_members") or {}
    if not isinstance(more_members, dict):
        raise PayloadFormatError("Canonical info field 'more_members' must be a mapping.")
    return Info(
        description=payload["description"],
        authors=payload["authors"],
        more_members={str(key): value for key, value in more_members.items()},
        **optional,
    )


def dump_info(info: Info) -> bytes:
    """Encode Info as a canonical YAML document."""
    text = yaml.safe_dump(info_to_payload(info), sort_keys=False, allow_unicode=True)
    return text.encode("utf-8")


def load_info(content: bytes) -> Info:
    """Decode a canonical YAML document into Info.

    Raises:
        PayloadFormatError: If the document is not valid canonical Info.
    """
    try:
        payload = yaml.safe_load(content.decode("utf-8"))
    except (UnicodeDecodeError, yaml.YAMLError) as error:
        raise PayloadFormatError(f"Failed to parse canonical info payload: {error}") from error
    if not isinstance(payload, dict):
        raise PayloadFormatError("Canonical info payload must be a YAML mapping.")
    return info_from_payload(payload)
