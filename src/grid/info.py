"""Set metadata model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class Info:
    """Canonical metadata of a set.

    Attributes:
        id: Optional numeric set id.
        description: Human-readable description.
        authors: Author list as a single string.
        year: Optional publication year.
        reference: Optional bibliographic reference.
        particle: Optional PDG id of the hadron the set describes.
        order_qcd: Optional perturbative QCD order.
        error_type: Optional uncertainty kind, e.g. ``replicas``.
        data_version: Optional version of the published data.
        note: Optional free-form note.
        more_members: Unrecognized fields kept verbatim.
    """

    description: str
    authors: str
    id: int | None = None
    year: int | None = None
    reference: str | None = None
    particle: int | None = None
    order_qcd: int | None = None
    error_type: str | None = None
    data_version: int | None = None
    note: str | None = None
    more_members: Mapping[str, Any] = field(default_factory=dict)
