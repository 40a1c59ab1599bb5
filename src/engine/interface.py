"""Physics-engine capability contracts.

Backends evaluate distributions and couplings for named sets. They are
injected by callers and never discovered implicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from core.constants import CL_1_SIGMA


@dataclass(frozen=True)
class PdfUncertainty:
    """Central value with positive and negative uncertainty."""

    val: float
    pos: float
    neg: float


class Pdf(Protocol):
    """Single member evaluation contract."""

    def alphas_q2(self, q2: float) -> float: ...

    def xfx_q2(self, pid: int, x: float, q2: float) -> float: ...

    def x_min(self) -> float: ...

    def x_max(self) -> float: ...

    def force_positive(self) -> int: ...

    def set_force_positive(self, mode: int) -> None: ...

    def set(self) -> "PdfSet": ...


class PdfSet(Protocol):
    """Whole-set evaluation contract."""

    def entry(self, key: str) -> Optional[str]: ...

    def error_type(self) -> str: ...

    def pdfs(self) -> list[Pdf]: ...

    def uncertainty(
        self,
        values: Sequence[float],
        cl: float = CL_1_SIGMA,
        alternative: bool = False,
    ) -> PdfUncertainty: ...


class PdfBackend(Protocol):
    """Factory for members and sets of one engine."""

    def pdf(self, name: str) -> Pdf: ...

    def pdf_set(self, name: str) -> PdfSet: ...

    def available(self) -> list[str]: ...
