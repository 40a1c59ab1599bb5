"""No-op physics-engine backend.

Used when no real engine is injected. Every member evaluates ``x f(x) = x``
and every uncertainty is zero.
"""

from __future__ import annotations

from typing import Optional, Sequence

from core.constants import CL_1_SIGMA
from engine.interface import PdfUncertainty

NOOP_SET_NAME = "NOOP"


class NoopPdf:
    def alphas_q2(self, q2: float) -> float:
        return 1.0

    def xfx_q2(self, pid: int, x: float, q2: float) -> float:
        return x

    def x_min(self) -> float:
        return 0.0

    def x_max(self) -> float:
        return 1.0

    def force_positive(self) -> int:
        return 1

    def set_force_positive(self, mode: int) -> None:
        return None

    def set(self) -> "NoopPdfSet":
        return NoopPdfSet()

    def __repr__(self) -> str:
        return "NoopPdf()"


class NoopPdfSet:
    def entry(self, key: str) -> Optional[str]:
        return None

    def error_type(self) -> str:
        return ""

    def pdfs(self) -> list[NoopPdf]:
        return [NoopPdf()]

    def uncertainty(
        self,
        values: Sequence[float],
        cl: float = CL_1_SIGMA,
        alternative: bool = False,
    ) -> PdfUncertainty:
        return PdfUncertainty(val=0.0, pos=0.0, neg=0.0)

    def __repr__(self) -> str:
        return "NoopPdfSet()"


class NoopBackend:
    """Backend that accepts any name and returns no-op evaluators."""

    def pdf(self, name: str) -> NoopPdf:
        return NoopPdf()

    def pdf_set(self, name: str) -> NoopPdfSet:
        return NoopPdfSet()

    def available(self) -> list[str]:
        return [NOOP_SET_NAME]
