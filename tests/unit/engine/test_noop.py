"""Unit tests for the no-op engine backend."""

from __future__ import annotations

from core.constants import CL_1_SIGMA
from engine.interface import PdfBackend, PdfUncertainty
from engine.noop import NoopBackend


def _backend() -> PdfBackend:
    return NoopBackend()


def test_noop_pdf_returns_trivial_values() -> None:
    """The no-op member evaluates x f(x) = x."""
    pdf = _backend().pdf("anything")

    assert pdf.xfx_q2(21, 0.25, 100.0) == 0.25
    assert pdf.alphas_q2(8100.0) == 1.0
    assert (pdf.x_min(), pdf.x_max()) == (0.0, 1.0)


def test_noop_set_has_one_member_and_zero_uncertainty() -> None:
    """The no-op set carries one member and no uncertainty."""
    pdf_set = _backend().pdf_set("anything")

    assert len(pdf_set.pdfs()) == 1
    assert pdf_set.entry("Particle") is None
    assert pdf_set.error_type() == ""
    assert pdf_set.uncertainty([0.0] * 101, CL_1_SIGMA) == PdfUncertainty(0.0, 0.0, 0.0)


def test_noop_backend_lists_placeholder_set() -> None:
    """Only the placeholder set is available."""
    assert _backend().available() == ["NOOP"]


def test_noop_pdf_links_back_to_set() -> None:
    """Members expose their set handle."""
    pdf = _backend().pdf("anything")
    pdf.set_force_positive(0)

    assert pdf.force_positive() == 1
    assert pdf.set().pdfs()[0].x_max() == 1.0
