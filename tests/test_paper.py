"""Unit tests for the paper registry and unit conversion."""

from __future__ import annotations

import pytest
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm

from rxprint.services import paper


def test_registry_is_closed_to_a4_and_letter() -> None:
    assert set(paper.PAPER_SIZES) == {"A4", "Letter"}
    assert paper.paper_of("A4").width_mm == 210
    assert paper.paper_of("Letter").height_mm == pytest.approx(279.4)


def test_unknown_paper_name_raises() -> None:
    with pytest.raises(KeyError):
        paper.paper_of("A5")


def test_registry_is_read_only() -> None:
    with pytest.raises(TypeError):
        paper.PAPER_SIZES["A5"] = paper.PaperSize("A5", 148, 210, "A5")  # type: ignore[index]


def test_mm_to_px_uses_96_dpi_factor() -> None:
    assert paper.mm_to_px(25.4) == pytest.approx(96.0, abs=0.01)
    assert paper.page_size_px("A4")[0] == pytest.approx(793.695)


def test_points_match_reportlab_a4() -> None:
    w, h = paper.page_size_points("A4")
    assert w == pytest.approx(A4[0])
    assert h == pytest.approx(A4[1])


@pytest.mark.parametrize("name", ["A4", "Letter"])
def test_px_and_points_share_the_same_millimetres(name: str) -> None:
    w_px, h_px = paper.page_size_px(name)
    w_pt, h_pt = paper.page_size_points(name)
    assert w_px / paper.MM_TO_PX == pytest.approx(w_pt / mm)
    assert h_px / paper.MM_TO_PX == pytest.approx(h_pt / mm)


class TestPreviewScale:
    def test_capped_at_max_scale(self) -> None:
        assert paper.preview_scale("A4") == pytest.approx(0.6)
        assert paper.preview_scale("Letter") == pytest.approx(0.6)

    def test_narrow_container_fits_width(self) -> None:
        expected = 400 / (210 * paper.MM_TO_PX)
        assert paper.preview_scale("A4", container_px=400) == pytest.approx(expected)
