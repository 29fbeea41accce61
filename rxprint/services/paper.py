# FILE: rxprint/services/paper.py
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal, Mapping, Tuple

from reportlab.lib.units import mm

# 96 DPI: 1 inch = 25.4 mm = 96 px
MM_TO_PX = 3.7795

PaperName = Literal["A4", "Letter"]


@dataclass(frozen=True)
class PaperSize:
    name: str
    width_mm: float
    height_mm: float
    label: str


PAPER_SIZES: Mapping[str, PaperSize] = MappingProxyType({
    "A4": PaperSize("A4", 210.0, 297.0, "A4 (210 × 297 mm)"),
    "Letter": PaperSize("Letter", 215.9, 279.4, "Letter (8.5 × 11 in)"),
})


def mm_to_px(value_mm: float) -> float:
    return value_mm * MM_TO_PX


def paper_of(name: str) -> PaperSize:
    """Unknown names raise KeyError: the name set is closed upstream."""
    return PAPER_SIZES[name]


def page_size_px(name: str) -> Tuple[float, float]:
    p = paper_of(name)
    return mm_to_px(p.width_mm), mm_to_px(p.height_mm)


def page_size_points(name: str) -> Tuple[float, float]:
    """ReportLab page size built from the same millimetre constants."""
    p = paper_of(name)
    return p.width_mm * mm, p.height_mm * mm


def preview_scale(name: str,
                  container_px: float = 550.0,
                  max_scale: float = 0.6) -> float:
    width_px, _ = page_size_px(name)
    return min(container_px / width_px, max_scale)
