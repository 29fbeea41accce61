# FILE: rxprint/services/rx_export_pdf.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from rxprint.core.config import settings as app_settings
from rxprint.schemas.prescription import PrescriptionData
from rxprint.schemas.print_settings import PrintSettings
from rxprint.services.paper import paper_of, page_size_points
from rxprint.services.rx_sections import (
    NO_MEDICATIONS,
    PRESCRIPTION_TITLE,
    Section,
    allergy_text,
    medication_details,
    patient_rows,
    present,
    vitals_pairs,
)
from rxprint.utils.dates import today_local

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

MARGIN_MM = 20.0
FOOTER_OFFSET_MM = 40.0  # footer anchor, measured up from the page bottom
SIGNATURE_BOX_MM = 50.0

BLACK: RGB = (0, 0, 0)
GRAY: RGB = (100, 100, 100)
DARK_GRAY: RGB = (80, 80, 80)
HINT_GRAY: RGB = (68, 68, 68)
LIGHT_GRAY: RGB = (150, 150, 150)
RULE_GRAY: RGB = (200, 200, 200)
BAND_FILL: RGB = (245, 245, 245)

FONTS = {
    "normal": "Helvetica",
    "bold": "Helvetica-Bold",
    "italic": "Helvetica-Oblique",
}


class ExportFailed(RuntimeError):
    """Saving the exported file failed; the message is shown to the user."""


@dataclass(frozen=True)
class DrawOp:
    """One emitted element. Coordinates are mm from the top-left corner."""
    kind: str  # section | text | line | rect
    text: str = ""
    font: str = ""
    size: float = 0.0
    color: RGB = BLACK
    x: float = 0.0
    y: float = 0.0
    align: str = "left"

    @property
    def bold(self) -> bool:
        return "Bold" in self.font

    @property
    def italic(self) -> bool:
        return "Oblique" in self.font


@dataclass(frozen=True)
class ExportResult:
    filename: str
    content: bytes
    ops: Tuple[DrawOp, ...]

    @property
    def sections(self) -> List[str]:
        return [op.text for op in self.ops if op.kind == "section"]

    @property
    def texts(self) -> List[DrawOp]:
        return [op for op in self.ops if op.kind == "text"]


def _rl_color(rgb: RGB) -> colors.Color:
    return colors.Color(rgb[0] / 255.0, rgb[1] / 255.0, rgb[2] / 255.0)


class _Pen:
    """
    Thin wrapper over the ReportLab canvas working in mm from the top edge,
    recording everything it draws.
    """

    def __init__(self, c: canvas.Canvas, page_h_mm: float):
        self.c = c
        self.page_h_mm = page_h_mm
        self.ops: List[DrawOp] = []

    def _y(self, y_mm: float) -> float:
        return (self.page_h_mm - y_mm) * mm

    def section(self, s: Section) -> None:
        self.ops.append(DrawOp(kind="section", text=s.value))

    def text(self,
             text: str,
             x: float,
             y: float,
             size: float = 11,
             style: str = "normal",
             color: RGB = BLACK,
             align: str = "left") -> None:
        font = FONTS[style]
        self.c.setFont(font, size)
        self.c.setFillColor(_rl_color(color))
        if align == "center":
            self.c.drawCentredString(x * mm, self._y(y), text)
        elif align == "right":
            self.c.drawRightString(x * mm, self._y(y), text)
        else:
            self.c.drawString(x * mm, self._y(y), text)
        self.ops.append(
            DrawOp("text", text, font, size, color, x, y, align))

    def line(self, x1: float, y1: float, x2: float, y2: float, *,
             color: RGB = RULE_GRAY, width_mm: float = 0.2) -> None:
        self.c.setStrokeColor(_rl_color(color))
        self.c.setLineWidth(width_mm * mm)
        self.c.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))
        self.ops.append(DrawOp("line", color=color, x=x1, y=y1))

    def fill_rect(self, x: float, y: float, w: float, h: float,
                  color: RGB) -> None:
        self.c.setFillColor(_rl_color(color))
        # ReportLab anchors rects at the bottom-left corner
        self.c.rect(x * mm, self._y(y + h), w * mm, h * mm, stroke=0, fill=1)
        self.ops.append(DrawOp("rect", color=color, x=x, y=y))

    def width_mm(self, text: str, size: float, style: str = "normal") -> float:
        return pdfmetrics.stringWidth(text, FONTS[style], size) / mm


def _wrap(text: str, font: str, size: float, max_w: float) -> List[str]:
    """Greedy word wrap on ReportLab font metrics; keeps explicit newlines."""
    out: List[str] = []
    for para in (text or "").replace("\r\n", "\n").split("\n"):
        words = para.split()
        if not words:
            continue
        cur = ""
        for w in words:
            cand = (cur + " " + w).strip()
            if pdfmetrics.stringWidth(cand, font, size) <= max_w:
                cur = cand
            else:
                if cur:
                    out.append(cur)
                cur = w
        if cur:
            out.append(cur)
    return out


_UNSAFE_CHARS = re.compile(r"[^\w.-]+")


def _safe_part(value: str) -> str:
    # one path component: no separators, no leading dots
    return _UNSAFE_CHARS.sub("_", value).lstrip(".") or "_"


def build_export_filename(data: PrescriptionData,
                          today: Optional[date] = None) -> str:
    name = data.patient.name.strip() or "prescription"
    day = data.patient.date.strip() or (today or today_local()).isoformat()
    stem = _safe_part(re.sub(r"\s+", "_", name))
    return f"{stem}_{_safe_part(day)}.pdf"


# -------------------------------------------------------------------
# Public API
# -------------------------------------------------------------------
def export_prescription_pdf(data: PrescriptionData,
                            settings: PrintSettings,
                            today: Optional[date] = None) -> ExportResult:
    """
    Paint the prescription onto a single page with a manual cursor.

    `y` is the running cursor in mm from the top edge; every block advances
    it by fixed offsets. Only the footer is placed absolutely.
    """
    paper = paper_of(settings.page_size)
    W = paper.width_mm
    M = MARGIN_MM
    content_w = W - 2 * M

    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=page_size_points(settings.page_size),
                      invariant=1)
    c.setTitle(f"Prescription - {data.patient.name.strip() or 'Print'}")
    c.setSubject("Prescription")
    pen = _Pen(c, paper.height_mm)

    def heading(title: str) -> None:
        nonlocal y
        pen.text(title, M, y, 11, "bold", BLACK)
        y += 2
        pen.line(M, y, W - M, y, color=RULE_GRAY)
        y += 6

    def paragraph(text: str) -> None:
        nonlocal y
        for ln in _wrap(text, FONTS["normal"], 10, content_w * mm):
            pen.text(ln, M, y, 10, "normal", BLACK)
            y += 5
        y += 3

    y = M

    # Header (language A only on this path)
    if settings.show_header:
        pen.section(Section.HEADER)
        h = settings.header
        pen.text(h.doctor_name_en, M, y, 14, "bold", BLACK)
        y += 5
        pen.text(h.title_en, M, y, 10, "normal", GRAY)
        y += 4
        if present(h.bio_en):
            pen.text(h.bio_en, M, y, 9, "normal", GRAY)
            y += 4
        y += 4
        pen.line(M, y, W - M, y, color=DARK_GRAY, width_mm=0.5)
        y += 10
    else:
        pen.section(Section.HEADER_SPACER)
        y = M + settings.header_height

    # Title band + watermark
    pen.section(Section.TITLE)
    has_code = present(data.access_code)
    band_h = 24 if has_code else 14
    pen.fill_rect(M, y - 4, content_w, band_h, BAND_FILL)
    pen.text(PRESCRIPTION_TITLE, W / 2, y + 2, 14, "bold", BLACK, "center")
    if has_code:
        pen.text(f"CODE: {data.access_code.strip()}", W / 2, y + 7, 10, "bold",
                 BLACK, "center")
        pen.text(app_settings.VERIFY_HINT, W / 2, y + 11, 7, "normal",
                 HINT_GRAY, "center")
        pen.text(app_settings.BRAND_WATERMARK, W / 2, y + 15, 7, "normal",
                 LIGHT_GRAY, "center")
    else:
        pen.text(app_settings.BRAND_WATERMARK, W / 2, y + 7, 7, "normal",
                 LIGHT_GRAY, "center")
    y += band_h + 2

    # Patient
    pen.section(Section.PATIENT)
    heading("Patient Information")
    col2 = W / 2
    for (l1, v1), (l2, v2) in patient_rows(data):
        pen.text(f"{l1}: {v1}", M, y, 10, "normal", BLACK)
        pen.text(f"{l2}: {v2}", col2, y, 10, "normal", BLACK)
        y += 5
    y += 3

    if present(data.diagnosis):
        pen.section(Section.DIAGNOSIS)
        heading("Diagnosis")
        paragraph(data.diagnosis.strip())

    if data.allergies:
        pen.section(Section.ALLERGIES)
        label = "Allergies:"
        pen.fill_rect(M, y - 2, content_w, 8, BAND_FILL)
        pen.text(label, M + 2, y + 3, 9, "bold", DARK_GRAY)
        pen.text(allergy_text(data), M + 2 + pen.width_mm(label + " ", 9, "bold"),
                 y + 3, 9, "normal", BLACK)
        y += 12

    # Medications
    pen.section(Section.MEDICATIONS)
    heading("Medications")
    if not data.medications:
        pen.text(NO_MEDICATIONS, M, y, 10, "italic", GRAY)
        y += 6
    else:
        for i, med in enumerate(data.medications):
            pen.text(f"{i + 1}. {med.name.strip()}", M, y, 10, "bold", BLACK)
            y += 5
            details = medication_details(med)
            if details:
                pen.text("   " + "  |  ".join(details), M, y, 9, "normal", GRAY)
                y += 4
            if present(med.instructions):
                pen.text(f"   Instructions: {med.instructions.strip()}", M, y, 9,
                         "italic", GRAY)
                y += 4
            y += 2
        y += 4

    if data.vitals.any_present():
        pen.section(Section.VITALS)
        heading("Vital Signs")
        pen.text("    ".join(f"{k}: {v}" for k, v in vitals_pairs(data)), M, y,
                 10, "normal", BLACK)
        y += 8

    if present(data.additional_notes):
        pen.section(Section.NOTES)
        heading("Additional Notes")
        paragraph(data.additional_notes.strip())

    # Footer, anchored to the page bottom rather than the cursor
    if settings.show_footer:
        pen.section(Section.FOOTER)
        f = settings.footer
        footer_y = paper.height_mm - FOOTER_OFFSET_MM
        pen.line(M, footer_y - 5, W - M, footer_y - 5, color=RULE_GRAY)
        pen.text(f"Address: {f.address}", M, footer_y + 2, 9, "normal", GRAY)
        pen.text(f"Phone: {f.phone}", M, footer_y + 6, 9, "normal", GRAY)
        pen.text(f"Email: {f.email}", M, footer_y + 10, 9, "normal", GRAY)

        sig_x = W - M - SIGNATURE_BOX_MM
        sig_mid = sig_x + SIGNATURE_BOX_MM / 2
        pen.line(sig_x, footer_y + 8, W - M, footer_y + 8, color=DARK_GRAY)
        pen.text(f.signature_name, sig_mid, footer_y + 13, 10, "bold", BLACK,
                 "center")
        pen.text(f.signature_title, sig_mid, footer_y + 17, 8, "normal", GRAY,
                 "center")
    else:
        pen.section(Section.FOOTER_SPACER)

    c.showPage()
    c.save()

    filename = build_export_filename(data, today)
    logger.info("Exported prescription file=%s ops=%d", filename, len(pen.ops))
    return ExportResult(filename=filename,
                        content=buf.getvalue(),
                        ops=tuple(pen.ops))


def save_export(result: ExportResult, directory: str | Path) -> Path:
    """Single save call for an in-memory document."""
    root = Path(directory)
    target = root.joinpath(result.filename)
    if target.resolve().parent != root.resolve():
        logger.warning("Export target escapes %s: %r", root, result.filename)
        raise ExportFailed(
            f"Refusing to write outside the export directory: {result.filename}")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(result.content)
    except OSError as e:
        logger.exception("Export save failed: %s", target)
        try:
            target.unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove partial export: %s", target)
        raise ExportFailed(str(e) or "Could not save the exported file") from e
    return target
