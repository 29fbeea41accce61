# FILE: rxprint/services/rx_render_html.py
from __future__ import annotations

import base64
import html as _html
import logging
import mimetypes
from pathlib import Path
from typing import Any, Optional

from rxprint.core.config import settings as app_settings
from rxprint.schemas.prescription import MedicationLine, PrescriptionData
from rxprint.schemas.print_settings import PrintSettings
from rxprint.services.paper import mm_to_px, paper_of
from rxprint.services.rx_sections import (
    NO_MEDICATIONS,
    PRESCRIPTION_TITLE,
    Section,
    allergy_text,
    medication_cells,
    patient_rows,
    present,
    vitals_pairs,
)
from rxprint.services.text_runs import LATIN_FONT_STACK, TextRun, ltr, rtl

logger = logging.getLogger(__name__)

PAGE_PADDING_MM = 15
PAGE_CLASS = "prescription-page"


# -------------------------------
# Helpers
# -------------------------------
def _esc(v: Any) -> str:
    return _html.escape("" if v is None else str(v), quote=True)


def fmt_num(v: float) -> str:
    # stable text for sizes: 793.69500 -> 793.695
    return f"{v:.3f}".rstrip("0").rstrip(".")


def _logo_src(logo_url: Optional[str]) -> Optional[str]:
    """
    data:/http(s) URLs pass through; anything else is looked up under
    STORAGE_DIR and embedded as a data URI.
    """
    ref = (logo_url or "").strip()
    if not ref:
        return None
    if ref.startswith(("data:", "http://", "https://")):
        return ref

    root = Path(app_settings.STORAGE_DIR).resolve()
    abs_path = root.joinpath(ref.lstrip("/")).resolve()
    if not abs_path.is_relative_to(root):
        logger.warning("Logo path escapes storage dir: %r", ref)
        return None
    if not abs_path.exists() or not abs_path.is_file():
        logger.warning("Logo not found: %s", abs_path)
        return None

    mime, _ = mimetypes.guess_type(str(abs_path))
    try:
        raw = abs_path.read_bytes()
    except OSError:
        logger.exception("Failed to read logo: %s", abs_path)
        return None

    enc = base64.b64encode(raw).decode("ascii")
    return f"data:{mime or 'image/png'};base64,{enc}"


def page_css() -> str:
    """Scoped to the page node so it travels with the markup into print."""
    return f"""
    .{PAGE_CLASS} * {{ box-sizing: border-box; }}
    .{PAGE_CLASS} .rx-header {{
      border-bottom: 2px solid #333;
      padding-bottom: 12px;
      margin-bottom: 15px;
      display: flex;
      justify-content: space-between;
      align-items: flex-start;
      flex-shrink: 0;
    }}
    .{PAGE_CLASS} .rx-id {{ flex: 1; }}
    .{PAGE_CLASS} .rx-id h1 {{ margin: 0; font-size: 14pt; font-weight: bold; color: #000; }}
    .{PAGE_CLASS} .rx-id .rx-title {{ margin: 2px 0 0 0; font-size: 10pt; color: #333; font-weight: 500; }}
    .{PAGE_CLASS} .rx-id .rx-bio {{ margin: 2px 0 0 0; font-size: 9pt; color: #555; white-space: pre-line; }}
    .{PAGE_CLASS} .rx-logo {{
      width: 60px;
      height: 60px;
      border: 1px solid #ccc;
      border-radius: 4px;
      display: flex;
      align-items: center;
      justify-content: center;
      background: #f5f5f5;
      margin: 0 15px;
      flex-shrink: 0;
      overflow: hidden;
    }}
    .{PAGE_CLASS} .rx-logo img {{ max-width: 100%; max-height: 100%; object-fit: contain; }}
    .{PAGE_CLASS} .rx-logo span {{ font-size: 8pt; color: #999; }}

    .{PAGE_CLASS} .rx-title-band {{
      text-align: center;
      margin-bottom: 15px;
      padding: 8px;
      background: #f5f5f5;
      border-radius: 4px;
      flex-shrink: 0;
    }}
    .{PAGE_CLASS} .rx-title-band h2 {{ margin: 0; font-size: 14pt; font-weight: bold; color: #000; }}
    .{PAGE_CLASS} .rx-code {{ margin: 4px 0 0 0; font-size: 10pt; color: #000; font-weight: bold; letter-spacing: 1px; }}
    .{PAGE_CLASS} .rx-verify {{ margin: 2px 0 0 0; font-size: 7pt; color: #444; }}
    .{PAGE_CLASS} .rx-watermark {{ margin: 4px 0 0 0; font-size: 7pt; color: #888; }}

    .{PAGE_CLASS} section {{ margin-bottom: 20px; }}
    .{PAGE_CLASS} h3 {{
      font-size: 12pt;
      font-weight: bold;
      border-bottom: 1px solid #ddd;
      padding-bottom: 5px;
      margin: 0 0 10px 0;
      color: #333;
    }}
    .{PAGE_CLASS} p.rx-text {{ margin: 0; font-size: 11pt; white-space: pre-line; }}

    .{PAGE_CLASS} table.rx-patient {{ width: 100%; font-size: 11pt; }}
    .{PAGE_CLASS} table.rx-patient td {{ padding: 4px 0; width: 50%; }}

    .{PAGE_CLASS} .rx-allergies {{
      padding: 10px;
      background: #f5f5f5;
      border: 1px solid #ccc;
      border-radius: 4px;
    }}
    .{PAGE_CLASS} .rx-allergies strong {{ color: #333; }}
    .{PAGE_CLASS} .rx-allergies span {{ color: #000; }}

    .{PAGE_CLASS} .rx-empty {{ font-size: 11pt; color: #666; font-style: italic; margin: 0; }}
    .{PAGE_CLASS} table.rx-meds {{ width: 100%; border-collapse: collapse; font-size: 11pt; }}
    .{PAGE_CLASS} table.rx-meds th,
    .{PAGE_CLASS} table.rx-meds td {{ border: 1px solid #ddd; padding: 8px; text-align: left; }}
    .{PAGE_CLASS} table.rx-meds thead tr {{ background: #f5f5f5; }}
    .{PAGE_CLASS} table.rx-meds td.rx-med-name {{ font-weight: bold; }}
    .{PAGE_CLASS} table.rx-meds td.rx-instructions {{ font-style: italic; color: #666; font-size: 10pt; }}

    .{PAGE_CLASS} .rx-vitals {{ display: flex; gap: 20px; font-size: 11pt; }}

    .{PAGE_CLASS} .rx-footer {{
      margin-top: auto;
      padding-top: 15px;
      border-top: 1px solid #ccc;
      display: flex;
      justify-content: space-between;
      align-items: flex-end;
      flex-shrink: 0;
    }}
    .{PAGE_CLASS} .rx-contact {{ font-size: 9pt; color: #333; line-height: 1.6; }}
    .{PAGE_CLASS} .rx-signature {{ text-align: center; width: 180px; }}
    .{PAGE_CLASS} .rx-signature .rx-sig-rule {{ border-bottom: 1px solid #333; height: 40px; margin-bottom: 4px; }}
    .{PAGE_CLASS} .rx-signature .rx-sig-name {{ margin: 0; font-size: 10pt; font-weight: bold; color: #000; }}
    .{PAGE_CLASS} .rx-signature .rx-sig-title {{ margin: 0; font-size: 9pt; color: #555; }}
    """


# -------------------------------
# Sections
# -------------------------------
def _identity_block(name: TextRun, title: TextRun, bio: TextRun, *,
                    css_class: str) -> str:
    return f"""
      <div class="rx-id {css_class}" {name.html_attrs()}>
        <h1>{_esc(name.text)}</h1>
        <p class="rx-title">{_esc(title.text)}</p>
        <p class="rx-bio">{_esc(bio.text)}</p>
      </div>
    """


def _header_html(settings: PrintSettings) -> str:
    if not settings.show_header:
        return (f'<div data-section="{Section.HEADER_SPACER.value}" '
                f'style="height:{fmt_num(settings.header_height)}mm;'
                f'margin-bottom:10px;flex-shrink:0;"></div>')

    h = settings.header
    left = _identity_block(ltr(h.doctor_name_en),
                           ltr(h.title_en),
                           ltr(h.bio_en),
                           css_class="rx-id-a")
    right = _identity_block(rtl(h.doctor_name_fa),
                            rtl(h.title_fa),
                            rtl(h.bio_fa),
                            css_class="rx-id-b")

    logo_html = ""
    if h.show_logo and present(h.logo_url):
        src = _logo_src(h.logo_url)
        if src:
            logo_html = f"<div class='rx-logo'><img src='{_esc(src)}' alt='Logo' /></div>"
        else:
            logo_html = "<div class='rx-logo'><span>Logo</span></div>"

    return f"""
    <header class="rx-header" data-section="{Section.HEADER.value}">
      {left}
      {logo_html}
      {right}
    </header>
    """


def _title_html(data: PrescriptionData) -> str:
    code_html = ""
    if present(data.access_code):
        code_html = f"""
        <div class="rx-code-block">
          <p class="rx-code">CODE: {_esc(data.access_code)}</p>
          <p class="rx-verify">{_esc(app_settings.VERIFY_HINT)}</p>
        </div>
        """
    return f"""
    <div class="rx-title-band" data-section="{Section.TITLE.value}">
      <h2>℞ {PRESCRIPTION_TITLE}</h2>
      {code_html}
      <p class="rx-watermark">{_esc(app_settings.BRAND_WATERMARK)}</p>
    </div>
    """


def _patient_html(data: PrescriptionData) -> str:
    rows = ""
    for (l1, v1), (l2, v2) in patient_rows(data):
        rows += f"""
          <tr>
            <td><strong>{_esc(l1)}:</strong> {_esc(v1)}</td>
            <td><strong>{_esc(l2)}:</strong> {_esc(v2)}</td>
          </tr>
        """
    return f"""
    <section data-section="{Section.PATIENT.value}">
      <h3>Patient Information</h3>
      <table class="rx-patient"><tbody>{rows}</tbody></table>
    </section>
    """


def _text_section(section: Section, heading: str, text: str) -> str:
    return f"""
    <section data-section="{section.value}">
      <h3>{_esc(heading)}</h3>
      <p class="rx-text">{_esc(text)}</p>
    </section>
    """


def _allergies_html(data: PrescriptionData) -> str:
    return f"""
    <section class="rx-allergies" data-section="{Section.ALLERGIES.value}">
      <strong>⚠ Allergies:</strong> <span class="rx-allergy-list">{_esc(allergy_text(data))}</span>
    </section>
    """


def _medication_rows(index: int, med: MedicationLine) -> str:
    cells = medication_cells(med)
    out = f"""
          <tr class="rx-med-row" data-med-id="{med.id}">
            <td>{index + 1}</td>
            <td class="rx-med-name">{_esc(cells[0])}</td>
            <td>{_esc(cells[1])}</td>
            <td>{_esc(cells[2])}</td>
            <td>{_esc(cells[3])}</td>
            <td>{_esc(cells[4])}</td>
          </tr>
    """
    if present(med.instructions):
        out += f"""
          <tr class="rx-instructions-row" data-med-id="{med.id}">
            <td></td>
            <td colspan="5" class="rx-instructions">📝 {_esc(med.instructions.strip())}</td>
          </tr>
        """
    return out


def _medications_html(data: PrescriptionData) -> str:
    if not data.medications:
        body = f'<p class="rx-empty">{NO_MEDICATIONS}</p>'
    else:
        rows = "".join(
            _medication_rows(i, m) for i, m in enumerate(data.medications))
        body = f"""
      <table class="rx-meds">
        <thead>
          <tr>
            <th>#</th>
            <th>Medication</th>
            <th>Strength</th>
            <th>Frequency</th>
            <th>Duration</th>
            <th>Qty</th>
          </tr>
        </thead>
        <tbody>{rows}</tbody>
      </table>
        """
    return f"""
    <section data-section="{Section.MEDICATIONS.value}">
      <h3>Medications</h3>
      {body}
    </section>
    """


def _vitals_html(data: PrescriptionData) -> str:
    spans = " ".join(f"<span><strong>{_esc(label)}:</strong> {_esc(val)}</span>"
                     for label, val in vitals_pairs(data))
    return f"""
    <section data-section="{Section.VITALS.value}">
      <h3>Vital Signs</h3>
      <div class="rx-vitals">{spans}</div>
    </section>
    """


def _footer_html(settings: PrintSettings) -> str:
    if not settings.show_footer:
        return (f'<div data-section="{Section.FOOTER_SPACER.value}" '
                f'style="height:{fmt_num(settings.footer_height)}mm;'
                f'margin-top:auto;flex-shrink:0;"></div>')

    f = settings.footer
    return f"""
    <footer class="rx-footer" data-section="{Section.FOOTER.value}">
      <div class="rx-contact">
        <div><strong>Address:</strong> {_esc(f.address)}</div>
        <div><strong>Phone:</strong> {_esc(f.phone)}</div>
        <div><strong>Email:</strong> {_esc(f.email)}</div>
      </div>
      <div class="rx-signature">
        <div class="rx-sig-rule"></div>
        <p class="rx-sig-name">{_esc(f.signature_name)}</p>
        <p class="rx-sig-title">{_esc(f.signature_title)}</p>
      </div>
    </footer>
    """


# -------------------------------------------------------------------
# Public API
# -------------------------------------------------------------------
def page_style(settings: PrintSettings, scale: float = 1.0) -> str:
    paper = paper_of(settings.page_size)
    w = fmt_num(mm_to_px(paper.width_mm))
    h = fmt_num(mm_to_px(paper.height_mm))
    return (f"width:{w}px;height:{h}px;max-height:{h}px;"
            "background-color:#ffffff;color:#000000;"
            f"font-family:{LATIN_FONT_STACK};font-size:11pt;line-height:1.4;"
            f"padding:{PAGE_PADDING_MM}mm;box-sizing:border-box;"
            f"transform:scale({fmt_num(scale)});transform-origin:top left;"
            "box-shadow:0 4px 20px rgba(0,0,0,0.15);position:relative;"
            "overflow:hidden;display:flex;flex-direction:column;")


def render_prescription_html(data: PrescriptionData,
                             settings: PrintSettings,
                             scale: float = 1.0) -> str:
    """
    Fixed-size page node for the live preview (any scale) and, unscaled,
    for the print surface. Overflow past the page height is clipped.
    """
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale!r}")

    parts = [
        _header_html(settings),
        _title_html(data),
        _patient_html(data),
    ]
    if present(data.diagnosis):
        parts.append(
            _text_section(Section.DIAGNOSIS, "Diagnosis", data.diagnosis.strip()))
    if data.allergies:
        parts.append(_allergies_html(data))
    parts.append(_medications_html(data))
    if data.vitals.any_present():
        parts.append(_vitals_html(data))
    if present(data.additional_notes):
        parts.append(
            _text_section(Section.NOTES, "Additional Notes",
                          data.additional_notes.strip()))
    parts.append(_footer_html(settings))

    return f"""<div class="{PAGE_CLASS}" data-page-size="{_esc(settings.page_size)}" style="{page_style(settings, scale)}">
    <style>{page_css()}</style>
    {"".join(parts)}
</div>"""
