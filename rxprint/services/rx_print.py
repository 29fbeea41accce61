# FILE: rxprint/services/rx_print.py
from __future__ import annotations

import html as _html
import logging
from typing import Optional

from rxprint.core.config import settings as app_settings
from rxprint.schemas.prescription import PrescriptionData
from rxprint.schemas.print_settings import PrintSettings
from rxprint.services.paper import paper_of, preview_scale
from rxprint.services.rx_render_html import PAGE_CLASS, fmt_num, render_prescription_html

logger = logging.getLogger(__name__)


class PrintSurfaceUnavailable(RuntimeError):
    """The host could not provide a print surface (blocked / renderer missing)."""


def print_stylesheet(page_size: str) -> str:
    paper = paper_of(page_size)
    w = f"{fmt_num(paper.width_mm)}mm"
    h = f"{fmt_num(paper.height_mm)}mm"
    return f"""
    @page {{ size: {w} {h}; margin: 0; }}
    * {{ box-sizing: border-box; -webkit-print-color-adjust: exact; print-color-adjust: exact; }}
    body {{ margin: 0; padding: 0; font-family: Calibri, 'Segoe UI', Arial, sans-serif; }}
    .{PAGE_CLASS} {{
      width: {w} !important;
      height: {h} !important;
      max-height: {h} !important;
      overflow: hidden !important;
      transform: scale(1) !important;
      box-shadow: none !important;
    }}
    """


def _auto_print_script(fallback_delay_ms: int) -> str:
    # print once on load, or after the fallback delay if load never fires
    return f"""
    <script>
      (function () {{
        var done = false;
        function go() {{
          if (done) return;
          done = true;
          try {{ window.print(); }} finally {{ window.close(); }}
        }}
        window.addEventListener("load", go);
        setTimeout(go, {int(fallback_delay_ms)});
      }})();
    </script>
    """


def build_print_document(data: PrescriptionData,
                         settings: PrintSettings,
                         *,
                         auto_print: bool = True,
                         fallback_delay_ms: Optional[int] = None) -> str:
    """
    Minimal document for the print surface: only the unscaled page node and
    the fixed-size print stylesheet, no other UI.
    """
    if fallback_delay_ms is None:
        fallback_delay_ms = app_settings.PRINT_FALLBACK_DELAY_MS

    title = _html.escape(data.patient.name.strip() or "Print", quote=True)
    page = render_prescription_html(data, settings, scale=1.0)
    script = _auto_print_script(fallback_delay_ms) if auto_print else ""

    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8" />
    <title>Prescription - {title}</title>
    <style>{print_stylesheet(settings.page_size)}</style>
  </head>
  <body>{page}{script}</body>
</html>"""


def _deferred_print_script(delay_ms: int) -> str:
    # preview opened with auto-print: let the page settle, then print in place
    return f"""
    <script>
      setTimeout(function () {{ window.print(); }}, {int(delay_ms)});
    </script>
    """


def build_preview_document(data: PrescriptionData,
                           settings: PrintSettings,
                           scale: Optional[float] = None,
                           *,
                           auto_print: bool = False) -> str:
    """Screen hosting chrome around the same page node."""
    if scale is None:
        scale = preview_scale(settings.page_size,
                              app_settings.PREVIEW_CONTAINER_PX,
                              app_settings.PREVIEW_MAX_SCALE)
    page = render_prescription_html(data, settings, scale=scale)
    script = (_deferred_print_script(app_settings.AUTO_PRINT_DELAY_MS)
              if auto_print else "")

    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8" />
    <title>Prescription preview</title>
    <style>
      body {{ margin: 0; padding: 24px; background: #e5e7eb; }}
      .rx-preview-frame {{ overflow: hidden; }}
    </style>
  </head>
  <body>
    <div class="rx-preview-frame" data-scale="{fmt_num(scale)}">{page}</div>{script}
  </body>
</html>"""


def render_print_pdf(data: PrescriptionData, settings: PrintSettings) -> bytes:
    """Render the print surface to PDF with WeasyPrint."""
    try:
        from weasyprint import HTML  # type: ignore
    except Exception as e:
        raise PrintSurfaceUnavailable(
            "WeasyPrint is not available on this host") from e

    doc = build_print_document(data, settings, auto_print=False)
    try:
        return HTML(string=doc,
                    base_url=str(app_settings.STORAGE_DIR)).write_pdf()
    except Exception as e:
        logger.exception("WeasyPrint failed for patient=%r", data.patient.name)
        raise PrintSurfaceUnavailable(f"Print rendering failed: {e}") from e
