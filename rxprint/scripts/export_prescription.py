from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from rxprint.core.config import settings as app_settings
from rxprint.schemas.prescription import PrescriptionData
from rxprint.schemas.print_settings import (
    PrintSettings,
    get_default_settings,
    merge_settings,
)
from rxprint.services.access_code import finalize_prescription
from rxprint.services.rx_export_pdf import (
    ExportFailed,
    export_prescription_pdf,
    save_export,
)
from rxprint.services.rx_print import build_print_document


def _read_json(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        obj = json.load(f)
    if not isinstance(obj, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return obj


def _load_settings(path: Optional[str]) -> PrintSettings:
    if not path:
        # stored settings live in the durable store
        from rxprint.api.deps import get_durable_store, init_storage
        from rxprint.services.client_storage import load_settings

        init_storage()
        return load_settings(get_durable_store())
    return merge_settings(get_default_settings(), _read_json(path), by_alias=True)


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        description="Export a prescription JSON document to PDF")
    ap.add_argument("--data", required=True, help="Prescription JSON (camelCase keys)")
    ap.add_argument("--settings", default="", help="Print settings JSON. Default: stored settings")
    ap.add_argument("--out-dir", default=app_settings.EXPORT_DIR, help="Directory for the PDF")
    ap.add_argument("--finalize", action="store_true", help="Attach a fresh access code before exporting")
    ap.add_argument("--print-html", default="", help="Also write the print surface HTML to this path")
    args = ap.parse_args(argv)

    try:
        data = PrescriptionData.model_validate(_read_json(args.data))
        print_settings = _load_settings(args.settings)
    except (OSError, ValueError, ValidationError) as e:
        print(f"❌ Invalid input: {e}", file=sys.stderr)
        return 2

    if args.finalize:
        data = finalize_prescription(data)

    result = export_prescription_pdf(data, print_settings)
    try:
        path = save_export(result, args.out_dir)
    except ExportFailed as e:
        print(f"❌ Export failed: {e}", file=sys.stderr)
        return 1

    print(f"✅ Exported {path}")
    if data.access_code:
        print(f"   Code: {data.access_code}")

    if args.print_html:
        html_path = Path(args.print_html)
        html_path.write_text(
            build_print_document(data, print_settings, auto_print=False),
            encoding="utf-8")
        print(f"   Print HTML: {html_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
