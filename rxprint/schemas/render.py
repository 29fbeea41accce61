# FILE: rxprint/schemas/render.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from rxprint.schemas.prescription import PrescriptionData
from rxprint.schemas.print_settings import PrintSettings


class RenderRequest(BaseModel):
    """Body for preview/print/export; settings fall back to the stored ones."""
    data: PrescriptionData
    settings: Optional[PrintSettings] = None


class ExportSaved(BaseModel):
    filename: str
    path: str
