# FILE: rxprint/api/routes_prescription_print.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse

from rxprint.api.deps import get_durable_store, get_session_store
from rxprint.api.response import html, ok, pdf
from rxprint.core.config import settings as app_settings
from rxprint.schemas.prescription import PrescriptionData
from rxprint.schemas.print_settings import PrintSettings
from rxprint.schemas.render import ExportSaved, RenderRequest
from rxprint.services.access_code import finalize_prescription, is_access_code
from rxprint.services.client_storage import (
    KeyValueStore,
    load_document,
    load_document_by_code,
    load_settings,
    stash_document,
)
from rxprint.services.rx_export_pdf import (
    build_export_filename,
    export_prescription_pdf,
    save_export,
)
from rxprint.services.rx_print import (
    build_preview_document,
    build_print_document,
    render_print_pdf,
)


router = APIRouter(
    prefix="/prescriptions",
    tags=["Prescription - Print & Export"],
)


def _settings_for(req: RenderRequest, store: KeyValueStore) -> PrintSettings:
    # inline settings win; otherwise whatever the settings page last saved
    return req.settings if req.settings is not None else load_settings(store)


# --- Finalize / handoff ----------------------------------------------------


@router.post("/finalize")
def finalize(
        data: PrescriptionData,
        session_store: KeyValueStore = Depends(get_session_store),
        durable_store: KeyValueStore = Depends(get_durable_store),
):
    finalized = finalize_prescription(data)
    stash_document(finalized, session_store, durable_store)
    return ok(finalized.to_storage())


@router.get("/handoff")
def handoff(
        session_store: KeyValueStore = Depends(get_session_store),
        durable_store: KeyValueStore = Depends(get_durable_store),
):
    data = load_document(session_store, durable_store)
    if data is None:
        raise HTTPException(status_code=404,
                            detail="No prescription to print")
    return ok(data.to_storage())


# --- Surfaces --------------------------------------------------------------


@router.post("/preview", response_class=HTMLResponse)
def preview(
        req: RenderRequest,
        scale: Optional[float] = Query(default=None, gt=0, le=4),
        auto_print: bool = Query(default=False, alias="autoPrint"),
        store: KeyValueStore = Depends(get_durable_store),
):
    return html(
        build_preview_document(req.data,
                               _settings_for(req, store),
                               scale,
                               auto_print=auto_print))


@router.post("/print", response_class=HTMLResponse)
def print_surface(
        req: RenderRequest,
        auto: bool = Query(default=True),
        store: KeyValueStore = Depends(get_durable_store),
):
    return html(
        build_print_document(req.data, _settings_for(req, store), auto_print=auto))


@router.post("/print.pdf")
def print_pdf(
        req: RenderRequest,
        store: KeyValueStore = Depends(get_durable_store),
):
    content = render_print_pdf(req.data, _settings_for(req, store))
    return pdf(content, build_export_filename(req.data), inline=True)


@router.post("/export")
def export_pdf(
        req: RenderRequest,
        store: KeyValueStore = Depends(get_durable_store),
):
    result = export_prescription_pdf(req.data, _settings_for(req, store))
    return pdf(result.content, result.filename)


@router.post("/export/save")
def export_pdf_to_disk(
        req: RenderRequest,
        store: KeyValueStore = Depends(get_durable_store),
):
    result = export_prescription_pdf(req.data, _settings_for(req, store))
    path = save_export(result, app_settings.EXPORT_DIR)
    return ok(ExportSaved(filename=result.filename, path=str(path)))


@router.get("/verify/{code}")
def verify(
        code: str,
        durable_store: KeyValueStore = Depends(get_durable_store),
):
    """Any code issued by finalize; each finalized copy is kept under its code."""
    code = code.strip().upper()
    if not is_access_code(code):
        raise HTTPException(status_code=400, detail="Malformed access code")

    data = load_document_by_code(durable_store, code)
    if data is None:
        raise HTTPException(status_code=404, detail="Prescription not found")
    return ok({
        "accessCode": data.access_code,
        "patientName": data.patient.name,
        "date": data.patient.date,
        "medications": [m.name for m in data.medications],
    })
