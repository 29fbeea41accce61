# FILE: rxprint/api/exception_handlers.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rxprint.api.response import err
from rxprint.services.rx_export_pdf import ExportFailed
from rxprint.services.rx_print import PrintSurfaceUnavailable

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # exc.detail can be str/dict/list
        msg = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return err(msg=msg, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
                   for e in exc.errors()]
        return err(msg="Validation error", status_code=422, details=details)

    @app.exception_handler(PrintSurfaceUnavailable)
    async def print_surface_handler(request: Request, exc: PrintSurfaceUnavailable) -> JSONResponse:
        return err(msg=str(exc), status_code=503, code="print_surface_unavailable")

    @app.exception_handler(ExportFailed)
    async def export_failed_handler(request: Request, exc: ExportFailed) -> JSONResponse:
        return err(msg=str(exc), status_code=500, code="export_failed")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return err(msg="Internal server error", status_code=500)
