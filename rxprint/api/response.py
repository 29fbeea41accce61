# FILE: rxprint/api/response.py
from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, JSONResponse, Response

FALLBACK_PDF_NAME = "prescription.pdf"


def ok(
    data: Any = None,
    *,
    meta: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
) -> JSONResponse:
    """
    Success envelope:
    {
      "ok": true,
      "data": ...,
      "meta": {...} (optional)
    }
    """
    payload: Dict[str, Any] = {"ok": True, "data": data}
    if meta is not None:
        payload["meta"] = meta
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def err(
    msg: str = "Something went wrong",
    *,
    status_code: int = 400,
    code: Optional[str] = None,
    details: Any = None,
) -> JSONResponse:
    """
    Error envelope:
    {
      "ok": false,
      "error": {"msg": "...", "code": "...", "details": ...}
    }
    """
    payload: Dict[str, Any] = {
        "ok": False,
        "error": {
            "msg": msg,
            "code": code,
            "details": details,
        },
    }
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def content_disposition(filename: str, *, inline: bool = False) -> str:
    # latin-1 safe name for old clients, RFC 5987 name for everyone else
    kind = "inline" if inline else "attachment"
    ascii_name = filename.encode("ascii", "ignore").decode("ascii") or FALLBACK_PDF_NAME
    return (f'{kind}; filename="{ascii_name}"; '
            f"filename*=UTF-8''{quote(filename)}")


def pdf(content: bytes, filename: str, *, inline: bool = False) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(filename, inline=inline)},
    )


def html(document: str) -> HTMLResponse:
    return HTMLResponse(content=document)
