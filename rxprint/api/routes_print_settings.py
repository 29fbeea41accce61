# FILE: rxprint/api/routes_print_settings.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from rxprint.api.deps import get_durable_store
from rxprint.api.response import ok
from rxprint.schemas.print_settings import (
    PrintSettingsUpdate,
    get_default_settings,
    merge_settings,
)
from rxprint.services.client_storage import KeyValueStore, load_settings, save_settings
from rxprint.services.paper import PAPER_SIZES

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/print-settings",
    tags=["Prescription - Print Settings"],
)


@router.get("")
def get_print_settings(store: KeyValueStore = Depends(get_durable_store)):
    return ok(load_settings(store).to_storage())


@router.put("")
def update_print_settings(
        payload: PrintSettingsUpdate,
        store: KeyValueStore = Depends(get_durable_store),
):
    current = load_settings(store)
    patch = payload.model_dump(exclude_unset=True)
    try:
        updated = merge_settings(current, patch)
    except ValidationError:
        raise HTTPException(status_code=422, detail="Invalid print settings")

    try:
        save_settings(store, updated)
    except Exception:
        logger.exception("Failed to save print settings")
        raise HTTPException(status_code=500,
                            detail="Failed to save print settings")
    return ok(updated.to_storage())


@router.post("/reset")
def reset_print_settings(store: KeyValueStore = Depends(get_durable_store)):
    defaults = get_default_settings()
    save_settings(store, defaults)
    return ok(defaults.to_storage())


@router.get("/paper-sizes")
def list_paper_sizes():
    return ok([{
        "name": p.name,
        "widthMm": p.width_mm,
        "heightMm": p.height_mm,
        "label": p.label,
    } for p in PAPER_SIZES.values()])
