# rxprint/api/router.py
from fastapi import APIRouter

from rxprint.api import (
    routes_print_settings,
    routes_prescription_print,
)

api_router = APIRouter()

api_router.include_router(routes_print_settings.router)
api_router.include_router(routes_prescription_print.router)
