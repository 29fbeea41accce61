# FILE: rxprint/utils/dates.py
from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from rxprint.core.config import settings


def clinic_tz() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def today_local() -> date:
    """Calendar date at the clinic, used when a prescription carries no date."""
    return datetime.now(clinic_tz()).date()
