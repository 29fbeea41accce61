# rxprint/schemas/__init__.py
from .print_settings import (
    FooterSettings,
    HeaderSettings,
    PrintSettings,
    PrintSettingsUpdate,
    get_default_settings,
)
from .prescription import MedicationLine, PatientInfo, PrescriptionData, Vitals

__all__ = [
    "FooterSettings",
    "HeaderSettings",
    "PrintSettings",
    "PrintSettingsUpdate",
    "get_default_settings",
    "MedicationLine",
    "PatientInfo",
    "PrescriptionData",
    "Vitals",
]
