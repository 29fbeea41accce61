# FILE: rxprint/services/rx_sections.py
"""
Content rules shared by the HTML renderer and the PDF export emitter.

Nothing here knows about layout: it decides which sections exist, in what
order, and what text goes into them. Each renderer lays the result out on
its own.
"""
from __future__ import annotations

import enum
from typing import Any, List, Tuple

from rxprint.schemas.prescription import MedicationLine, PrescriptionData
from rxprint.schemas.print_settings import PrintSettings

EM_DASH = "—"
PRESCRIPTION_TITLE = "PRESCRIPTION"
NO_MEDICATIONS = "No medications prescribed."
ALLERGY_SEPARATOR = ", "


class Section(str, enum.Enum):
    HEADER = "header"
    HEADER_SPACER = "header-spacer"
    TITLE = "title"
    PATIENT = "patient"
    DIAGNOSIS = "diagnosis"
    ALLERGIES = "allergies"
    MEDICATIONS = "medications"
    VITALS = "vitals"
    NOTES = "notes"
    FOOTER = "footer"
    FOOTER_SPACER = "footer-spacer"


def present(v: Any) -> bool:
    return bool(("" if v is None else str(v)).strip())


def or_dash(v: Any) -> str:
    return str(v).strip() if present(v) else EM_DASH


def expected_sections(data: PrescriptionData,
                      settings: PrintSettings) -> List[Section]:
    out = [Section.HEADER if settings.show_header else Section.HEADER_SPACER]
    out += [Section.TITLE, Section.PATIENT]
    if present(data.diagnosis):
        out.append(Section.DIAGNOSIS)
    if data.allergies:
        out.append(Section.ALLERGIES)
    out.append(Section.MEDICATIONS)
    if data.vitals.any_present():
        out.append(Section.VITALS)
    if present(data.additional_notes):
        out.append(Section.NOTES)
    out.append(Section.FOOTER if settings.show_footer else Section.FOOTER_SPACER)
    return out


def allergy_text(data: PrescriptionData) -> str:
    return ALLERGY_SEPARATOR.join(data.allergies)


def patient_rows(data: PrescriptionData) -> List[Tuple[Tuple[str, str], Tuple[str, str]]]:
    """Fixed two-column table; rows never collapse."""
    p = data.patient
    age = f"{or_dash(p.age)} years"
    return [
        (("Name", or_dash(p.name)), ("Date", or_dash(p.date))),
        (("Age", age), ("Sex", or_dash(p.sex))),
        (("ID", or_dash(p.id_number)), ("Phone", or_dash(p.phone))),
    ]


def vitals_pairs(data: PrescriptionData) -> List[Tuple[str, str]]:
    v = data.vitals
    pairs = [
        ("BP", v.blood_pressure),
        ("HR", v.heart_rate),
        ("Temp", v.temperature),
        ("SpO2", v.sp_o2),
    ]
    return [(label, val.strip()) for label, val in pairs if present(val)]


def medication_cells(med: MedicationLine) -> List[str]:
    # table cells after the row number: name, strength, frequency, duration, qty
    return [
        or_dash(med.name),
        or_dash(med.strength),
        or_dash(med.frequency),
        or_dash(med.duration),
        or_dash(med.quantity),
    ]


def medication_details(med: MedicationLine) -> List[str]:
    details = [
        ("Strength", med.strength),
        ("Frequency", med.frequency),
        ("Duration", med.duration),
        ("Qty", med.quantity),
    ]
    return [f"{label}: {val.strip()}" for label, val in details if present(val)]
