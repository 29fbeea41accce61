# FILE: rxprint/schemas/prescription.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class _Snapshot(BaseModel):
    # read-only per render; edits happen upstream in the editor
    model_config = ConfigDict(alias_generator=to_camel,
                              populate_by_name=True,
                              frozen=True)


class PatientInfo(_Snapshot):
    name: str = ""
    id_number: str = ""
    date: str = ""  # ISO calendar date, e.g. 2026-10-18
    age: str = ""
    sex: str = ""
    phone: str = ""
    address: str = ""


class MedicationLine(_Snapshot):
    id: int
    name: str = ""
    strength: str = ""
    frequency: str = ""
    duration: str = ""
    quantity: str = ""
    instructions: str = ""


class Vitals(_Snapshot):
    blood_pressure: str = ""
    heart_rate: str = ""
    temperature: str = ""
    sp_o2: str = Field(default="", alias="spO2")

    def any_present(self) -> bool:
        return any((v or "").strip() for v in (
            self.blood_pressure,
            self.heart_rate,
            self.temperature,
            self.sp_o2,
        ))


class PrescriptionData(_Snapshot):
    patient: PatientInfo = Field(default_factory=PatientInfo)
    medications: List[MedicationLine] = Field(default_factory=list)
    diagnosis: str = ""
    vitals: Vitals = Field(default_factory=Vitals)
    allergies: List[str] = Field(default_factory=list)
    additional_notes: str = ""
    access_code: Optional[str] = None

    @field_validator("allergies")
    @classmethod
    def _distinct_allergies(cls, v: List[str]) -> List[str]:
        seen: set[str] = set()
        out: List[str] = []
        for a in v:
            if a in seen:
                continue
            seen.add(a)
            out.append(a)
        return out

    @model_validator(mode="after")
    def _unique_medication_ids(self) -> "PrescriptionData":
        ids = [m.id for m in self.medications]
        if len(ids) != len(set(ids)):
            raise ValueError("medication ids must be unique within a prescription")
        return self

    def with_access_code(self, code: str) -> "PrescriptionData":
        return self.model_copy(update={"access_code": code})

    def to_storage(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
