"""Shared pytest fixtures for the rxprint test suite.

This module provides:
- An isolated storage directory and SQLite file, set up before rxprint is imported
- Sample prescription documents (full, minimal, coded)
- Print settings fixtures
- A FastAPI TestClient with in-memory stores
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator

# configuration is read at import time
_TMP_STORAGE = tempfile.mkdtemp(prefix="rxprint-tests-")
os.environ["STORAGE_DIR"] = _TMP_STORAGE
os.environ["EXPORT_DIR"] = str(Path(_TMP_STORAGE) / "exports")
os.environ["STORE_DATABASE_URI"] = f"sqlite:///{Path(_TMP_STORAGE) / 'rxprint-test.db'}"

import pytest  # noqa: E402

from rxprint.schemas.prescription import PrescriptionData  # noqa: E402
from rxprint.schemas.print_settings import PrintSettings, get_default_settings  # noqa: E402
from rxprint.services.client_storage import MemoryStore  # noqa: E402


def full_document_payload() -> Dict[str, Any]:
    """camelCase payload as the editor sends it."""
    return {
        "patient": {
            "name": "A. Noor",
            "idNumber": "P-1001",
            "date": "2026-10-18",
            "age": "34",
            "sex": "Female",
            "phone": "+93 700 555 010",
            "address": "Karte 4, Kabul",
        },
        "medications": [
            {
                "id": 1,
                "name": "Paracetamol",
                "strength": "500mg",
                "frequency": "3x daily",
                "duration": "5 days",
                "quantity": "15",
                "instructions": "After meals",
            },
            {
                "id": 2,
                "name": "Amoxicillin",
                "strength": "250mg",
                "frequency": "2x daily",
                "duration": "7 days",
                "quantity": "14",
                "instructions": "",
            },
        ],
        "diagnosis": "Acute pharyngitis",
        "vitals": {
            "bloodPressure": "120/80",
            "heartRate": "72",
            "temperature": "37.2",
            "spO2": "98",
        },
        "allergies": ["Penicillin", "Latex"],
        "additionalNotes": "Return if fever persists.",
    }


@pytest.fixture
def tmp_test_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that's cleaned up after each test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def settings() -> PrintSettings:
    return get_default_settings()


@pytest.fixture
def full_payload() -> Dict[str, Any]:
    return full_document_payload()


@pytest.fixture
def full_document() -> PrescriptionData:
    return PrescriptionData.model_validate(full_document_payload())


@pytest.fixture
def coded_document(full_document: PrescriptionData) -> PrescriptionData:
    return full_document.with_access_code("RX-AB3D-9KPZ")


@pytest.fixture
def noor_document() -> PrescriptionData:
    """One medication, no instructions, no allergies, no vitals, no date."""
    return PrescriptionData.model_validate({
        "patient": {"name": "A. Noor"},
        "medications": [{
            "id": 1,
            "name": "Paracetamol",
            "strength": "500mg",
            "frequency": "3x daily",
            "duration": "5 days",
            "quantity": "15",
            "instructions": "",
        }],
    })


@pytest.fixture
def empty_document() -> PrescriptionData:
    return PrescriptionData()


@pytest.fixture
def session_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def durable_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def client(session_store: MemoryStore, durable_store: MemoryStore):
    """TestClient whose session and durable stores are fresh per test."""
    from fastapi.testclient import TestClient

    from rxprint.api.deps import get_durable_store, get_session_store
    from rxprint.main import app

    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_durable_store] = lambda: durable_store
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
