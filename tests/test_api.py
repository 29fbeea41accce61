"""HTTP surface tests through FastAPI's TestClient."""

from __future__ import annotations

import json
import re
import sys
from pathlib import Path

from rxprint.core.config import settings as app_settings
from rxprint.services.client_storage import DATA_KEY, SETTINGS_KEY

CODE_SHAPE = re.compile(r"^RX-[A-Z0-9]{4}-[A-Z0-9]{4}$")


def test_health(client) -> None:
    r = client.get("/")
    assert r.status_code == 200
    assert "version" in r.json()


class TestPrintSettingsRoutes:
    def test_get_defaults(self, client) -> None:
        r = client.get("/api/print-settings")

        body = r.json()
        assert r.status_code == 200
        assert body["ok"] is True
        assert body["data"]["pageSize"] == "A4"
        assert body["data"]["header"]["doctorNameEn"] == "Dr. John Smith"

    def test_partial_update_is_persisted(self, client, durable_store) -> None:
        r = client.put("/api/print-settings", json={
            "pageSize": "Letter",
            "headerHeight": 22.5,
            "header": {"doctorNameEn": "Dr. Y"},
        })

        data = r.json()["data"]
        assert r.status_code == 200
        assert data["pageSize"] == "Letter"
        assert data["headerHeight"] == 22.5
        assert data["header"]["doctorNameEn"] == "Dr. Y"
        assert data["header"]["titleEn"] == "MD, General Practitioner"

        stored = json.loads(durable_store.get(SETTINGS_KEY))
        assert stored["pageSize"] == "Letter"
        assert client.get("/api/print-settings").json()["data"] == data

    def test_height_out_of_range(self, client) -> None:
        r = client.put("/api/print-settings", json={"footerHeight": 5})

        body = r.json()
        assert r.status_code == 422
        assert body["ok"] is False
        assert body["error"]["msg"] == "Validation error"
        assert body["error"]["details"]

    def test_reset(self, client) -> None:
        client.put("/api/print-settings", json={"showHeader": False})

        r = client.post("/api/print-settings/reset")

        assert r.json()["data"]["showHeader"] is True
        assert client.get("/api/print-settings").json()["data"]["showHeader"] is True

    def test_paper_sizes(self, client) -> None:
        sizes = client.get("/api/print-settings/paper-sizes").json()["data"]
        assert [s["name"] for s in sizes] == ["A4", "Letter"]
        assert sizes[0]["widthMm"] == 210


class TestHandoff:
    def test_finalize_stashes_coded_document(self, client, full_payload,
                                             session_store, durable_store) -> None:
        r = client.post("/api/prescriptions/finalize", json=full_payload)

        data = r.json()["data"]
        assert r.status_code == 200
        assert CODE_SHAPE.match(data["accessCode"])
        assert json.loads(session_store.get(DATA_KEY))["accessCode"] == data["accessCode"]
        assert json.loads(durable_store.get(DATA_KEY))["accessCode"] == data["accessCode"]

        handoff = client.get("/api/prescriptions/handoff").json()["data"]
        assert handoff == data

    def test_durable_copy_is_the_fallback(self, client, full_payload, durable_store) -> None:
        durable_store.set(DATA_KEY, json.dumps(full_payload))

        r = client.get("/api/prescriptions/handoff")

        assert r.status_code == 200
        assert r.json()["data"]["patient"]["name"] == "A. Noor"

    def test_nothing_to_hand_off(self, client) -> None:
        r = client.get("/api/prescriptions/handoff")

        assert r.status_code == 404
        assert r.json()["error"]["msg"] == "No prescription to print"

    def test_duplicate_medication_ids_rejected(self, client, full_payload) -> None:
        full_payload["medications"][1]["id"] = 1
        r = client.post("/api/prescriptions/finalize", json=full_payload)
        assert r.status_code == 422


class TestSurfaces:
    def test_preview_uses_stored_settings(self, client, full_payload) -> None:
        client.put("/api/print-settings", json={"pageSize": "Letter"})

        r = client.post("/api/prescriptions/preview", json={"data": full_payload})

        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/html")
        assert 'data-page-size="Letter"' in r.text
        assert 'data-scale="0.6"' in r.text

    def test_preview_scale_and_auto_print(self, client, full_payload) -> None:
        r = client.post("/api/prescriptions/preview?scale=0.5&autoPrint=true",
                        json={"data": full_payload})

        assert "transform:scale(0.5)" in r.text
        assert "window.print()" in r.text

    def test_preview_rejects_zero_scale(self, client, full_payload) -> None:
        r = client.post("/api/prescriptions/preview?scale=0", json={"data": full_payload})
        assert r.status_code == 422

    def test_print_with_inline_settings(self, client, full_payload) -> None:
        r = client.post("/api/prescriptions/print", json={
            "data": full_payload,
            "settings": {"showFooter": False, "footerHeight": 30},
        })

        assert r.status_code == 200
        assert "@page { size: 210mm 297mm; margin: 0; }" in r.text
        assert 'data-section="footer-spacer" style="height:30mm;' in r.text
        assert "setTimeout(go, 500);" in r.text

    def test_print_without_auto(self, client, full_payload) -> None:
        r = client.post("/api/prescriptions/print?auto=false", json={"data": full_payload})
        assert "<script>" not in r.text

    def test_print_pdf_unavailable(self, client, full_payload, monkeypatch) -> None:
        monkeypatch.setitem(sys.modules, "weasyprint", None)

        r = client.post("/api/prescriptions/print.pdf", json={"data": full_payload})

        assert r.status_code == 503
        assert r.json()["error"]["code"] == "print_surface_unavailable"


class TestExport:
    def test_download(self, client, full_payload) -> None:
        r = client.post("/api/prescriptions/export", json={"data": full_payload})

        assert r.status_code == 200
        assert r.headers["content-type"] == "application/pdf"
        assert r.content.startswith(b"%PDF")
        disposition = r.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="A._Noor_2026-10-18.pdf"')
        assert "filename*=UTF-8''A._Noor_2026-10-18.pdf" in disposition

    def test_non_ascii_name_keeps_utf8_filename(self, client, full_payload) -> None:
        full_payload["patient"]["name"] = "احمد"
        r = client.post("/api/prescriptions/export", json={"data": full_payload})

        assert r.status_code == 200
        assert "filename*=UTF-8''%D8%A7%D8%AD%D9%85%D8%AF_2026-10-18.pdf" in \
            r.headers["content-disposition"]

    def test_save(self, client, full_payload, tmp_test_dir: Path, monkeypatch) -> None:
        monkeypatch.setattr(app_settings, "EXPORT_DIR", str(tmp_test_dir))

        r = client.post("/api/prescriptions/export/save", json={"data": full_payload})

        data = r.json()["data"]
        assert r.status_code == 200
        assert data["filename"] == "A._Noor_2026-10-18.pdf"
        assert Path(data["path"]).read_bytes().startswith(b"%PDF")

    def test_save_failure(self, client, full_payload, tmp_test_dir: Path,
                          monkeypatch) -> None:
        blocker = tmp_test_dir / "blocker"
        blocker.write_text("x")
        monkeypatch.setattr(app_settings, "EXPORT_DIR", str(blocker / "exports"))

        r = client.post("/api/prescriptions/export/save", json={"data": full_payload})

        body = r.json()
        assert r.status_code == 500
        assert body["ok"] is False
        assert body["error"]["code"] == "export_failed"
        assert body["error"]["msg"]


def test_content_disposition_helper() -> None:
    from rxprint.api.response import content_disposition

    assert content_disposition("a b.pdf", inline=True) == \
        "inline; filename=\"a b.pdf\"; filename*=UTF-8''a%20b.pdf"
    assert content_disposition("احمد.pdf").startswith('attachment; filename=".pdf"')
    assert content_disposition("احمد").startswith('attachment; filename="prescription.pdf"')


class TestVerify:
    def test_finalized_code_verifies(self, client, full_payload) -> None:
        code = client.post("/api/prescriptions/finalize",
                           json=full_payload).json()["data"]["accessCode"]

        r = client.get(f"/api/prescriptions/verify/{code.lower()}")

        data = r.json()["data"]
        assert r.status_code == 200
        assert data["accessCode"] == code
        assert data["patientName"] == "A. Noor"
        assert data["medications"] == ["Paracetamol", "Amoxicillin"]

    def test_earlier_codes_stay_verifiable(self, client, full_payload) -> None:
        first = client.post("/api/prescriptions/finalize",
                            json=full_payload).json()["data"]["accessCode"]
        full_payload["patient"]["name"] = "B. Karimi"
        second = client.post("/api/prescriptions/finalize",
                             json=full_payload).json()["data"]["accessCode"]

        r1 = client.get(f"/api/prescriptions/verify/{first}")
        r2 = client.get(f"/api/prescriptions/verify/{second}")

        assert r1.status_code == 200
        assert r1.json()["data"]["patientName"] == "A. Noor"
        assert r2.json()["data"]["patientName"] == "B. Karimi"

    def test_unknown_code(self, client) -> None:
        r = client.get("/api/prescriptions/verify/RX-AB3D-9KPZ")
        assert r.status_code == 404

    def test_malformed_code(self, client) -> None:
        r = client.get("/api/prescriptions/verify/RX-0000-1111")

        assert r.status_code == 400
        assert r.json()["error"]["msg"] == "Malformed access code"
