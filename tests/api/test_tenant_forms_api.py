"""Tests for tenant-forms/app/api.py — FastAPI endpoints."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app import api as api_mod
from app.exporters import DocumentGenerationError


@pytest.fixture()
def client():
    return TestClient(api_mod.app)


# ── Form listing ──────────────────────────────────────────────────────────


def test_list_forms(client):
    resp = client.get("/api/forms")
    assert resp.status_code == 200
    forms = resp.json()
    assert [f["form_type"] for f in forms] == ["equifax", "experian", "transunion", "edge"]
    for f in forms:
        assert f["title"]
        assert f["color"].startswith("#")


def test_get_form_fields(client):
    resp = client.get("/api/forms/equifax/fields")
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "Equifax Housing Dispute"
    personal = data["sections"]["Personal Information"]
    assert personal[0]["key"] == "firstName"
    assert personal[0]["required"] is True
    court = next(f for f in data["sections"]["Eviction Details"] if f["key"] == "courtCase")
    assert court["visible_when"] == {"field": "disputeType", "values": ["eviction"]}


def test_get_form_fields_unknown(client):
    assert client.get("/api/forms/nonexistent/fields").status_code == 404


# ── Validation ────────────────────────────────────────────────────────────


def test_validate_empty_dispute(client):
    resp = client.post("/api/forms/transunion/validate", json={"data": {}})
    assert resp.status_code == 200
    data = resp.json()
    assert data["gate"]["status"] == "invalid"
    assert data["field_errors"]["landlordName"] == "Landlord name is required"
    assert data["completion_score"] == 0


def test_validate_valid_dispute(client, equifax_data):
    resp = client.post("/api/forms/equifax/validate", json={"data": equifax_data})
    data = resp.json()
    assert data["gate"]["status"] == "ok"
    assert data["field_errors"] == {}
    assert "courtCase" in data["visible_fields"]


def test_validate_hidden_fields(client, equifax_data):
    payload = {"data": {**equifax_data, "disputeType": "identity"}}
    data = client.post("/api/forms/equifax/validate", json=payload).json()
    assert "courtCase" not in data["visible_fields"]


def test_validate_profile_blocked(client):
    resp = client.post("/api/forms/edge/validate", json={"data": {"fullName": "Jordan"}})
    data = resp.json()
    assert data["gate"]["status"] == "blocked"
    assert data["completion_score"] == 3


def test_validate_short_statement(client, profile_data):
    payload = {"data": {**profile_data, "personalStatement": "a" * 40}}
    data = client.post("/api/forms/edge/validate", json=payload).json()
    assert data["gate"]["status"] == "invalid"
    assert data["field_errors"]["personalStatement"] == "Please write at least 100 characters"


def test_validate_unknown_field(client):
    resp = client.post("/api/forms/edge/validate", json={"data": {"bogus": "x"}})
    assert resp.status_code == 422


def test_validate_unknown_tag(client):
    resp = client.post("/api/forms/edge/validate", json={"data": {}, "tags": ["Astronaut"]})
    assert resp.status_code == 422


def test_validate_unknown_form(client):
    assert client.post("/api/forms/nonexistent/validate", json={"data": {}}).status_code == 404


# ── Export ────────────────────────────────────────────────────────────────


def test_export_json(client, profile_data):
    resp = client.post(
        "/api/forms/edge/export",
        json={"data": profile_data, "tags": ["Military Service"], "format": "json"},
    )
    assert resp.status_code == 200
    record = resp.json()
    assert record["form_type"] == "edge"
    assert record["tags"] == ["Military Service"]
    assert record["derived"]["affordable_rent"] == 900
    assert record["completion_score"] == 61


def test_export_html_escapes(client, profile_data):
    payload = {
        "data": {**profile_data, "housingGoals": "<script>alert(1)</script>"},
        "format": "html",
    }
    resp = client.post("/api/forms/edge/export", json=payload)
    assert resp.status_code == 200
    assert "text/html" in resp.headers["content-type"]
    assert "<script>alert(1)</script>" not in resp.text


def test_export_pdf(client, equifax_data):
    resp = client.post("/api/forms/equifax/export", json={"data": equifax_data, "format": "pdf"})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF-")


def test_export_docx_and_txt(client, equifax_data):
    docx = client.post("/api/forms/equifax/export", json={"data": equifax_data, "format": "docx"})
    assert docx.status_code == 200
    assert docx.content[:2] == b"PK"
    txt = client.post("/api/forms/equifax/export", json={"data": equifax_data, "format": "txt"})
    assert txt.status_code == 200
    assert txt.text.startswith("Equifax Housing Dispute")


def test_export_bad_format(client, equifax_data):
    resp = client.post("/api/forms/equifax/export", json={"data": equifax_data, "format": "xls"})
    assert resp.status_code == 400


def test_export_invalid_dispute(client):
    resp = client.post("/api/forms/experian/export", json={"data": {}, "format": "json"})
    assert resp.status_code == 422
    assert resp.json()["detail"]["status"] == "invalid"


def test_export_profile_needs_confirmation(client, profile_data):
    partial = dict(list(profile_data.items())[:17])
    resp = client.post("/api/forms/edge/export", json={"data": partial, "format": "json"})
    assert resp.status_code == 409
    assert resp.json()["detail"]["status"] == "needs_confirmation"

    resp = client.post(
        "/api/forms/edge/export",
        json={"data": partial, "format": "json", "confirm_incomplete": True},
    )
    assert resp.status_code == 200
    assert resp.json()["completion_score"] == 45


def test_export_pdf_failure(client, equifax_data):
    with patch.object(api_mod, "html_to_pdf",
                      side_effect=DocumentGenerationError("Failed to generate PDF")):
        resp = client.post(
            "/api/forms/equifax/export", json={"data": equifax_data, "format": "pdf"}
        )
    assert resp.status_code == 502


# ── Calculators ───────────────────────────────────────────────────────────


def test_affordability(client):
    resp = client.get("/api/calculators/affordability", params={"monthly_income": "3000"})
    assert resp.status_code == 200
    assert resp.json() == {"monthly_income": "3000", "affordable_rent": 900}


def test_affordability_missing_income(client):
    resp = client.get("/api/calculators/affordability")
    assert resp.json()["affordable_rent"] == 0
