"""FastAPI backend for the Tenant Forms tool.

Provides endpoints for listing the available dispute and profile forms,
retrieving their field definitions, validating form data against the
form's submission gate, and exporting the assembled document as JSON,
HTML, PDF, Word or plain text.

Every request builds its own FormController; nothing is stored between
requests.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from pydantic import BaseModel

from app.assembler import assemble
from app.calculators import affordability
from app.catalog import FORM_CATALOG, get_entry
from app.exporters import DocumentGenerationError, build_docx, build_plain_text, html_to_pdf
from app.field_schema import SUPPORTED_FORMS, get_sections
from app.form_state import FormController
from app.renderer import render

logger = logging.getLogger(__name__)

app = FastAPI(title="Tenant Forms API")

EXPORT_FORMATS = ("json", "html", "pdf", "docx", "txt")


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------

class FormDataRequest(BaseModel):
    """Field values plus auxiliary selections for one form."""

    data: dict[str, Any]
    tags: list[str] = []
    image_ref: str | None = None


class ExportRequest(FormDataRequest):
    """Payload for exporting an assembled document."""

    format: str = "json"
    confirm_incomplete: bool = False


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _require_form(form_type: str) -> None:
    if form_type not in SUPPORTED_FORMS:
        raise HTTPException(status_code=404, detail=f"Unknown form: {form_type}")


def _load_controller(form_type: str, request: FormDataRequest) -> FormController:
    """Replay the request through set_field so scores and results are current."""
    controller = FormController(form_type)
    for key, value in request.data.items():
        try:
            controller.set_field(key, value)
        except KeyError:
            raise HTTPException(status_code=422, detail=f"Unknown field: {key}") from None
    for tag in request.tags:
        try:
            controller.toggle_tag(tag)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from None
    controller.set_image(request.image_ref)
    return controller


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/api/forms")
def list_forms() -> list[dict[str, Any]]:
    """List the catalog of available forms."""
    return [
        {
            "form_type": entry.form_type,
            "title": entry.title,
            "description": entry.description,
            "color": entry.color,
        }
        for entry in FORM_CATALOG
    ]


@app.get("/api/forms/{form_type}/fields")
def get_form_fields(form_type: str) -> dict[str, Any]:
    """Get field definitions for a form, organized by section."""
    _require_form(form_type)

    sections: dict[str, list[dict]] = {}
    for section_name, fields in get_sections(form_type).items():
        sections[section_name] = [
            {
                "key": f.key,
                "label": f.label,
                "kind": f.kind,
                "required": f.required,
                "help_text": f.help_text,
                "options": list(f.options),
                "validation_rules": f.validation_rules,
                "visible_when": (
                    {"field": f.visible_when[0], "values": list(f.visible_when[1])}
                    if f.visible_when else None
                ),
            }
            for f in fields
        ]

    return {
        "form_type": form_type,
        "title": SUPPORTED_FORMS[form_type]["title"],
        "sections": sections,
    }


@app.post("/api/forms/{form_type}/validate")
def validate_form(form_type: str, request: FormDataRequest) -> dict[str, Any]:
    """Validate form data and report the completion score and submission gate."""
    _require_form(form_type)
    controller = _load_controller(form_type, request)
    decision = get_entry(form_type).policy.check(controller)
    controller.validate_all()

    return {
        "form_type": form_type,
        "completion_score": controller.completion_score,
        "field_errors": controller.errors(),
        "visible_fields": [f.key for f in controller.visible_fields()],
        "gate": {"status": decision.status, "messages": list(decision.messages)},
    }


@app.post("/api/forms/{form_type}/export")
def export_form(form_type: str, request: ExportRequest) -> Any:
    """Assemble and render the form, then return it in the requested format."""
    _require_form(form_type)
    if request.format not in EXPORT_FORMATS:
        raise HTTPException(
            status_code=400,
            detail=f"Export format '{request.format}' is not supported.",
        )

    controller = _load_controller(form_type, request)
    decision = get_entry(form_type).policy.check(controller)
    if decision.status in ("blocked", "invalid"):
        raise HTTPException(
            status_code=422,
            detail={
                "status": decision.status,
                "messages": list(decision.messages),
                "errors": decision.errors,
            },
        )
    if decision.status == "warn" and not request.confirm_incomplete:
        raise HTTPException(
            status_code=409,
            detail={"status": "needs_confirmation", "messages": list(decision.messages)},
        )

    snapshot = controller.snapshot()
    record = assemble(snapshot.values, snapshot.auxiliary(), form_type)

    if request.format == "json":
        return record.to_dict()

    if request.format == "txt":
        return PlainTextResponse(build_plain_text(record))

    if request.format == "docx":
        return Response(
            content=build_docx(record),
            media_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            headers={"Content-Disposition": f'attachment; filename="{form_type}.docx"'},
        )

    document = render(record)
    if request.format == "html":
        return HTMLResponse(document.html)

    try:
        pdf_bytes = html_to_pdf(document.html)
    except DocumentGenerationError as exc:
        logger.warning("PDF export failed for %s", form_type)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{form_type}.pdf"'},
    )


@app.get("/api/calculators/affordability")
def get_affordability(monthly_income: str = "") -> dict[str, Any]:
    """Estimated affordable monthly rent for a monthly income."""
    return {
        "monthly_income": monthly_income,
        "affordable_rent": affordability(monthly_income),
    }
