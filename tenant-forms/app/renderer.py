"""HTML renderer for assembled tenant form records.

Every document gets the same header and personal-information block; the
body comes from a per-form-type section renderer looked up in
SECTION_RENDERERS. All user-supplied text passes through ``_esc`` before it
is placed in markup. Rendering is deterministic: the same record always
produces the same HTML.
"""

from __future__ import annotations

import html as html_mod
from dataclasses import dataclass
from typing import Any, Callable

from app.assembler import AssembledRecord
from app.field_schema import (
    DISPUTE_TYPES,
    PERSONAL_SECTIONS,
    SUPPORTED_FORMS,
    FieldDefinition,
    get_sections,
    is_filled,
    parse_date,
)

NOT_PROVIDED = "Not provided"

_PERSONAL_SECTION_NAMES = set(PERSONAL_SECTIONS) | {"Contact Information"}

BUREAU_ADDRESSES: dict[str, str] = {
    "equifax": "Equifax Information Services LLC\nP.O. Box 740256\nAtlanta, GA 30374-0256",
    "experian": "Experian\nP.O. Box 4500\nAllen, TX 75013",
    "transunion": "TransUnion Consumer Solutions\nP.O. Box 2000\nChester, PA 19016-2000",
}

BUREAU_NAMES: dict[str, str] = {
    "equifax": "Equifax",
    "experian": "Experian",
    "transunion": "TransUnion",
}

_CSS = """
body { font-family: Arial, sans-serif; padding: 20px; color: #0e1726; }
h1 { color: #0e6efb; font-size: 20px; }
h2 { font-size: 15px; border-bottom: 1px solid #e8ecf0; padding-bottom: 3px; }
.meta { color: #5b6473; font-size: 11px; }
.section { margin-bottom: 20px; }
.field { margin: 6px 0; }
.label { font-weight: bold; }
.empty { color: #9aa3b1; font-style: italic; }
.address { white-space: pre-line; margin-bottom: 16px; }
.legal { font-size: 11px; color: #5b6473; }
.tag { display: inline-block; background: #eef4ff; color: #1945a5;
       border-radius: 10px; padding: 2px 8px; margin: 2px; font-size: 11px; }
.afford { background: #eef4ff; padding: 10px; border-radius: 8px; }
.photo { width: 120px; height: 120px; }
"""


@dataclass(frozen=True)
class RenderedDocument:
    """Write-once markup produced from exactly one AssembledRecord."""

    form_type: str
    title: str
    html: str
    generated_at: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _esc(value: Any) -> str:
    """Escape free text for HTML, keeping line breaks."""
    return html_mod.escape(str(value)).replace("\n", "<br>")


def _display_value(field_def: FieldDefinition, value: Any) -> str:
    """Markup for one value, or the "Not provided" placeholder."""
    if field_def.kind == "boolean":
        return "Yes" if value else "No"
    if not is_filled(value):
        return f'<span class="empty">{NOT_PROVIDED}</span>'
    if field_def.kind == "date":
        parsed = parse_date(value)
        if parsed is not None:
            return parsed.strftime("%B %d, %Y")
    if field_def.key == "disputeType":
        return _esc(DISPUTE_TYPES.get(value, value))
    return _esc(value)


def _render_fields(record: AssembledRecord, fields: list[FieldDefinition]) -> str:
    parts: list[str] = []
    for f in fields:
        if f.key not in record.visible_keys:
            continue
        parts.append(
            f'<div class="field"><span class="label">{_esc(f.label)}:</span> '
            f'{_display_value(f, record.value(f.key))}</div>'
        )
    return "\n".join(parts)


def _render_section(record: AssembledRecord, name: str, fields: list[FieldDefinition]) -> str:
    body = _render_fields(record, fields)
    if not body:
        return ""
    return f'<div class="section">\n<h2>{_esc(name)}</h2>\n{body}\n</div>'


def _body_sections(record: AssembledRecord, skip: tuple[str, ...] = ()) -> list[str]:
    """Render every non-personal section in schema order."""
    parts: list[str] = []
    for name, fields in get_sections(record.form_type).items():
        if name in _PERSONAL_SECTION_NAMES or name in skip:
            continue
        section = _render_section(record, name, fields)
        if section:
            parts.append(section)
    return parts


def _render_personal_section(record: AssembledRecord) -> str:
    parts: list[str] = []
    for name, fields in get_sections(record.form_type).items():
        if name in _PERSONAL_SECTION_NAMES:
            parts.append(_render_section(record, name, fields))
    return "\n".join(p for p in parts if p)


# ---------------------------------------------------------------------------
# Form-specific sections
# ---------------------------------------------------------------------------

def _render_dispute_section(record: AssembledRecord) -> str:
    """Letter body for the three bureau disputes."""
    bureau = SUPPORTED_FORMS[record.form_type]["bureau"]
    bureau_name = BUREAU_NAMES[bureau]
    name = record.derived.get("display_name") or NOT_PROVIDED

    enclosures = [
        f.label
        for f in get_sections(record.form_type).get("Supporting Documentation", [])
        if record.value(f.key)
    ]

    parts = [
        f'<div class="section address">{_esc(BUREAU_ADDRESSES[bureau])}</div>',
        '<div class="section"><p>To whom it may concern:</p>'
        "<p>I am writing to dispute inaccurate information in my consumer file. "
        "Under the Fair Credit Reporting Act, I request that you conduct a "
        "reasonable reinvestigation of the items described below and correct "
        "or delete any information that cannot be verified.</p></div>",
    ]
    parts.extend(_body_sections(record, skip=("Supporting Documentation",)))

    if enclosures:
        items = "".join(f"<li>{_esc(label)}</li>" for label in enclosures)
        parts.append(f'<div class="section"><h2>Enclosures</h2><ul>{items}</ul></div>')
    else:
        parts.append(
            '<div class="section"><h2>Enclosures</h2>'
            f'<span class="empty">{NOT_PROVIDED}</span></div>'
        )

    parts.append(
        '<div class="section legal">'
        "<p>I certify that the information provided in this dispute is true and "
        "accurate to the best of my knowledge. I understand that knowingly "
        "submitting false information may constitute fraud.</p>"
        f"<p>Under the Fair Credit Reporting Act (FCRA), {_esc(bureau_name)} must "
        "investigate this dispute within 30 days of receipt and provide written "
        "results.</p></div>"
    )
    parts.append(f'<div class="section"><p>Sincerely,</p><p>{_esc(name)}</p></div>')
    return "\n".join(parts)


def _render_profile_section(record: AssembledRecord) -> str:
    """Body of the Tenant Advantage Profile."""
    parts: list[str] = []

    if record.image_ref:
        parts.append(
            f'<div class="section"><img class="photo" src="{html_mod.escape(record.image_ref)}" '
            'alt="Profile photo"></div>'
        )

    parts.append(
        f'<div class="section meta">Profile Completion: {record.completion_score}%</div>'
    )

    if record.tags:
        chips = "".join(f'<span class="tag">{_esc(t)}</span>' for t in record.tags)
        parts.append(f'<div class="section"><h2>Strengths</h2>{chips}</div>')
    else:
        parts.append(
            '<div class="section"><h2>Strengths</h2>'
            f'<span class="empty">{NOT_PROVIDED}</span></div>'
        )

    affordable = record.derived.get("affordable_rent", 0)
    parts.append(
        '<div class="section afford"><span class="label">Rent Affordability:</span> '
        f"Based on my income, I can comfortably afford ${affordable:,}/month.</div>"
    )

    parts.extend(_body_sections(record))
    return "\n".join(parts)


SECTION_RENDERERS: dict[str, Callable[[AssembledRecord], str]] = {
    "equifax": _render_dispute_section,
    "experian": _render_dispute_section,
    "transunion": _render_dispute_section,
    "edge": _render_profile_section,
}


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def render(record: AssembledRecord) -> RenderedDocument:
    """Render *record* as a standalone HTML document.

    Raises:
        KeyError: if no section renderer is registered for the form type.
    """
    section_renderer = SECTION_RENDERERS[record.form_type]
    generated = record.generated_at[:10]

    html = "\n".join([
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{_esc(record.title)}</title>",
        f"<style>{_CSS}</style>",
        "</head>",
        "<body>",
        f"<h1>{_esc(record.title)}</h1>",
        f'<div class="meta">Generated: {_esc(generated)}</div>',
        _render_personal_section(record),
        section_renderer(record),
        "</body>",
        "</html>",
    ])
    return RenderedDocument(
        form_type=record.form_type,
        title=record.title,
        html=html,
        generated_at=record.generated_at,
    )
