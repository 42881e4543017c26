"""Tenant Forms -- Streamlit dashboard.

Catalog of the bureau dispute letters and the Tenant Advantage Profile,
schema-driven form entry with live completion score and validation, and
PDF / Word / text download of the generated document. Leaving a form
discards it; nothing is autosaved.
"""

from __future__ import annotations

import html as html_mod
import sys
from datetime import date
from pathlib import Path
from typing import Any, Callable

import streamlit as st
import streamlit.components.v1 as st_components

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from app.calculators import affordability
from app.catalog import FormRouter, FormSession, SubmissionOutcome
from app.exporters import build_docx, build_plain_text
from app.field_schema import DISPUTE_TYPES, FieldDefinition, get_sections, parse_date
from shared.theme import render_nav_bar, render_progress, render_theme_css

# -- Page config --------------------------------------------------------------

st.set_page_config(
    page_title="Tenant Forms -- Document Generator",
    layout="wide",
)

render_theme_css()

# -- Session state defaults ---------------------------------------------------

_DEFAULTS: dict = {
    "router": None,
    "form_nonce": 0,
    "pending_outcome": None,
    "last_generated": None,
}
for _k, _v in _DEFAULTS.items():
    if _k not in st.session_state:
        st.session_state[_k] = _v

if st.session_state.router is None:
    st.session_state.router = FormRouter()

router: FormRouter = st.session_state.router


# -- Input handlers (one per field kind) --------------------------------------

def _text_input(field_def: FieldDefinition, current: Any, label: str, key: str) -> Any:
    if field_def.multiline:
        return st.text_area(label, value=current or "", help=field_def.help_text or None,
                            key=key, height=120)
    return st.text_input(label, value=current or "", help=field_def.help_text or None, key=key)


def _number_input(field_def: FieldDefinition, current: Any, label: str, key: str) -> Any:
    # Kept as text so partial entries like "$1," can be corrected inline
    return st.text_input(label, value="" if current in (None, "") else str(current),
                         help=field_def.help_text or None, key=key)


# Birth dates and old eviction filings sit well outside Streamlit's default +/-10 years
DATE_MIN = date(1900, 1, 1)
DATE_MAX = date(2100, 12, 31)


def _date_input(field_def: FieldDefinition, current: Any, label: str, key: str) -> Any:
    picked = st.date_input(label, value=parse_date(current) if current else None,
                           min_value=DATE_MIN, max_value=DATE_MAX,
                           help=field_def.help_text or None, key=key, format="MM/DD/YYYY")
    return picked if isinstance(picked, date) else ""


def _boolean_input(field_def: FieldDefinition, current: Any, label: str, key: str) -> Any:
    return st.checkbox(label, value=bool(current), help=field_def.help_text or None, key=key)


def _choice_input(field_def: FieldDefinition, current: Any, label: str, key: str) -> Any:
    options = [""] + list(field_def.options)
    idx = options.index(current) if current in options else 0
    labels = DISPUTE_TYPES if field_def.key == "disputeType" else {}
    return st.selectbox(
        label,
        options=options,
        index=idx,
        format_func=lambda x: labels.get(x, x) or "Select...",
        help=field_def.help_text or None,
        key=key,
    )


INPUT_HANDLERS: dict[str, Callable[[FieldDefinition, Any, str, str], Any]] = {
    "text": _text_input,
    "number": _number_input,
    "date": _date_input,
    "boolean": _boolean_input,
    "choice": _choice_input,
}


# -- Helpers ------------------------------------------------------------------

def _open_form(form_type: str) -> None:
    router.activate(form_type)
    st.session_state.form_nonce += 1
    st.session_state.pending_outcome = None


def _close_form() -> None:
    router.deactivate()
    st.session_state.pending_outcome = None


def _handle_outcome(outcome: SubmissionOutcome) -> None:
    if outcome.succeeded:
        record = outcome.record
        st.session_state.last_generated = {
            "title": record.title,
            "form_type": record.form_type,
            "pdf": outcome.pdf_path.read_bytes() if outcome.pdf_path else b"",
            "docx": build_docx(record),
            "txt": build_plain_text(record),
            "html": outcome.document.html,
        }
        st.session_state.pending_outcome = None
    else:
        st.session_state.pending_outcome = outcome


def _render_field(session: FormSession, field_def: FieldDefinition) -> None:
    controller = session.controller
    label = field_def.label + (" *" if field_def.required else "")
    widget_key = f"f{st.session_state.form_nonce}_{field_def.key}"
    current = controller.get(field_def.key)

    value = INPUT_HANDLERS[field_def.kind](field_def, current, label, widget_key)
    if value != current:
        controller.set_field(field_def.key, value)

    result = controller.results.get(field_def.key)
    if result is not None and not result.valid:
        st.markdown(
            f'<div class="field-error">{html_mod.escape(result.message or "")}</div>',
            unsafe_allow_html=True,
        )


def _render_strengths(session: FormSession) -> None:
    controller = session.controller
    st.markdown('<div class="section-label">Your Strengths</div>', unsafe_allow_html=True)
    cols = st.columns(3)
    for i, tag in enumerate(controller.tag_vocabulary):
        with cols[i % 3]:
            selected = tag in controller.state.tags
            ticked = st.checkbox(tag, value=selected,
                                 key=f"f{st.session_state.form_nonce}_tag_{i}")
            if ticked != selected:
                controller.toggle_tag(tag)


def _render_affordability(session: FormSession) -> None:
    amount = affordability(session.controller.get("monthlyIncome"))
    st.markdown(
        '<div class="afford-card">Rent Affordability Calculator<br>'
        "Based on your income, you can comfortably afford:"
        f'<div class="afford-amount">${amount:,}/month</div>'
        "(Using 30% income rule)</div>",
        unsafe_allow_html=True,
    )


# -- Catalog view -------------------------------------------------------------

def _render_catalog() -> None:
    render_nav_bar("Document Generator", "Create and download your dispute forms")

    generated = st.session_state.last_generated
    if generated:
        st.success(f"{generated['title']} generated.")
        dl_cols = st.columns(4)
        base = generated["form_type"]
        with dl_cols[0]:
            st.download_button("Download PDF", data=generated["pdf"],
                               file_name=f"{base}.pdf", mime="application/pdf",
                               use_container_width=True, type="primary")
        with dl_cols[1]:
            st.download_button(
                "Download .docx", data=generated["docx"], file_name=f"{base}.docx",
                mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
                use_container_width=True,
            )
        with dl_cols[2]:
            st.download_button("Download .txt", data=generated["txt"],
                               file_name=f"{base}.txt", mime="text/plain",
                               use_container_width=True)
        with dl_cols[3]:
            st.download_button("Download .html", data=generated["html"],
                               file_name=f"{base}.html", mime="text/html",
                               use_container_width=True)

    for entry in router.entries:
        card_col, btn_col = st.columns([5, 1])
        with card_col:
            st.markdown(
                f'<div class="form-card" style="border-left-color:{entry.color}">'
                f'<div class="form-card-title">{html_mod.escape(entry.title)}</div>'
                f'<div class="form-card-desc">{html_mod.escape(entry.description)}</div>'
                f"</div>",
                unsafe_allow_html=True,
            )
        with btn_col:
            if st.button("Create", key=f"open_{entry.form_type}", use_container_width=True):
                _open_form(entry.form_type)
                st.rerun()

    st.markdown(
        '<div class="info-box"><strong>How it works</strong><br>'
        "1. Select the form you need<br>"
        "2. Fill in your information<br>"
        "3. Review and edit as needed<br>"
        "4. Generate and download PDF<br>"
        "5. Print or email to credit bureaus</div>",
        unsafe_allow_html=True,
    )


# -- Form view ----------------------------------------------------------------

def _render_form(session: FormSession) -> None:
    controller = session.controller
    entry = session.entry
    is_profile = session.form_type == "edge"

    head_col, back_col = st.columns([5, 1])
    with head_col:
        render_nav_bar(entry.title, entry.description)
    with back_col:
        if st.button("Back", use_container_width=True):
            _close_form()
            st.rerun()

    form_col, preview_col = st.columns([3, 2], gap="large")

    with form_col:
        if is_profile:
            image_ref = st.text_input(
                "Professional Photo (local image path or URI)",
                value=controller.state.image_ref or "",
                key=f"f{st.session_state.form_nonce}_image",
                help="A professional photo helps landlords connect with you as a person.",
            )
            controller.set_image(image_ref)

        for section_name, fields in get_sections(session.form_type).items():
            shown = [f for f in fields if controller.is_visible(f.key)]
            if not shown:
                continue
            st.markdown(f'<div class="section-label">{html_mod.escape(section_name)}</div>',
                        unsafe_allow_html=True)
            for field_def in shown:
                _render_field(session, field_def)
            if is_profile and section_name == "Your Housing Story":
                _render_strengths(session)
            if is_profile and section_name == "Financial Stability":
                _render_affordability(session)

    with preview_col:
        label = "Profile Completion" if is_profile else "Form Completion"
        render_progress(controller.completion_score,
                        f"{label}: {controller.completion_score}%")

        submit_label = "Generate Profile" if is_profile else "Generate PDF"
        blocked = is_profile and controller.completion_score < entry.policy.block_below
        if st.button(submit_label, type="primary", use_container_width=True, disabled=blocked):
            _handle_outcome(router.submit())
            st.rerun()

        pending = st.session_state.pending_outcome
        if pending is not None:
            if pending.status == "needs_confirmation":
                st.warning(" ".join(pending.messages))
                keep_col, go_col = st.columns(2)
                with keep_col:
                    if st.button("Keep Editing", use_container_width=True):
                        st.session_state.pending_outcome = None
                        st.rerun()
                with go_col:
                    if st.button("Generate Anyway", use_container_width=True):
                        _handle_outcome(router.submit(confirm_incomplete=True))
                        st.rerun()
            elif pending.status == "invalid":
                st.error("Please fix the following before generating:\n\n"
                         + "\n".join(f"- {m}" for m in pending.messages))
            elif pending.status == "failed":
                st.error(" ".join(pending.messages))
                if st.button("Dismiss"):
                    st.session_state.pending_outcome = None
                    st.rerun()
            else:
                st.error(" ".join(pending.messages))

        st.markdown('<div class="section-label">Live Preview</div>', unsafe_allow_html=True)
        st_components.html(session.preview().html, height=640, scrolling=True)


# -- Main ---------------------------------------------------------------------

if router.session is None:
    _render_catalog()
else:
    st.session_state.last_generated = None
    _render_form(router.session)
