"""Exporters for rendered tenant documents: PDF, Word and plain text.

PDF output goes through PyMuPDF's HTML Story layout, so the PDF carries
exactly the markup the renderer produced. Any failure while laying out or
writing the PDF is raised as DocumentGenerationError; the caller keeps the
form state so the user can retry.
"""

from __future__ import annotations

import io
import logging
import uuid
from pathlib import Path
from typing import Any

import pymupdf
from docx import Document
from docx.shared import Inches, Pt

from app.assembler import AssembledRecord
from app.field_schema import DISPUTE_TYPES, FieldDefinition, get_sections, is_filled, parse_date
from app.renderer import NOT_PROVIDED, RenderedDocument
from shared.config_store import get_config_value

logger = logging.getLogger(__name__)

TOOL_NAME = "tenant-forms"
DEFAULT_OUTPUT_DIR = Path(__file__).resolve().parent.parent / "data" / "output"

_PAGE_MARGIN = 36  # 0.5 inch in points


class DocumentGenerationError(RuntimeError):
    """The PDF could not be produced. The form state is unaffected."""


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------

def html_to_pdf(html: str) -> bytes:
    """Lay out *html* on US-Letter pages and return the PDF bytes.

    Raises:
        DocumentGenerationError: if PyMuPDF cannot lay out or write the document.
    """
    try:
        story = pymupdf.Story(html=html)
        buf = io.BytesIO()
        writer = pymupdf.DocumentWriter(buf)
        mediabox = pymupdf.paper_rect("letter")
        where = mediabox + (_PAGE_MARGIN, _PAGE_MARGIN, -_PAGE_MARGIN, -_PAGE_MARGIN)
        more = True
        while more:
            device = writer.begin_page(mediabox)
            more, _ = story.place(where)
            story.draw(device)
            writer.end_page()
        writer.close()
        return buf.getvalue()
    except Exception as exc:
        logger.exception("PDF layout failed")
        raise DocumentGenerationError("Failed to generate PDF") from exc


def _output_dir() -> Path:
    configured = get_config_value(TOOL_NAME, "output_dir", "")
    return Path(configured) if configured else DEFAULT_OUTPUT_DIR


def export_pdf(document: RenderedDocument, output_dir: Path | None = None) -> Path:
    """Write *document* as a PDF file and return its path.

    Args:
        document: The rendered HTML document.
        output_dir: Target directory; defaults to the configured
            ``output_dir`` (data/output).

    Raises:
        DocumentGenerationError: on layout or file-system failure.
    """
    pdf_bytes = html_to_pdf(document.html)
    target_dir = output_dir or _output_dir()
    path = target_dir / f"{document.form_type}-{uuid.uuid4().hex[:8]}.pdf"
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(pdf_bytes)
    except OSError as exc:
        logger.exception("Could not write PDF to %s", target_dir)
        raise DocumentGenerationError(f"Could not save PDF: {exc}") from exc
    logger.info("Saved %s PDF (%d bytes)", document.form_type, len(pdf_bytes))
    return path


# ---------------------------------------------------------------------------
# Word / plain text
# ---------------------------------------------------------------------------

def plain_value(field_def: FieldDefinition, value: Any) -> str:
    """Human-readable text for one value, without markup."""
    if field_def.kind == "boolean":
        return "Yes" if value else "No"
    if not is_filled(value):
        return NOT_PROVIDED
    if field_def.kind == "date":
        parsed = parse_date(value)
        if parsed is not None:
            return parsed.strftime("%B %d, %Y")
    if field_def.key == "disputeType":
        return DISPUTE_TYPES.get(value, str(value))
    return str(value).strip()


def _visible_sections(record: AssembledRecord) -> dict[str, list[FieldDefinition]]:
    sections: dict[str, list[FieldDefinition]] = {}
    for name, fields in get_sections(record.form_type).items():
        shown = [f for f in fields if f.key in record.visible_keys]
        if shown:
            sections[name] = shown
    return sections


def build_plain_text(record: AssembledRecord) -> str:
    """Build a plain text export of the record."""
    lines: list[str] = []
    lines.append(record.title)
    lines.append(f"Generated: {record.generated_at[:10]}")
    lines.append("=" * 60)
    lines.append("")

    if record.form_type == "edge":
        lines.append(f"Profile Completion: {record.completion_score}%")
        lines.append(f"Strengths: {', '.join(record.tags) if record.tags else NOT_PROVIDED}")
        lines.append(f"Affordable Rent: ${record.derived.get('affordable_rent', 0):,}/month")
        lines.append("")

    for section_name, fields in _visible_sections(record).items():
        lines.append(section_name)
        lines.append("-" * len(section_name))
        for f in fields:
            lines.append(f"  {f.label}: {plain_value(f, record.value(f.key))}")
        lines.append("")

    return "\n".join(lines)


def build_docx(record: AssembledRecord) -> bytes:
    """Build a Word document from the record, one table per section."""
    doc = Document()
    for section in doc.sections:
        section.top_margin = Inches(1)
        section.bottom_margin = Inches(1)
        section.left_margin = Inches(1)
        section.right_margin = Inches(1)

    title_para = doc.add_paragraph()
    title_run = title_para.add_run(record.title)
    title_run.font.name = "Arial"
    title_run.font.size = Pt(14)
    title_run.bold = True
    title_para.paragraph_format.space_after = Pt(12)

    date_para = doc.add_paragraph()
    date_run = date_para.add_run(f"Generated: {record.generated_at[:10]}")
    date_run.font.name = "Arial"
    date_run.font.size = Pt(10)
    date_para.paragraph_format.space_after = Pt(12)

    if record.form_type == "edge":
        summary = doc.add_paragraph()
        summary_run = summary.add_run(
            f"Profile Completion: {record.completion_score}%\n"
            f"Strengths: {', '.join(record.tags) if record.tags else NOT_PROVIDED}\n"
            f"Affordable Rent: ${record.derived.get('affordable_rent', 0):,}/month"
        )
        summary_run.font.name = "Arial"
        summary_run.font.size = Pt(10)

    for section_name, fields in _visible_sections(record).items():
        heading = doc.add_paragraph()
        h_run = heading.add_run(section_name)
        h_run.font.name = "Arial"
        h_run.font.size = Pt(11)
        h_run.bold = True
        heading.paragraph_format.space_before = Pt(12)
        heading.paragraph_format.space_after = Pt(4)

        table = doc.add_table(rows=len(fields), cols=2)
        table.style = "Table Grid"
        for i, f in enumerate(fields):
            cell_label = table.cell(i, 0)
            cell_value = table.cell(i, 1)
            cell_label.text = f.label
            cell_value.text = plain_value(f, record.value(f.key))
            for paragraph in cell_label.paragraphs:
                for run in paragraph.runs:
                    run.font.name = "Arial"
                    run.font.size = Pt(9)
                    run.bold = True
            for paragraph in cell_value.paragraphs:
                for run in paragraph.runs:
                    run.font.name = "Arial"
                    run.font.size = Pt(9)

    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()
