"""Form catalog and router for the Tenant Forms tool.

The router moves between three states::

    catalog -> editing -> (submit) -> rendering -> (complete) -> catalog
    editing -> catalog                (cancel, discards the form)

Each activation creates a fresh FormSession that owns its own
FormController. Sessions only see a DocumentPipeline (assemble, render,
export), never the router itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping

from app.assembler import AssembledRecord, assemble
from app.exporters import DocumentGenerationError, export_pdf
from app.field_schema import SUPPORTED_FORMS
from app.form_state import AuxiliarySelections, FormController
from app.policies import CompletionThresholdPolicy, RequiredFieldsPolicy
from app.renderer import RenderedDocument, render

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormEntry:
    """One selectable form in the catalog."""

    form_type: str
    title: str
    description: str
    color: str
    policy: Any


FORM_CATALOG: tuple[FormEntry, ...] = tuple(
    FormEntry(
        form_type=form_type,
        title=meta["title"],
        description=meta["description"],
        color=meta["color"],
        policy=(
            CompletionThresholdPolicy() if meta["kind"] == "profile"
            else RequiredFieldsPolicy()
        ),
    )
    for form_type, meta in SUPPORTED_FORMS.items()
)


def get_entry(form_type: str) -> FormEntry:
    for entry in FORM_CATALOG:
        if entry.form_type == form_type:
            return entry
    raise KeyError(f"Unknown form type: {form_type}")


# ---------------------------------------------------------------------------
# Pipeline handed to the active form
# ---------------------------------------------------------------------------

class DocumentPipeline:
    """The narrow set of document capabilities a form needs."""

    def __init__(self, exporter: Callable[[RenderedDocument], Path] = export_pdf):
        self._exporter = exporter

    def assemble(
        self,
        values: Mapping[str, Any],
        auxiliary: AuxiliarySelections,
        form_type: str,
    ) -> AssembledRecord:
        return assemble(values, auxiliary, form_type)

    def render(self, record: AssembledRecord) -> RenderedDocument:
        return render(record)

    def export(self, document: RenderedDocument) -> Path:
        return self._exporter(document)


@dataclass
class SubmissionOutcome:
    """Result of one submit attempt.

    status is one of "blocked", "invalid", "needs_confirmation",
    "generated" or "failed".
    """

    status: str
    messages: tuple[str, ...] = ()
    errors: dict[str, str] = field(default_factory=dict)
    record: AssembledRecord | None = None
    document: RenderedDocument | None = None
    pdf_path: Path | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "generated"


class FormSession:
    """An activated form: its controller plus the pipeline it may use."""

    def __init__(self, entry: FormEntry, pipeline: DocumentPipeline):
        self.entry = entry
        self.controller = FormController(entry.form_type)
        self._pipeline = pipeline

    @property
    def form_type(self) -> str:
        return self.entry.form_type

    def preview(self) -> RenderedDocument:
        """Render the current state without gating or exporting."""
        snapshot = self.controller.snapshot()
        record = self._pipeline.assemble(snapshot.values, snapshot.auxiliary(), self.form_type)
        return self._pipeline.render(record)

    def submit(self, confirm_incomplete: bool = False) -> SubmissionOutcome:
        """Gate, assemble, render and export the current form.

        Args:
            confirm_incomplete: The user already accepted the
                incomplete-profile warning.

        Returns:
            SubmissionOutcome. Nothing here mutates the form state, so a
            "failed" outcome can simply be retried.
        """
        decision = self.entry.policy.check(self.controller)
        if decision.status == "blocked":
            logger.warning("Submission of %s blocked by completion gate", self.form_type)
            return SubmissionOutcome(status="blocked", messages=decision.messages)
        if decision.status == "invalid":
            logger.info(
                "Submission of %s has %d invalid field(s)", self.form_type, len(decision.errors)
            )
            return SubmissionOutcome(
                status="invalid", messages=decision.messages, errors=dict(decision.errors)
            )
        if decision.status == "warn" and not confirm_incomplete:
            return SubmissionOutcome(status="needs_confirmation", messages=decision.messages)

        snapshot = self.controller.snapshot()
        record = self._pipeline.assemble(snapshot.values, snapshot.auxiliary(), self.form_type)
        document = self._pipeline.render(record)
        try:
            pdf_path = self._pipeline.export(document)
        except DocumentGenerationError as exc:
            logger.warning("Document generation failed for %s: %s", self.form_type, exc)
            return SubmissionOutcome(
                status="failed",
                messages=("Failed to generate PDF. Your answers are still here; try again.",),
                record=record,
                document=document,
            )
        return SubmissionOutcome(
            status="generated", record=record, document=document, pdf_path=pdf_path
        )


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------

class FormRouter:
    """Switches the active form and tracks where the user is."""

    def __init__(self, pipeline: DocumentPipeline | None = None):
        self.pipeline = pipeline or DocumentPipeline()
        self.state = "catalog"
        self.session: FormSession | None = None

    @property
    def entries(self) -> tuple[FormEntry, ...]:
        return FORM_CATALOG

    def activate(self, form_type: str) -> FormSession:
        """Open *form_type* with a fresh, empty form state."""
        entry = get_entry(form_type)
        self.session = FormSession(entry, self.pipeline)
        self.state = "editing"
        return self.session

    def deactivate(self) -> None:
        """Return to the catalog. In-progress answers are discarded."""
        self.session = None
        self.state = "catalog"

    def submit(self, confirm_incomplete: bool = False) -> SubmissionOutcome:
        """Submit the active form; on success the router returns to the catalog.

        Raises:
            RuntimeError: if no form is being edited.
        """
        if self.session is None or self.state != "editing":
            raise RuntimeError("No active form to submit")
        self.state = "rendering"
        try:
            outcome = self.session.submit(confirm_incomplete=confirm_incomplete)
        except Exception:
            self.state = "editing"
            raise
        if outcome.succeeded:
            self.complete()
        else:
            self.state = "editing"
        return outcome

    def complete(self) -> None:
        """Finish rendering and return to the catalog.

        Raises:
            RuntimeError: if no document is being rendered.
        """
        if self.state != "rendering":
            raise RuntimeError(f"Cannot complete from state {self.state!r}")
        logger.info("Finished rendering %s", self.session.form_type)
        self.deactivate()
