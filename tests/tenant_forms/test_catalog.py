"""Tests for tenant-forms/app/catalog.py — form router and submission flow."""

from __future__ import annotations

from pathlib import Path

import pytest

from app.catalog import FORM_CATALOG, DocumentPipeline, FormRouter, get_entry
from app.exporters import DocumentGenerationError, export_pdf
from app.policies import CompletionThresholdPolicy, RequiredFieldsPolicy


@pytest.fixture()
def router(tmp_output_dir):
    pipeline = DocumentPipeline(exporter=lambda doc: export_pdf(doc, output_dir=tmp_output_dir))
    return FormRouter(pipeline)


def _failing_exporter(document):
    raise DocumentGenerationError("Failed to generate PDF")


def _fill(session, data):
    for key, value in data.items():
        session.controller.set_field(key, value)


# ── Catalog ──────────────────────────────────────────────────────────────


class TestCatalog:
    def test_entries(self):
        assert [e.form_type for e in FORM_CATALOG] == ["equifax", "experian", "transunion", "edge"]

    def test_policies_by_kind(self):
        assert isinstance(get_entry("edge").policy, CompletionThresholdPolicy)
        assert isinstance(get_entry("equifax").policy, RequiredFieldsPolicy)

    def test_unknown_entry(self):
        with pytest.raises(KeyError):
            get_entry("nonexistent")


# ── Router state ─────────────────────────────────────────────────────────


class TestRouter:
    def test_starts_in_catalog(self, router):
        assert router.state == "catalog"
        assert router.session is None
        assert len(router.entries) == 4

    def test_activate_and_cancel(self, router):
        session = router.activate("experian")
        assert router.state == "editing"
        assert session.form_type == "experian"
        router.deactivate()
        assert router.state == "catalog"
        assert router.session is None

    def test_activation_gives_fresh_state(self, router):
        router.activate("edge").controller.set_field("fullName", "Jordan")
        router.deactivate()
        session = router.activate("edge")
        assert session.controller.get("fullName") == ""
        assert session.controller.completion_score == 0

    def test_submit_without_session(self, router):
        with pytest.raises(RuntimeError):
            router.submit()

    def test_successful_submit_returns_to_catalog(self, router, equifax_data):
        _fill(router.activate("equifax"), equifax_data)
        outcome = router.submit()
        assert outcome.status == "generated"
        assert outcome.succeeded
        assert outcome.pdf_path.read_bytes().startswith(b"%PDF-")
        assert outcome.record.form_type == "equifax"
        assert router.state == "catalog"
        assert router.session is None

    def test_invalid_submit_stays_editing(self, router):
        router.activate("transunion")
        outcome = router.submit()
        assert outcome.status == "invalid"
        assert "landlordName" in outcome.errors
        assert router.state == "editing"

    def test_unexpected_error_restores_editing(self, equifax_data):
        def _broken(document):
            raise ValueError("boom")

        router = FormRouter(DocumentPipeline(exporter=_broken))
        session = router.activate("equifax")
        _fill(session, equifax_data)
        with pytest.raises(ValueError):
            router.submit()
        assert router.state == "editing"
        assert router.session is session

    def test_export_runs_in_rendering_state(self, tmp_output_dir, equifax_data):
        seen = []

        def _recording(document):
            seen.append(router.state)
            return export_pdf(document, output_dir=tmp_output_dir)

        router = FormRouter(DocumentPipeline(exporter=_recording))
        _fill(router.activate("equifax"), equifax_data)
        router.submit()
        assert seen == ["rendering"]
        assert router.state == "catalog"

    def test_complete_requires_rendering(self, router):
        with pytest.raises(RuntimeError):
            router.complete()
        router.activate("edge")
        with pytest.raises(RuntimeError):
            router.complete()
        assert router.state == "editing"

    def test_complete_returns_to_catalog(self, router):
        router.activate("experian")
        router.state = "rendering"
        router.complete()
        assert router.state == "catalog"
        assert router.session is None


# ── Profile gate through the session ─────────────────────────────────────


class TestProfileSubmission:
    def test_blocked(self, router):
        session = router.activate("edge")
        session.controller.set_field("fullName", "Jordan")
        outcome = router.submit()
        assert outcome.status == "blocked"
        assert outcome.record is None
        assert router.state == "editing"

    def test_needs_confirmation_then_generate(self, router, profile_data):
        session = router.activate("edge")
        partial = dict(list(profile_data.items())[:17])
        _fill(session, partial)
        assert session.controller.completion_score == 45

        outcome = router.submit()
        assert outcome.status == "needs_confirmation"
        assert router.state == "editing"

        outcome = router.submit(confirm_incomplete=True)
        assert outcome.status == "generated"
        assert outcome.record.completion_score == 45
        assert router.state == "catalog"

    def test_complete_profile_generates(self, router, profile_data):
        session = router.activate("edge")
        _fill(session, profile_data)
        session.controller.toggle_tag("Healthcare Worker")
        outcome = router.submit()
        assert outcome.status == "generated"
        assert outcome.record.tags == ("Healthcare Worker",)
        assert "$900/month" in outcome.document.html


# ── Export failure ───────────────────────────────────────────────────────


class TestExportFailure:
    def test_failure_keeps_state(self, equifax_data):
        router = FormRouter(DocumentPipeline(exporter=_failing_exporter))
        session = router.activate("equifax")
        _fill(session, equifax_data)
        before = session.controller.values

        outcome = router.submit()
        assert outcome.status == "failed"
        assert outcome.messages == (
            "Failed to generate PDF. Your answers are still here; try again.",
        )
        assert outcome.pdf_path is None
        assert outcome.document is not None
        assert router.state == "editing"
        assert router.session is session
        assert session.controller.values == before

    def test_retry_after_failure(self, tmp_output_dir, equifax_data):
        attempts = []

        def _flaky(document):
            attempts.append(document)
            if len(attempts) == 1:
                raise DocumentGenerationError("Failed to generate PDF")
            return export_pdf(document, output_dir=tmp_output_dir)

        router = FormRouter(DocumentPipeline(exporter=_flaky))
        _fill(router.activate("equifax"), equifax_data)
        assert router.submit().status == "failed"

        outcome = router.submit()
        assert outcome.status == "generated"
        assert isinstance(outcome.pdf_path, Path)


def test_preview_renders_current_state(router):
    session = router.activate("edge")
    session.controller.set_field("personalStatement", "Hello <b>landlord</b>")
    html = session.preview().html
    assert "Hello &lt;b&gt;landlord&lt;/b&gt;" in html
    assert router.state == "editing"
