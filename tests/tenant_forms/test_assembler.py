"""Tests for tenant-forms/app/assembler.py — immutable document records."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from app.assembler import assemble
from app.field_schema import get_schema
from app.form_state import AuxiliarySelections, FormController

_FIXED = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class TestAssemble:
    def test_empty_values_include_every_key(self):
        record = assemble({}, AuxiliarySelections(), "edge", generated_at=_FIXED)
        assert set(record.fields) == {f.key for f in get_schema("edge")}
        assert record.value("fullName") == ""
        assert record.value("hasGuarantor") is False
        assert record.completion_score == 0
        assert record.tags == ()
        assert record.image_ref is None

    def test_metadata(self):
        record = assemble({}, AuxiliarySelections(), "equifax", generated_at=_FIXED)
        assert record.form_type == "equifax"
        assert record.title == "Equifax Housing Dispute"
        assert record.generated_at == "2026-10-19T12:00:00+00:00"

    def test_default_timestamp(self):
        record = assemble({}, AuxiliarySelections(), "edge")
        assert record.generated_at.startswith(str(datetime.now(timezone.utc).year))

    def test_ignores_keys_outside_schema(self):
        record = assemble({"bogus": 1}, AuxiliarySelections(), "edge", generated_at=_FIXED)
        assert "bogus" not in record.fields

    def test_record_is_immutable(self):
        record = assemble({}, AuxiliarySelections(), "edge", generated_at=_FIXED)
        with pytest.raises(TypeError):
            record.fields["fullName"] = "x"
        with pytest.raises(AttributeError):
            record.completion_score = 99

    def test_detached_from_input(self):
        values = {"fullName": "Jordan Lee"}
        record = assemble(values, AuxiliarySelections(), "edge", generated_at=_FIXED)
        values["fullName"] = "Someone Else"
        assert record.value("fullName") == "Jordan Lee"

    def test_auxiliary_selections(self):
        aux = AuxiliarySelections(tags=("Military Service", "Pet-Free"), image_ref="me.png")
        record = assemble({}, aux, "edge", generated_at=_FIXED)
        assert record.tags == ("Military Service", "Pet-Free")
        assert record.image_ref == "me.png"

    def test_derived_values(self, profile_data):
        record = assemble(profile_data, AuxiliarySelections(), "edge", generated_at=_FIXED)
        assert record.derived["affordable_rent"] == 900
        assert record.derived["display_name"] == "Jordan Lee"
        assert record.completion_score == 61

    def test_hidden_values_kept_but_not_visible(self, equifax_data):
        values = {**equifax_data, "disputeType": "identity"}
        record = assemble(values, AuxiliarySelections(), "equifax", generated_at=_FIXED)
        assert record.value("courtCase") == "2021-CV-12345"
        assert "courtCase" not in record.visible_keys
        assert "disputeType" in record.visible_keys

    def test_from_controller_snapshot(self, equifax_data):
        controller = FormController("equifax")
        for key, value in equifax_data.items():
            controller.set_field(key, value)
        snap = controller.snapshot()
        record = assemble(snap.values, snap.auxiliary(), "equifax", generated_at=_FIXED)
        assert record.completion_score == controller.completion_score
        assert dict(record.fields) == controller.values

    def test_unknown_form(self):
        with pytest.raises(KeyError):
            assemble({}, AuxiliarySelections(), "nonexistent")


class TestToDict:
    def test_dates_serialized(self):
        record = assemble(
            {"moveInDate": date(2026, 12, 1)}, AuxiliarySelections(), "edge",
            generated_at=_FIXED,
        )
        data = record.to_dict()
        assert data["fields"]["moveInDate"] == "2026-12-01"
        assert data["tags"] == []
        assert isinstance(data["visible_keys"], list)
        assert data["derived"]["affordable_rent"] == 0
