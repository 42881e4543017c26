"""Form state controller for the Tenant Forms tool.

One FormController is created when a form is activated and dropped when
the user leaves it. Every change -- typed text, checkbox toggles, choice
selections -- goes through ``set_field`` so validation and the completion
score can never go stale relative to the stored values.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from app.field_schema import (
    TAG_VOCABULARY,
    VALID,
    FieldDefinition,
    ValidationResult,
    default_values,
    get_schema,
    is_field_visible,
    is_filled,
    validate_field,
)


@dataclass
class AuxiliarySelections:
    """Selections that live outside the field schema."""

    tags: tuple[str, ...] = ()
    image_ref: str | None = None


@dataclass
class FormState:
    """Current values of one form plus its selected tags and attached image."""

    values: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    image_ref: str | None = None

    def auxiliary(self) -> AuxiliarySelections:
        return AuxiliarySelections(tags=tuple(self.tags), image_ref=self.image_ref)


def completion_score(schema: tuple[FieldDefinition, ...], values: dict[str, Any]) -> int:
    """Percentage of schema fields holding a non-empty value, rounded half up."""
    total = len(schema)
    if total == 0:
        return 0
    filled = sum(1 for f in schema if is_filled(values.get(f.key)))
    # Integer form of round(100 * filled / total) with halves rounded up
    return (200 * filled + total) // (2 * total)


class FormController:
    """Owns the FormState of the active form and keeps its derived state current."""

    def __init__(self, form_type: str):
        self.form_type = form_type
        self.schema = get_schema(form_type)
        self._fields = {f.key: f for f in self.schema}
        self.tag_vocabulary = TAG_VOCABULARY.get(form_type, ())
        self.state = FormState(values=default_values(form_type))
        self.results: dict[str, ValidationResult] = {}
        self.completion_score = completion_score(self.schema, self.state.values)

    # -- Reads ---------------------------------------------------------------

    @property
    def values(self) -> dict[str, Any]:
        """A copy of the current values; mutate through ``set_field`` only."""
        return dict(self.state.values)

    def get(self, key: str) -> Any:
        return self.state.values[self._field(key).key]

    def is_visible(self, key: str) -> bool:
        """Whether *key* is shown given the current value of its controlling field."""
        return is_field_visible(self._field(key), self.state.values)

    def visible_fields(self) -> list[FieldDefinition]:
        return [f for f in self.schema if self.is_visible(f.key)]

    def snapshot(self) -> FormState:
        """Deep copy of the current state for assembly."""
        return copy.deepcopy(self.state)

    # -- Mutations -----------------------------------------------------------

    def set_field(self, key: str, value: Any) -> ValidationResult:
        """Store *value*, re-validate the field and recompute the completion score.

        Raises:
            KeyError: if *key* is not part of this form's schema.
        """
        field_def = self._field(key)
        self.state.values[key] = value
        result = self._validate(field_def)
        self.results[key] = result
        # Fields controlled by *key* may have just been shown or hidden
        for dependent in self.schema:
            if dependent.visible_when and dependent.visible_when[0] == key \
                    and dependent.key in self.results:
                self.results[dependent.key] = self._validate(dependent)
        self.completion_score = completion_score(self.schema, self.state.values)
        return result

    def validate_all(self) -> dict[str, ValidationResult]:
        """Validate every field; hidden fields are reported valid."""
        results = {f.key: self._validate(f) for f in self.schema}
        self.results = dict(results)
        return results

    def errors(self) -> dict[str, str]:
        """Messages of failing results for the fields currently shown."""
        return {
            k: r.message or ""
            for k, r in self.results.items()
            if not r.valid and self.is_visible(k)
        }

    def toggle_tag(self, tag: str) -> bool:
        """Select or deselect *tag*. Returns True if it is now selected.

        Raises:
            ValueError: if *tag* is not in this form's tag vocabulary.
        """
        if tag not in self.tag_vocabulary:
            raise ValueError(f"Unknown tag for {self.form_type}: {tag}")
        if tag in self.state.tags:
            self.state.tags.remove(tag)
            return False
        self.state.tags.append(tag)
        return True

    def set_image(self, image_ref: str | None) -> None:
        """Attach (or clear) an opaque local image reference."""
        self.state.image_ref = image_ref or None

    def reset(self) -> None:
        """Restore schema defaults and clear tags, image and results."""
        self.state = FormState(values=default_values(self.form_type))
        self.results = {}
        self.completion_score = completion_score(self.schema, self.state.values)

    def _validate(self, field_def: FieldDefinition) -> ValidationResult:
        if not is_field_visible(field_def, self.state.values):
            return VALID
        return validate_field(field_def, self.state.values.get(field_def.key))

    def _field(self, key: str) -> FieldDefinition:
        try:
            return self._fields[key]
        except KeyError:
            raise KeyError(f"Unknown field for {self.form_type}: {key}") from None
