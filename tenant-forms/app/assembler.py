"""Document assembler for the Tenant Forms tool.

Turns a form's values and auxiliary selections into an AssembledRecord,
the immutable input to every renderer and exporter. Assembly always
succeeds for a well-formed state; whether the user is *allowed* to submit
is decided beforehand by the form's policy (see app.policies).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping

from app.calculators import derive_values
from app.field_schema import SUPPORTED_FORMS, get_schema, is_field_visible
from app.form_state import AuxiliarySelections, completion_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssembledRecord:
    """Snapshot of one submitted form. Never mutated after creation."""

    form_type: str
    title: str
    fields: Mapping[str, Any]
    visible_keys: tuple[str, ...]
    tags: tuple[str, ...]
    image_ref: str | None
    derived: Mapping[str, Any]
    completion_score: int
    generated_at: str

    def value(self, key: str) -> Any:
        return self.fields.get(key)

    def to_dict(self) -> dict:
        """JSON-friendly copy (dates as ISO strings)."""
        return {
            "form_type": self.form_type,
            "title": self.title,
            "fields": {k: _jsonable(v) for k, v in self.fields.items()},
            "visible_keys": list(self.visible_keys),
            "tags": list(self.tags),
            "image_ref": self.image_ref,
            "derived": dict(self.derived),
            "completion_score": self.completion_score,
            "generated_at": self.generated_at,
        }


def _jsonable(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def assemble(
    values: Mapping[str, Any],
    auxiliary: AuxiliarySelections,
    form_type: str,
    generated_at: datetime | None = None,
) -> AssembledRecord:
    """Build the immutable record for one submission.

    Args:
        values: Field key -> value mapping from the form state.
        auxiliary: Selected tags and attached image reference.
        form_type: Catalog identifier (e.g. "equifax").
        generated_at: Timestamp to embed; defaults to now (UTC).

    Returns:
        AssembledRecord holding every schema key, with empty strings for
        fields the state does not carry.
    """
    schema = get_schema(form_type)
    snapshot = {f.key: values.get(f.key, f.initial_value()) for f in schema}
    stamp = (generated_at or datetime.now(timezone.utc)).isoformat()

    record = AssembledRecord(
        form_type=form_type,
        title=SUPPORTED_FORMS[form_type]["title"],
        fields=MappingProxyType(snapshot),
        visible_keys=tuple(f.key for f in schema if is_field_visible(f, snapshot)),
        tags=tuple(auxiliary.tags),
        image_ref=auxiliary.image_ref,
        derived=MappingProxyType(derive_values(form_type, snapshot)),
        completion_score=completion_score(schema, snapshot),
        generated_at=stamp,
    )
    logger.info(
        "Assembled %s record (%d fields, %d%% complete)",
        form_type, len(snapshot), record.completion_score,
    )
    return record
