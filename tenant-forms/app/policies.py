"""Submission gates applied before a form is assembled.

The gate belongs to the calling form, not to the assembler: the profile
form weighs completeness, the bureau disputes insist on every mandatory
field being valid.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from app.form_state import FormController
from shared.config_store import get_config_value

TOOL_NAME = "tenant-forms"


@dataclass(frozen=True)
class GateDecision:
    """Whether a submission may proceed.

    status is one of "ok", "warn" (proceed only after confirmation),
    "invalid" (field errors listed in ``errors``) or "blocked".
    """

    status: str
    messages: tuple[str, ...] = ()
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def allowed(self) -> bool:
        return self.status in ("ok", "warn")


class RequiredFieldsPolicy:
    """Dispute letters go out only when every shown field validates."""

    def check(self, controller: FormController) -> GateDecision:
        controller.validate_all()
        errors = controller.errors()
        if errors:
            return GateDecision(
                status="invalid",
                messages=tuple(errors.values()),
                errors=errors,
            )
        return GateDecision(status="ok")


class CompletionThresholdPolicy:
    """Profile gate: hard block under one threshold, confirmation under another."""

    def __init__(self, block_below: int | None = None, warn_below: int | None = None):
        self._block_below = block_below
        self._warn_below = warn_below

    @property
    def block_below(self) -> int:
        if self._block_below is not None:
            return self._block_below
        return get_config_value(TOOL_NAME, "profile_block_below", 30)

    @property
    def warn_below(self) -> int:
        if self._warn_below is not None:
            return self._warn_below
        return get_config_value(TOOL_NAME, "profile_warn_below", 60)

    def check(self, controller: FormController) -> GateDecision:
        score = controller.completion_score
        if score < self.block_below:
            return GateDecision(
                status="blocked",
                messages=(
                    f"Your profile is only {score}% complete. "
                    f"Complete at least {self.block_below}% to generate it.",
                ),
            )

        controller.validate_all()
        errors = controller.errors()
        if errors:
            return GateDecision(status="invalid", messages=tuple(errors.values()), errors=errors)

        if score < self.warn_below:
            return GateDecision(
                status="warn",
                messages=(
                    f"Your profile is only {score}% complete. A more complete profile "
                    "will make you stand out more. Continue anyway?",
                ),
            )
        return GateDecision(status="ok")
