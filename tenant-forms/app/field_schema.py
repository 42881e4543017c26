"""Field schema for the Tenant Forms tool.

Declares every form the tool can produce -- the three credit bureau
housing disputes and the Tenant Advantage Profile -- as ordered tuples of
FieldDefinition, together with the validation rules each field carries.

Validation never raises: every check returns a ValidationResult so the
dashboard can show the message inline while the user keeps typing.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

FIELD_KINDS = ("text", "number", "date", "boolean", "choice")

SSN_PATTERN = r"^\d{3}-\d{2}-\d{4}$"
ZIP_PATTERN = r"^\d{5}(-\d{4})?$"
PHONE_PATTERN = r"^\(\d{3}\) \d{3}-\d{4}$"
EMAIL_PATTERN = r"(?i)^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$"

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")


# ---------------------------------------------------------------------------
# Supported forms with metadata
# ---------------------------------------------------------------------------

SUPPORTED_FORMS: dict[str, dict] = {
    "equifax": {
        "title": "Equifax Housing Dispute",
        "description": "Dispute rental & eviction errors with Equifax",
        "kind": "dispute",
        "bureau": "equifax",
        "color": "#FF6B6B",
    },
    "experian": {
        "title": "Experian Tenant Screening Dispute",
        "description": "Challenge screening report inaccuracies",
        "kind": "dispute",
        "bureau": "experian",
        "color": "#4ECDC4",
    },
    "transunion": {
        "title": "TransUnion Rental History Dispute",
        "description": "Correct rental history with TransUnion",
        "kind": "dispute",
        "bureau": "transunion",
        "color": "#45B7D1",
    },
    "edge": {
        "title": "Tenant Advantage Profile",
        "description": "Stand out in screening software",
        "kind": "profile",
        "bureau": None,
        "color": "#0e6efb",
    },
}


@dataclass(frozen=True)
class FieldDefinition:
    """A single input on one of the tenant forms."""

    key: str
    label: str
    kind: str = "text"  # "text", "number", "date", "boolean", "choice"
    required: bool = False
    section: str = ""
    help_text: str = ""
    default: Any = None
    multiline: bool = False
    options: tuple[str, ...] = ()  # For choice fields
    # Keys: "min_length", "pattern", "min", "max"
    validation_rules: dict = field(default_factory=dict)
    # Overrides for the default messages, keyed like validation_rules plus "required"
    messages: dict = field(default_factory=dict)
    # (controlling field key, values for which this field is shown)
    visible_when: tuple[str, tuple[str, ...]] | None = None

    def initial_value(self) -> Any:
        """Value the field takes on activation and reset."""
        if self.default is not None:
            return self.default
        return False if self.kind == "boolean" else ""


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one field value."""

    valid: bool
    message: str | None = None


VALID = ValidationResult(True)


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------

def is_filled(value: Any) -> bool:
    """Return True if *value* counts as provided for completion purposes.

    Blank strings, None and unchecked booleans are empty. Numbers (zero
    included) and dates are always filled.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, date)):
        return True
    return bool(str(value).strip())


def parse_date(value: Any) -> date | None:
    """Parse a date value from a date object or an ISO / mm/dd/yyyy string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "").lstrip("$")
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_field(field_def: FieldDefinition, value: Any) -> ValidationResult:
    """Validate a single field value against its definition.

    Args:
        field_def: The FieldDefinition with its validation rules.
        value: The current value held in the form state.

    Returns:
        ValidationResult with the first failing rule's message, or a valid
        result when every rule passes.
    """
    label = field_def.label
    msgs = field_def.messages
    rules = field_def.validation_rules

    if not is_filled(value):
        if field_def.required:
            return ValidationResult(False, msgs.get("required", f"{label} is required."))
        return VALID

    text = value.strip() if isinstance(value, str) else value

    if field_def.kind == "number":
        number = _to_number(text)
        if number is None:
            return ValidationResult(False, msgs.get("number", f"{label} must be a number."))
        if "min" in rules and number < rules["min"]:
            return ValidationResult(
                False, msgs.get("min", f"{label} must be at least {rules['min']}.")
            )
        if "max" in rules and number > rules["max"]:
            return ValidationResult(
                False, msgs.get("max", f"{label} must be at most {rules['max']}.")
            )

    if field_def.kind == "date" and parse_date(text) is None:
        return ValidationResult(False, msgs.get("date", f"{label} must be a valid date."))

    if field_def.kind == "choice" and field_def.options and text not in field_def.options:
        return ValidationResult(
            False,
            msgs.get("choice", f"{label} must be one of: {', '.join(field_def.options)}."),
        )

    min_length = rules.get("min_length")
    if min_length and len(str(text)) < min_length:
        return ValidationResult(
            False,
            msgs.get("min_length", f"{label} must be at least {min_length} characters."),
        )

    pattern = rules.get("pattern")
    if pattern and not re.match(pattern, str(text)):
        return ValidationResult(False, msgs.get("pattern", f"{label} format is invalid."))

    return VALID


# ---------------------------------------------------------------------------
# Shared personal information (all bureau disputes)
# ---------------------------------------------------------------------------

_PERSONAL = "Personal Information"
_PREVIOUS = "Previous Address"

PERSONAL_FIELDS: tuple[FieldDefinition, ...] = (
    FieldDefinition("firstName", "First Name", required=True, section=_PERSONAL,
                    messages={"required": "First name is required"}),
    FieldDefinition("middleName", "Middle Name", section=_PERSONAL),
    FieldDefinition("lastName", "Last Name", required=True, section=_PERSONAL,
                    messages={"required": "Last name is required"}),
    FieldDefinition(
        "ssn", "Social Security Number", required=True, section=_PERSONAL,
        help_text="XXX-XX-XXXX",
        validation_rules={"pattern": SSN_PATTERN},
        messages={"required": "SSN is required", "pattern": "SSN format: XXX-XX-XXXX"},
    ),
    FieldDefinition("dob", "Date of Birth", kind="date", section=_PERSONAL),
    FieldDefinition("currentAddress", "Current Street Address", required=True,
                    section=_PERSONAL,
                    messages={"required": "Current address is required"}),
    FieldDefinition("city", "City", required=True, section=_PERSONAL,
                    messages={"required": "City is required"}),
    FieldDefinition("state", "State", required=True, section=_PERSONAL,
                    messages={"required": "State is required"}),
    FieldDefinition(
        "zip", "ZIP", required=True, section=_PERSONAL,
        validation_rules={"pattern": ZIP_PATTERN},
        messages={"required": "ZIP is required", "pattern": "Invalid ZIP"},
    ),
    FieldDefinition(
        "phone", "Phone Number", required=True, section=_PERSONAL,
        help_text="(XXX) XXX-XXXX",
        validation_rules={"pattern": PHONE_PATTERN},
        messages={"required": "Phone number is required",
                  "pattern": "Format: (XXX) XXX-XXXX"},
    ),
    FieldDefinition(
        "email", "Email Address", required=True, section=_PERSONAL,
        validation_rules={"pattern": EMAIL_PATTERN},
        messages={"required": "Email is required", "pattern": "Invalid email"},
    ),
    FieldDefinition("previousAddress", "Previous Street Address", section=_PREVIOUS,
                    help_text="Only if you moved in the last two years."),
    FieldDefinition("previousCity", "Previous City", section=_PREVIOUS),
    FieldDefinition("previousState", "Previous State", section=_PREVIOUS),
    FieldDefinition(
        "previousZip", "Previous ZIP", section=_PREVIOUS,
        validation_rules={"pattern": ZIP_PATTERN},
        messages={"pattern": "Invalid ZIP"},
    ),
)

PERSONAL_SECTIONS = (_PERSONAL, _PREVIOUS)


def _explanation(section: str) -> FieldDefinition:
    return FieldDefinition(
        "disputeExplanation", "Detailed Explanation", required=True, section=section,
        multiline=True,
        help_text="Provide specific details about why this information is incorrect.",
        validation_rules={"min_length": 50},
        messages={"required": "Please provide an explanation",
                  "min_length": "Explanation must be at least 50 characters"},
    )


# ---------------------------------------------------------------------------
# Equifax Housing Dispute
# ---------------------------------------------------------------------------

DISPUTE_TYPES: dict[str, str] = {
    "eviction": "Eviction Record",
    "rental_debt": "Rental Debt/Collections",
    "criminal": "Criminal Record on Screening",
    "identity": "Identity Error/Mixed File",
    "other": "Other Housing-Related Issue",
}

DISPUTE_REASONS: tuple[str, ...] = (
    "Information is not mine",
    "Account paid in full",
    "Account settled for less",
    "Judgment satisfied",
    "Case dismissed",
    "Eviction filed in error",
    "Identity theft",
    "Outdated information",
    "Duplicate entry",
    "Incorrect amount",
    "Incorrect dates",
    "Never late on payments",
)

_EVICTION_ONLY = ("disputeType", ("eviction",))

EQUIFAX_FIELDS: tuple[FieldDefinition, ...] = PERSONAL_FIELDS + (
    FieldDefinition(
        "disputeType", "Dispute Type", kind="choice", required=True,
        section="Dispute Type", default="eviction",
        options=tuple(DISPUTE_TYPES),
    ),
    FieldDefinition("accountNumber", "Account Number", section="Dispute Type"),
    FieldDefinition("creditorName", "Creditor Name", section="Dispute Type"),
    FieldDefinition("courtCase", "Court Case Number", section="Eviction Details",
                    help_text="e.g., 2021-CV-12345", visible_when=_EVICTION_ONLY),
    FieldDefinition("evictionDate", "Eviction Filing Date", kind="date",
                    section="Eviction Details", visible_when=_EVICTION_ONLY),
    FieldDefinition("landlordName", "Landlord/Property Manager Name",
                    section="Eviction Details", visible_when=_EVICTION_ONLY),
    FieldDefinition("propertyAddress", "Rental Property Address",
                    section="Eviction Details", visible_when=_EVICTION_ONLY),
    FieldDefinition("judgmentAmount", "Judgment Amount (if any)", kind="number",
                    section="Eviction Details", help_text="$0.00",
                    validation_rules={"min": 0}, visible_when=_EVICTION_ONLY),
    FieldDefinition("satisfiedDate", "Judgment Satisfied Date", kind="date",
                    section="Eviction Details", visible_when=_EVICTION_ONLY),
    FieldDefinition(
        "disputeReason", "Dispute Reason", kind="choice", required=True,
        section="Dispute Reason", options=DISPUTE_REASONS,
        messages={"required": "Please select a dispute reason"},
    ),
    _explanation("Dispute Reason"),
    FieldDefinition("proofOfPayment", "Proof of payment/cancelled checks",
                    kind="boolean", section="Supporting Documentation"),
    FieldDefinition("courtDismissal", "Court dismissal documentation",
                    kind="boolean", section="Supporting Documentation"),
    FieldDefinition("satisfactionLetter", "Satisfaction of judgment letter",
                    kind="boolean", section="Supporting Documentation"),
    FieldDefinition("identityDocuments", "Identity verification documents",
                    kind="boolean", section="Supporting Documentation"),
)


# ---------------------------------------------------------------------------
# Experian Tenant Screening Dispute
# ---------------------------------------------------------------------------

SCREENING_ITEMS: tuple[str, ...] = (
    "Eviction record",
    "Criminal record",
    "Rental collection account",
    "Prior landlord reference",
    "Income or employment data",
    "Identity / mixed file",
    "Other",
)

EXPERIAN_FIELDS: tuple[FieldDefinition, ...] = PERSONAL_FIELDS + (
    FieldDefinition("reportNumber", "Report Number", required=True,
                    section="Screening Report",
                    help_text="Printed at the top of your screening report."),
    FieldDefinition("screeningCompany", "Screening Company", section="Screening Report"),
    FieldDefinition("applicationDate", "Application Date", kind="date",
                    section="Screening Report"),
    FieldDefinition("propertyApplied", "Property Applied For", section="Screening Report"),
    FieldDefinition(
        "inaccurateItem", "Inaccurate Item", kind="choice", required=True,
        section="Screening Report", options=SCREENING_ITEMS,
        messages={"required": "Please select the inaccurate item"},
    ),
    FieldDefinition(
        "disputeReason", "Dispute Reason", kind="choice", required=True,
        section="Dispute Reason", options=DISPUTE_REASONS,
        messages={"required": "Please select a dispute reason"},
    ),
    _explanation("Dispute Reason"),
    FieldDefinition("denialLetter", "Adverse action / denial letter",
                    kind="boolean", section="Supporting Documentation"),
    FieldDefinition("courtDismissal", "Court dismissal documentation",
                    kind="boolean", section="Supporting Documentation"),
    FieldDefinition("identityDocuments", "Identity verification documents",
                    kind="boolean", section="Supporting Documentation"),
)


# ---------------------------------------------------------------------------
# TransUnion Rental History Dispute
# ---------------------------------------------------------------------------

TRANSUNION_FIELDS: tuple[FieldDefinition, ...] = PERSONAL_FIELDS + (
    FieldDefinition("fileNumber", "TransUnion File Number", section="Rental History"),
    FieldDefinition("landlordName", "Landlord/Property Manager Name", required=True,
                    section="Rental History",
                    messages={"required": "Landlord name is required"}),
    FieldDefinition("rentalAddress", "Rental Property Address", required=True,
                    section="Rental History",
                    messages={"required": "Rental address is required"}),
    FieldDefinition("tenancyStart", "Tenancy Start Date", kind="date",
                    section="Rental History"),
    FieldDefinition("tenancyEnd", "Tenancy End Date", kind="date",
                    section="Rental History"),
    FieldDefinition("reportedBalance", "Reported Balance", kind="number",
                    section="Rental History", validation_rules={"min": 0}),
    FieldDefinition("correctBalance", "Correct Balance", kind="number",
                    section="Rental History", validation_rules={"min": 0}),
    FieldDefinition(
        "disputeReason", "Dispute Reason", kind="choice", required=True,
        section="Dispute Reason", options=DISPUTE_REASONS,
        messages={"required": "Please select a dispute reason"},
    ),
    _explanation("Dispute Reason"),
    FieldDefinition("leaseAgreement", "Copy of lease agreement",
                    kind="boolean", section="Supporting Documentation"),
    FieldDefinition("rentReceipts", "Rent receipts / bank statements",
                    kind="boolean", section="Supporting Documentation"),
    FieldDefinition("moveOutInspection", "Move-out inspection report",
                    kind="boolean", section="Supporting Documentation"),
)


# ---------------------------------------------------------------------------
# Tenant Advantage Profile
# ---------------------------------------------------------------------------

PERSONAL_STRENGTHS: tuple[str, ...] = (
    "Stable Employment",
    "Growing Savings",
    "No Recent Late Payments",
    "Community Volunteer",
    "Professional References",
    "Completed Education",
    "Military Service",
    "First Responder",
    "Healthcare Worker",
    "Teacher",
    "Long-term Resident",
    "Family-Oriented",
    "Pet-Free",
    "Non-Smoker",
    "Quiet Lifestyle",
)

_STORY = "Your Housing Story"
_FINANCE = "Financial Stability"
_HISTORY = "Payment History"
_READINESS = "Rental Readiness"
_REFERENCES = "Character References"
_DISCLOSURE = "Proactive Disclosure"
_GUARANTOR = "Guarantor Information"
_ASSURANCES = "Landlord Assurances"
_PROGRESS = "Your Progress"


def _reference(n: int) -> tuple[FieldDefinition, ...]:
    return (
        FieldDefinition(f"reference{n}Name", f"Reference {n} Name", section=_REFERENCES),
        FieldDefinition(f"reference{n}Relationship", f"Reference {n} Relationship",
                        section=_REFERENCES),
        FieldDefinition(
            f"reference{n}Phone", f"Reference {n} Phone", section=_REFERENCES,
            validation_rules={"pattern": PHONE_PATTERN},
            messages={"pattern": "Format: (XXX) XXX-XXXX"},
        ),
        FieldDefinition(
            f"reference{n}Email", f"Reference {n} Email", section=_REFERENCES,
            validation_rules={"pattern": EMAIL_PATTERN},
            messages={"pattern": "Invalid email"},
        ),
    )


EDGE_FIELDS: tuple[FieldDefinition, ...] = (
    FieldDefinition("fullName", "Full Name", section="Contact Information"),
    FieldDefinition(
        "contactPhone", "Phone Number", section="Contact Information",
        validation_rules={"pattern": PHONE_PATTERN},
        messages={"pattern": "Format: (XXX) XXX-XXXX"},
    ),
    FieldDefinition(
        "contactEmail", "Email Address", section="Contact Information",
        validation_rules={"pattern": EMAIL_PATTERN},
        messages={"pattern": "Invalid email"},
    ),
    FieldDefinition(
        "personalStatement", "Personal Statement", required=True, section=_STORY,
        multiline=True,
        help_text="Share your story. What brings you here? What are your goals? "
                  "Why would you be a great tenant?",
        validation_rules={"min_length": 100},
        messages={"required": "Personal statement is required",
                  "min_length": "Please write at least 100 characters"},
    ),
    FieldDefinition("housingGoals", "Housing Goals", section=_STORY, multiline=True,
                    help_text="What kind of home are you looking for? "
                              "How long do you plan to stay?"),
    FieldDefinition("employmentStatus", "Employment Status", required=True,
                    section=_FINANCE,
                    help_text="Full-time, Part-time, Self-employed, etc.",
                    messages={"required": "Employment status is required"}),
    FieldDefinition("employer", "Current Employer", section=_FINANCE),
    FieldDefinition("position", "Position", section=_FINANCE),
    FieldDefinition("monthlyIncome", "Monthly Income", kind="number", required=True,
                    section=_FINANCE, validation_rules={"min": 0},
                    messages={"required": "Monthly income is required"}),
    FieldDefinition("yearsEmployed", "Years at Job", kind="number", section=_FINANCE,
                    validation_rules={"min": 0}),
    FieldDefinition("utilityPaymentHistory", "Utility Payments", section=_HISTORY,
                    help_text="e.g., 36 months on-time"),
    FieldDefinition("phonePaymentHistory", "Phone Bill Payments", section=_HISTORY),
    FieldDefinition("insurancePayments", "Insurance Payments", section=_HISTORY),
    FieldDefinition("desiredRentRange", "Desired Rent Range", section=_READINESS,
                    help_text="e.g., $1,200 - $1,500"),
    FieldDefinition("moveInDate", "Move-in Date", kind="date", section=_READINESS),
    FieldDefinition("leaseTerm", "Preferred Lease Term", section=_READINESS,
                    help_text="e.g., 12 months"),
    *_reference(1),
    *_reference(2),
    FieldDefinition("backgroundExplanation", "Background Explanation",
                    section=_DISCLOSURE, multiline=True,
                    help_text="Address any past issues before the landlord finds them."),
    FieldDefinition("rehabilitationSteps", "Steps Taken Since", section=_DISCLOSURE,
                    multiline=True),
    FieldDefinition("communityInvolvement", "Community Involvement",
                    section=_DISCLOSURE, multiline=True,
                    help_text="Volunteer work, church, community groups..."),
    FieldDefinition("hasGuarantor", "I have a guarantor", kind="boolean",
                    section=_GUARANTOR),
    FieldDefinition("guarantorName", "Guarantor Name", section=_GUARANTOR),
    FieldDefinition("guarantorIncome", "Guarantor Monthly Income", kind="number",
                    section=_GUARANTOR, validation_rules={"min": 0}),
    FieldDefinition("guarantorCredit", "Guarantor Credit Score", kind="number",
                    section=_GUARANTOR, validation_rules={"min": 300, "max": 850}),
    FieldDefinition("willingToPayExtra", "Willing to pay an additional deposit",
                    kind="boolean", section=_ASSURANCES),
    FieldDefinition("extraDepositAmount", "Additional Deposit Amount", kind="number",
                    section=_ASSURANCES, validation_rules={"min": 0}),
    FieldDefinition("hasRentersInsurance", "I have renters insurance", kind="boolean",
                    section=_ASSURANCES),
    FieldDefinition("insuranceProvider", "Insurance Provider", section=_ASSURANCES),
    FieldDefinition("onTimePayments", "On-Time Payments (months)", kind="number",
                    section=_PROGRESS, validation_rules={"min": 0}),
    FieldDefinition("savingsAmount", "Savings Growth ($)", kind="number",
                    section=_PROGRESS, validation_rules={"min": 0}),
    FieldDefinition("debtReduction", "Debt Reduced (%)", kind="number",
                    section=_PROGRESS, validation_rules={"min": 0, "max": 100}),
)


# ---------------------------------------------------------------------------
# Lookup: form_type -> fields
# ---------------------------------------------------------------------------

FIELD_DEFINITIONS: dict[str, tuple[FieldDefinition, ...]] = {
    "equifax": EQUIFAX_FIELDS,
    "experian": EXPERIAN_FIELDS,
    "transunion": TRANSUNION_FIELDS,
    "edge": EDGE_FIELDS,
}

TAG_VOCABULARY: dict[str, tuple[str, ...]] = {
    "edge": PERSONAL_STRENGTHS,
}


def get_schema(form_type: str) -> tuple[FieldDefinition, ...]:
    """Return the ordered field definitions for *form_type*.

    Raises:
        KeyError: if the form type is not defined.
    """
    try:
        return FIELD_DEFINITIONS[form_type]
    except KeyError:
        raise KeyError(f"Unknown form type: {form_type}") from None


def is_field_visible(field_def: FieldDefinition, values: dict[str, Any]) -> bool:
    """Whether *field_def* is shown given the value of its controlling field."""
    if field_def.visible_when is None:
        return True
    controller_key, shown_for = field_def.visible_when
    return values.get(controller_key) in shown_for


def get_sections(form_type: str) -> dict[str, list[FieldDefinition]]:
    """Group a form's fields by section, maintaining order."""
    result: dict[str, list[FieldDefinition]] = {}
    for f in get_schema(form_type):
        result.setdefault(f.section, []).append(f)
    return result


def get_field(form_type: str, key: str) -> FieldDefinition:
    """Look up one field definition by key."""
    for f in get_schema(form_type):
        if f.key == key:
            return f
    raise KeyError(f"Unknown field for {form_type}: {key}")


def default_values(form_type: str) -> dict[str, Any]:
    """Return a fresh mapping of every field key to its initial value."""
    return {f.key: f.initial_value() for f in get_schema(form_type)}
