"""Completion Validator — per-field validation and per-section completeness.

Every outcome is returned as a value. Nothing here raises for bad user
input, so the drafting session can render problems inline.
"""

from __future__ import annotations

import re
from datetime import date
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from ...schemas.template_schema import FieldKind, FieldSchema, Section, SectionKind

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ValidationReason(str, Enum):
    MISSING_REQUIRED = "MissingRequired"
    INVALID_OPTION = "InvalidOption"
    INVALID_NUMBER = "InvalidNumber"
    INVALID_DATE = "InvalidDate"
    TOO_SHORT = "TooShort"
    TOO_LONG = "TooLong"
    PATTERN_MISMATCH = "PatternMismatch"


class FieldValidationResult(BaseModel):
    """Outcome of validating one field value."""

    model_config = ConfigDict(frozen=True)

    field_id: str
    valid: bool
    reason: Optional[ValidationReason] = None
    message: Optional[str] = None


def _invalid(field: FieldSchema, reason: ValidationReason, message: str) -> FieldValidationResult:
    return FieldValidationResult(field_id=field.id, valid=False, reason=reason, message=message)


def _is_number(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True


def _is_iso_date(value: str) -> bool:
    if not _ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


# ── Field validation ─────────────────────────────────────────────────────

def is_field_valid(field: FieldSchema, value: Optional[str]) -> FieldValidationResult:
    """Validate one value against its field schema.

    Precedence: missing required, invalid option, kind checks (number and
    date), too short, too long, pattern mismatch. Blank strings count as
    absent. An absent optional value is always valid.
    """
    text = None if value is None else str(value)
    if text is None or not text.strip():
        if field.required:
            return _invalid(field, ValidationReason.MISSING_REQUIRED, f"{field.label} is required")
        return FieldValidationResult(field_id=field.id, valid=True)

    c = field.constraints

    if field.kind is FieldKind.SELECT and text not in field.option_values:
        return _invalid(
            field,
            ValidationReason.INVALID_OPTION,
            f"{field.label} must be one of the listed options",
        )
    if field.kind is FieldKind.NUMBER and not _is_number(text.strip()):
        return _invalid(field, ValidationReason.INVALID_NUMBER, f"{field.label} must be a number")
    if field.kind is FieldKind.DATE and not _is_iso_date(text.strip()):
        return _invalid(
            field,
            ValidationReason.INVALID_DATE,
            f"{field.label} must be a valid date (YYYY-MM-DD)",
        )
    if c.min_length is not None and len(text) < c.min_length:
        return _invalid(
            field,
            ValidationReason.TOO_SHORT,
            f"{field.label} must be at least {c.min_length} characters",
        )
    if c.max_length is not None and len(text) > c.max_length:
        return _invalid(
            field,
            ValidationReason.TOO_LONG,
            f"{field.label} must be no more than {c.max_length} characters",
        )
    if c.pattern is not None and not re.search(c.pattern, text):
        return _invalid(field, ValidationReason.PATTERN_MISMATCH, f"{field.label} format is invalid")

    return FieldValidationResult(field_id=field.id, valid=True)


def validate_section(
    section: Section,
    values: Mapping[str, Optional[str]],
) -> Dict[str, FieldValidationResult]:
    """Validate every field of a user-input section, keyed by field id."""
    return {f.id: is_field_valid(f, values.get(f.id)) for f in section.fields or []}


# ── Section completeness ─────────────────────────────────────────────────

def prerequisite_sections(section: Section, sections: Sequence[Section]) -> List[Section]:
    """The user-input sections ordered strictly before ``section``."""
    return [
        s for s in sections
        if s.kind is SectionKind.USER_INPUT and s.order < section.order
    ]


def is_section_complete(
    section: Section,
    values: Mapping[str, Optional[str]],
    sections: Sequence[Section] = (),
) -> bool:
    """Whether ``section`` satisfies its own and its fields' constraints.

    Static sections are always complete. A user-input section is complete
    when every field validates. For an ai-generated section this only
    checks its prerequisites within ``sections``; whether prose has been
    accepted is tracked by the session.
    """
    if section.kind is SectionKind.STATIC:
        return True
    if section.kind is SectionKind.USER_INPUT:
        return all(r.valid for r in validate_section(section, values).values())
    return all(
        is_section_complete(prior, values)
        for prior in prerequisite_sections(section, sections)
    )
