"""Completion Validator tests — rule precedence, totality, and section completeness.
Also covers the data-model invariants enforced at construction.
"""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from pydantic import ValidationError

from app.agents.template_engine.completion import (
    ValidationReason,
    is_field_valid,
    is_section_complete,
    prerequisite_sections,
    validate_section,
)
from app.schemas.template_schema import (
    FieldConstraints,
    FieldKind,
    FieldOption,
    FieldSchema,
    Section,
    SectionKind,
)

TEXT_10_2000 = FieldSchema(
    id="description",
    label="Description",
    kind=FieldKind.TEXT,
    constraints=FieldConstraints(min_length=10, max_length=2000),
)

COURT = FieldSchema(id="courtName", label="Court Name", kind=FieldKind.COURT_NAME, required=True)

PHASE = FieldSchema(
    id="trialPhase",
    label="Trial Phase",
    kind=FieldKind.SELECT,
    required=True,
    constraints=FieldConstraints(
        min_length=20,
        options=[
            FieldOption(value="jury_selection", label="Jury Selection"),
            FieldOption(value="deliberation", label="Jury Deliberation"),
        ],
    ),
)


def _input_section(section_id, order, fields, required=True):
    return Section(
        id=section_id, name=section_id.title(), kind=SectionKind.USER_INPUT,
        order=order, required=required, fields=fields,
    )


# ---------------------------------------------------------------------------
# is_field_valid
# ---------------------------------------------------------------------------
class TestFieldValidation:
    def test_length_boundaries(self):
        short = is_field_valid(TEXT_10_2000, "x" * 9)
        assert short.valid is False
        assert short.reason == ValidationReason.TOO_SHORT

        assert is_field_valid(TEXT_10_2000, "x" * 10).valid is True
        assert is_field_valid(TEXT_10_2000, "x" * 2000).valid is True

        long = is_field_valid(TEXT_10_2000, "x" * 2001)
        assert long.reason == ValidationReason.TOO_LONG

    def test_required_missing(self):
        result = is_field_valid(COURT, None)
        assert result.valid is False
        assert result.reason == ValidationReason.MISSING_REQUIRED
        assert result.message == "Court Name is required"
        assert result.field_id == "courtName"

    def test_blank_counts_as_missing(self):
        assert is_field_valid(COURT, "").reason == ValidationReason.MISSING_REQUIRED
        assert is_field_valid(COURT, "   ").reason == ValidationReason.MISSING_REQUIRED

    def test_optional_absent_is_valid(self):
        assert is_field_valid(TEXT_10_2000, None).valid is True
        assert is_field_valid(TEXT_10_2000, "").valid is True

    def test_whitespace_on_optional_select_is_absent_not_invalid(self):
        # Whitespace-only is treated as no answer, so it never reaches the option check.
        optional = PHASE.model_copy(update={"required": False})
        result = is_field_valid(optional, " ")
        assert result.valid is True
        assert result.reason is None
        assert is_field_valid(optional, " closing ").reason == ValidationReason.INVALID_OPTION

    def test_select_requires_listed_option(self):
        assert is_field_valid(PHASE, "closing").reason == ValidationReason.INVALID_OPTION

    def test_invalid_option_precedes_length_checks(self):
        # "x" is both unlisted and shorter than min_length.
        assert is_field_valid(PHASE, "x").reason == ValidationReason.INVALID_OPTION

    def test_missing_required_precedes_everything(self):
        assert is_field_valid(PHASE, "").reason == ValidationReason.MISSING_REQUIRED

    def test_number_kind(self):
        amount = FieldSchema(id="amount", label="Amount", kind=FieldKind.NUMBER)
        assert is_field_valid(amount, "12.5").valid is True
        assert is_field_valid(amount, "-3").valid is True
        assert is_field_valid(amount, "twelve").reason == ValidationReason.INVALID_NUMBER

    def test_date_kind(self):
        trial = FieldSchema(id="trialDate", label="Trial Date", kind=FieldKind.DATE)
        assert is_field_valid(trial, "2024-03-01").valid is True
        assert is_field_valid(trial, "2024-02-30").reason == ValidationReason.INVALID_DATE
        assert is_field_valid(trial, "03/01/2024").reason == ValidationReason.INVALID_DATE

    def test_pattern(self):
        case_no = FieldSchema(
            id="caseNumber",
            label="Case Number",
            kind=FieldKind.CASE_NUMBER,
            constraints=FieldConstraints(pattern=r"^\d{2}-CR-\d+$"),
        )
        assert is_field_valid(case_no, "24-CR-1001").valid is True
        mismatch = is_field_valid(case_no, "CR1001")
        assert mismatch.reason == ValidationReason.PATTERN_MISMATCH
        assert mismatch.message

    def test_pattern_uses_search_semantics(self):
        field = FieldSchema(
            id="ref", label="Ref", kind=FieldKind.TEXT,
            constraints=FieldConstraints(pattern="CR"),
        )
        assert is_field_valid(field, "24-CR-1").valid is True

    @pytest.mark.parametrize("value", [None, "", " ", "x", "x" * 9, "x" * 5000, "jury_selection", "2024-01-01"])
    @pytest.mark.parametrize("field", [TEXT_10_2000, COURT, PHASE])
    def test_total(self, field, value):
        result = is_field_valid(field, value)
        assert result.valid in (True, False)
        assert result.valid == (result.reason is None)


# ---------------------------------------------------------------------------
# Section completeness
# ---------------------------------------------------------------------------
class TestSectionCompletion:
    def test_static_always_complete(self):
        static = Section(id="s", name="S", kind=SectionKind.STATIC, order=1, static_content="text")
        assert is_section_complete(static, {}) is True

    def test_user_input_needs_required_fields(self):
        section = _input_section("caption", 2, [COURT, TEXT_10_2000])
        assert is_section_complete(section, {}) is False
        assert is_section_complete(section, {"courtName": "District Court"}) is True

    def test_invalid_optional_value_blocks_completion(self):
        section = _input_section("caption", 2, [COURT, TEXT_10_2000])
        values = {"courtName": "District Court", "description": "short"}
        assert is_section_complete(section, values) is False

    def test_validate_section_reports_every_field(self):
        section = _input_section("caption", 2, [COURT, TEXT_10_2000])
        results = validate_section(section, {"description": "short"})
        assert set(results) == {"courtName", "description"}
        assert results["courtName"].reason == ValidationReason.MISSING_REQUIRED
        assert results["description"].reason == ValidationReason.TOO_SHORT

    def test_ai_section_checks_prerequisites(self):
        caption = _input_section("caption", 2, [COURT])
        argument = Section(
            id="argument", name="Argument", kind=SectionKind.AI_GENERATED, order=3,
            prompt_template="{{courtName}}", instructions="Draft.",
        )
        sections = [caption, argument]
        assert is_section_complete(argument, {}, sections) is False
        assert is_section_complete(argument, {"courtName": "Court"}, sections) is True

    def test_prerequisites_are_earlier_user_input_sections(self):
        static = Section(id="std", name="Std", kind=SectionKind.STATIC, order=1, static_content="x")
        caption = _input_section("caption", 2, [COURT])
        argument = Section(
            id="argument", name="Argument", kind=SectionKind.AI_GENERATED, order=3,
            prompt_template="", instructions="Draft.",
        )
        later = _input_section("later", 4, [TEXT_10_2000])
        prereqs = prerequisite_sections(argument, [static, caption, argument, later])
        assert [s.id for s in prereqs] == ["caption"]


# ---------------------------------------------------------------------------
# Data-model invariants
# ---------------------------------------------------------------------------
class TestModelInvariants:
    def test_select_without_options_rejected(self):
        with pytest.raises(ValidationError):
            FieldSchema(id="x", label="X", kind=FieldKind.SELECT)

    def test_min_length_above_max_length_rejected(self):
        with pytest.raises(ValidationError):
            FieldConstraints(min_length=10, max_length=5)

    def test_uncompilable_pattern_rejected(self):
        with pytest.raises(ValidationError):
            FieldConstraints(pattern="([")

    def test_duplicate_option_values_rejected(self):
        with pytest.raises(ValidationError):
            FieldConstraints(options=[FieldOption(value="a", label="A"), FieldOption(value="a", label="B")])

    def test_section_payload_must_match_kind(self):
        with pytest.raises(ValidationError):
            Section(id="s", name="S", kind=SectionKind.STATIC, order=1, fields=[COURT])
        with pytest.raises(ValidationError):
            Section(id="s", name="S", kind=SectionKind.AI_GENERATED, order=1, prompt_template="x")
        with pytest.raises(ValidationError):
            Section(id="s", name="S", kind=SectionKind.USER_INPUT, order=1)

    def test_duplicate_field_ids_rejected(self):
        with pytest.raises(ValidationError):
            _input_section("caption", 1, [COURT, COURT])

    def test_models_are_frozen(self):
        with pytest.raises(ValidationError):
            COURT.required = False
