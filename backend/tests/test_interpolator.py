"""Prompt Interpolator tests — substitution, fallback text, and the
registration-time placeholder check.
"""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from app.agents.template_engine.errors import ConfigError, UnknownPlaceholder
from app.agents.template_engine.interpolator import check_placeholders, extract_placeholders, render
from app.schemas.template_schema import (
    CourtType,
    FieldKind,
    FieldSchema,
    JurisdictionVariant,
    Section,
    SectionKind,
)


def _variant(prompt, fields_before=("groundsDescription",), fields_after=()):
    sections = [
        Section(id="jurisdictionStandard", name="Standard", kind=SectionKind.STATIC, order=1, static_content="..."),
        Section(
            id="grounds",
            name="Grounds",
            kind=SectionKind.USER_INPUT,
            order=2,
            fields=[FieldSchema(id=f, label=f, kind=FieldKind.TEXT) for f in fields_before],
        ),
        Section(
            id="argument",
            name="Argument",
            kind=SectionKind.AI_GENERATED,
            order=3,
            prompt_template=prompt,
            instructions="Draft it.",
        ),
    ]
    if fields_after:
        sections.append(
            Section(
                id="later",
                name="Later",
                kind=SectionKind.USER_INPUT,
                order=4,
                fields=[FieldSchema(id=f, label=f, kind=FieldKind.TEXT) for f in fields_after],
            )
        )
    return JurisdictionVariant(
        jurisdiction_code="LA",
        court_type=CourtType.STATE,
        sections=sections,
        court_specific_rules_summary="summary",
    )


# ---------------------------------------------------------------------------
# render
# ---------------------------------------------------------------------------
class TestRender:
    def test_empty_value_renders_not_provided(self):
        assert render("Ground: {{groundsDescription}}", {"groundsDescription": ""}) == "Ground: Not provided"

    def test_substitutes_values(self):
        out = render("{{a}} v. {{b}}", {"a": "State", "b": "Smith"})
        assert out == "State v. Smith"

    def test_empty_map_never_throws(self):
        assert render("{{a}} and {{b}}", {}) == "Not provided and Not provided"

    def test_whitespace_and_none_are_blank(self):
        assert render("{{a}}|{{b}}", {"a": "   ", "b": None}) == "Not provided|Not provided"

    def test_substitution_is_not_recursive(self):
        out = render("{{a}}", {"a": "{{b}}", "b": "injected"})
        assert out == "{{b}}"

    def test_pre_joined_list_passes_through(self):
        assert render("Charges: {{charges}}", {"charges": "Theft, Burglary"}) == "Charges: Theft, Burglary"

    def test_render_is_pure(self):
        values = {"a": "x"}
        first = render("{{a}} {{missing}}", values)
        second = render("{{a}} {{missing}}", values)
        assert first == second
        assert values == {"a": "x"}

    def test_text_without_placeholders_is_unchanged(self):
        assert render("No tokens here { } }}", {"a": "x"}) == "No tokens here { } }}"


class TestExtractPlaceholders:
    def test_first_seen_order_without_duplicates(self):
        assert extract_placeholders("{{b}} {{a}} {{b}}") == ["b", "a"]

    def test_no_placeholders(self):
        assert extract_placeholders("plain text") == []


# ---------------------------------------------------------------------------
# check_placeholders
# ---------------------------------------------------------------------------
class TestCheckPlaceholders:
    def test_backward_reference_passes(self):
        check_placeholders(_variant("Ground: {{groundsDescription}}"), "t")

    def test_context_placeholders_always_resolve(self):
        check_placeholders(_variant("In {{jurisdiction}} ({{courtType}}, {{district}}, {{circuit}})"), "t")

    def test_forward_reference_fails(self):
        variant = _variant("Later: {{laterField}}", fields_after=("laterField",))
        with pytest.raises(UnknownPlaceholder) as info:
            check_placeholders(variant, "motion-x")
        assert info.value.placeholder == "laterField"
        assert info.value.section_id == "argument"
        assert info.value.template_id == "motion-x"

    def test_unknown_field_fails(self):
        with pytest.raises(UnknownPlaceholder):
            check_placeholders(_variant("{{nowhere}}"), "t")

    def test_malformed_token_fails(self):
        with pytest.raises(UnknownPlaceholder):
            check_placeholders(_variant("{{ grounds-description }}"), "t")

    def test_unknown_placeholder_is_a_config_error(self):
        with pytest.raises(ConfigError):
            check_placeholders(_variant("{{nowhere}}"), "t")
