"""Variant Builder — folds a jurisdiction's legal standard into a template.

``build_variant`` is a pure function of (base sections, one rule entry):
it synthesizes the order-1 legal-standard section, copies the base
sections in their relative order, optionally adds the sub-jurisdiction
picker to the caption, and renumbers everything contiguously.
"""

from __future__ import annotations

from typing import List, Mapping, Optional, Sequence

from ...constants import (
    CAPTION_SECTION_ID,
    DEFAULT_SUB_JURISDICTION_LABEL,
    FEDERAL_STANDARD_SECTION_ID,
    STATE_STANDARD_SECTION_ID,
)
from ...schemas.template_schema import (
    CourtType,
    FieldConstraints,
    FieldKind,
    FieldSchema,
    JurisdictionRuleEntry,
    JurisdictionVariant,
    Section,
    SectionKind,
    StandardBlock,
)
from .errors import ConfigError
from .rules import FederalDistrict, slugify_label


# ── Synthesized sections ─────────────────────────────────────────────────

def format_standard_content(
    header: str,
    rule: JurisdictionRuleEntry,
    standard_label: str,
    note: str,
    federal: bool = False,
) -> str:
    """Deterministic legal-standard block in a fixed field order."""
    title = "APPLICABLE FEDERAL LEGAL STANDARD" if federal else "APPLICABLE LEGAL STANDARD"
    return (
        f"{title} — {header}\n\n"
        f"Rule/Statute: {rule.primary_rule}\n\n"
        f"Standard for {standard_label}: {rule.standard_description}\n\n"
        f"Time Limits: {rule.time_limits}\n\n"
        f"Key Case Law: {rule.key_case_law}\n\n"
        f"Note: {note}"
    )


def summarize_rule(rule: JurisdictionRuleEntry) -> str:
    """One-line court-specific rules summary."""
    return (
        f"Filed under {rule.primary_rule}. "
        f"Standard: {rule.standard_description}. "
        f"Time limits: {rule.time_limits}. "
        f"Key case law: {rule.key_case_law}."
    )


def _standard_section(
    header: str,
    rule: JurisdictionRuleEntry,
    standard: StandardBlock,
    federal: bool,
) -> Section:
    note = standard.notes.federal if federal else standard.notes.state
    return Section(
        id=FEDERAL_STANDARD_SECTION_ID if federal else STATE_STANDARD_SECTION_ID,
        name="Federal Legal Standard" if federal else "Jurisdiction-Specific Legal Standard",
        kind=SectionKind.STATIC,
        order=1,
        required=True,
        static_content=format_standard_content(header, rule, standard.label, note, federal),
        help_text=f"Legal standard for {standard.label} in this jurisdiction.",
    )


def _sub_jurisdiction_field(rule: JurisdictionRuleEntry) -> FieldSchema:
    label = rule.sub_jurisdiction_label or DEFAULT_SUB_JURISDICTION_LABEL
    return FieldSchema(
        id=slugify_label(label),
        label=label,
        kind=FieldKind.SELECT,
        required=True,
        help_text=f"Select the {label.lower()} where the case is pending",
        constraints=FieldConstraints(options=list(rule.sub_jurisdictions or [])),
    )


def _with_sub_jurisdiction(
    caption: Section,
    rule: JurisdictionRuleEntry,
    taken: Sequence[str] = (),
) -> Section:
    picker = _sub_jurisdiction_field(rule)
    if picker.id in caption.field_ids() or picker.id in taken:
        raise ConfigError(
            f"Template already defines field '{picker.id}'; cannot add "
            f"{picker.label} selector for {rule.jurisdiction_code}"
        )
    return caption.model_copy(update={"fields": [*(caption.fields or []), picker]})


def _is_caption(section: Section) -> bool:
    return section.id == CAPTION_SECTION_ID and section.kind is SectionKind.USER_INPUT


# ── Builder ──────────────────────────────────────────────────────────────

def build_variant(
    base_sections: Sequence[Section],
    rule: Optional[JurisdictionRuleEntry],
    court_type: CourtType,
    district_code: Optional[str] = None,
    *,
    standard: StandardBlock,
    districts: Optional[Mapping[str, FederalDistrict]] = None,
) -> JurisdictionVariant:
    """Build the jurisdiction-specific ordered section list for one template.

    Parameters
    ----------
    base_sections : sequence of Section
        The template's shared sections, in authoring order.
    rule : JurisdictionRuleEntry or None
        Rule entry for the state, or the federal rule entry for a district.
        ``None`` means the jurisdiction has no rule data.
    court_type : CourtType
        ``state`` or ``federal``. Immigration courts have no rule table.
    district_code : str, optional
        Required for federal variants.
    standard : StandardBlock
        The template's standard label and explanatory notes.
    districts : mapping, optional
        Federal district table, required for federal variants.

    Raises
    ------
    ConfigError
        On empty base sections, a missing rule entry, a federal variant
        without a known district, or an unsupported court type.
    """
    if not base_sections:
        raise ConfigError("Cannot build a variant from an empty base section list")
    if court_type is CourtType.IMMIGRATION:
        raise ConfigError("Immigration court variants have no rule table")

    federal = court_type is CourtType.FEDERAL
    circuit: Optional[str] = None

    if federal:
        if not district_code:
            raise ConfigError("Federal variants require a district code")
        district_code = district_code.upper()
        district = (districts or {}).get(district_code)
        if district is None:
            raise ConfigError(f"Unknown federal district '{district_code}'")
        circuit = district.circuit
        header = district.header
    else:
        if rule is None:
            raise ConfigError("No rule entry for this state jurisdiction")
        district_code = None
        header = rule.jurisdiction_code

    if rule is None:
        raise ConfigError(f"No federal rule entry for district '{district_code}'")

    # Stable sort: ties on ``order`` keep insertion order.
    indexed = sorted(enumerate(base_sections), key=lambda pair: (pair[1].order, pair[0]))
    copies: List[Section] = [section for _, section in indexed]

    if rule.sub_jurisdictions and _is_caption(copies[0]):
        taken = [fid for section in copies[1:] for fid in section.field_ids()]
        copies[0] = _with_sub_jurisdiction(copies[0], rule, taken)

    renumbered = [
        section.model_copy(update={"order": position})
        for position, section in enumerate(copies, start=2)
    ]

    return JurisdictionVariant(
        jurisdiction_code=rule.jurisdiction_code,
        court_type=court_type,
        district_code=district_code,
        circuit=circuit,
        sections=[_standard_section(header, rule, standard, federal), *renumbered],
        court_specific_rules_summary=summarize_rule(rule),
    )
