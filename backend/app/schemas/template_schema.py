"""Pydantic data model for document templates, sections and jurisdiction variants.

Templates are authored as configuration and never mutated once built, so
every model here is frozen. Variants copy sections with ``model_copy``
instead of editing them in place.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..constants import FEDERAL_STANDARD_SECTION_ID, STATE_STANDARD_SECTION_ID


# ── Enumerations ────────────────────────────────────────────────────────

class FieldKind(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    DATE = "date"
    SELECT = "select"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    PARTY_NAME = "party-name"
    CASE_NUMBER = "case-number"
    COURT_NAME = "court-name"


class SectionKind(str, Enum):
    STATIC = "static"
    USER_INPUT = "user-input"
    AI_GENERATED = "ai-generated"


class CourtType(str, Enum):
    STATE = "state"
    FEDERAL = "federal"
    IMMIGRATION = "immigration"


class TemplateCategory(str, Enum):
    CRIMINAL = "criminal"
    IMMIGRATION = "immigration"
    CIVIL = "civil"


class Difficulty(str, Enum):
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


# ── Fields ──────────────────────────────────────────────────────────────

class FieldOption(BaseModel):
    """One selectable (value, label) pair."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str


class FieldConstraints(BaseModel):
    """Length, pattern and option constraints for a single field."""

    model_config = ConfigDict(frozen=True)

    min_length: Optional[int] = Field(None, ge=0)
    max_length: Optional[int] = Field(None, ge=0)
    pattern: Optional[str] = None
    options: List[FieldOption] = Field(default_factory=list)

    @field_validator("pattern")
    @classmethod
    def pattern_compiles(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            try:
                re.compile(v)
            except re.error as exc:
                raise ValueError(f"invalid pattern {v!r}: {exc}") from exc
        return v

    @field_validator("options")
    @classmethod
    def options_distinct(cls, v: List[FieldOption]) -> List[FieldOption]:
        seen = set()
        for option in v:
            if option.value in seen:
                raise ValueError(f"duplicate option value {option.value!r}")
            seen.add(option.value)
        return v

    @model_validator(mode="after")
    def length_bounds_ordered(self) -> "FieldConstraints":
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            raise ValueError(
                f"min_length ({self.min_length}) exceeds max_length ({self.max_length})"
            )
        return self


class FieldSchema(BaseModel):
    """A single collectible input inside a user-input section."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    label: str
    kind: FieldKind
    required: bool = False
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    constraints: FieldConstraints = Field(default_factory=FieldConstraints)
    default_value: Optional[str] = None

    @model_validator(mode="after")
    def select_has_options(self) -> "FieldSchema":
        if self.kind is FieldKind.SELECT and not self.constraints.options:
            raise ValueError(f"select field {self.id!r} has no options")
        return self

    @property
    def option_values(self) -> List[str]:
        return [option.value for option in self.constraints.options]

    def option_label(self, value: str) -> str:
        """Return the display label for a select value (the value itself if unknown)."""
        for option in self.constraints.options:
            if option.value == value:
                return option.label
        return value


# ── Sections ────────────────────────────────────────────────────────────

class Section(BaseModel):
    """A named, ordered unit of a document.

    Exactly one kind-specific payload is populated:
      - static        → ``static_content``
      - user-input    → ``fields``
      - ai-generated  → ``prompt_template`` and ``instructions``
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    kind: SectionKind
    order: int
    required: bool = True
    help_text: Optional[str] = None

    static_content: Optional[str] = None
    fields: Optional[List[FieldSchema]] = None
    prompt_template: Optional[str] = None
    instructions: Optional[str] = None

    @model_validator(mode="after")
    def payload_matches_kind(self) -> "Section":
        has_static = self.static_content is not None
        has_fields = self.fields is not None
        has_prompt = self.prompt_template is not None or self.instructions is not None

        if self.kind is SectionKind.STATIC:
            ok = has_static and not has_fields and not has_prompt
        elif self.kind is SectionKind.USER_INPUT:
            ok = has_fields and not has_static and not has_prompt
        else:
            ok = (
                self.prompt_template is not None
                and self.instructions is not None
                and not has_static
                and not has_fields
            )
        if not ok:
            raise ValueError(
                f"section {self.id!r} of kind {self.kind.value!r} must carry exactly "
                "the payload for its kind"
            )

        if has_fields:
            ids = [f.id for f in self.fields]
            dupes = sorted({i for i in ids if ids.count(i) > 1})
            if dupes:
                raise ValueError(f"section {self.id!r} has duplicate field ids: {dupes}")
        return self

    def field_ids(self) -> List[str]:
        return [f.id for f in self.fields or []]

    def get_field(self, field_id: str) -> Optional[FieldSchema]:
        for f in self.fields or []:
            if f.id == field_id:
                return f
        return None


# ── Jurisdiction data ───────────────────────────────────────────────────

class JurisdictionRuleEntry(BaseModel):
    """Legal-standard metadata for one jurisdiction (pure data)."""

    model_config = ConfigDict(frozen=True)

    jurisdiction_code: str
    primary_rule: str
    standard_description: str
    time_limits: str
    key_case_law: str
    sub_jurisdictions: Optional[List[FieldOption]] = None
    sub_jurisdiction_label: Optional[str] = None


class JurisdictionVariant(BaseModel):
    """The resolved, ordered section list of one template in one jurisdiction."""

    model_config = ConfigDict(frozen=True)

    jurisdiction_code: str
    court_type: CourtType
    district_code: Optional[str] = None
    circuit: Optional[str] = None
    sections: List[Section]
    court_specific_rules_summary: str

    def get_section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def find_field(self, field_id: str) -> Optional[FieldSchema]:
        for section in self.sections:
            found = section.get_field(field_id)
            if found is not None:
                return found
        return None


# ── Templates ───────────────────────────────────────────────────────────

class TemplateMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    estimated_time: str
    difficulty: Difficulty
    requires_verification: bool = True


class RuleText(BaseModel):
    """Rule text as authored in a template file (no code, no sub-jurisdictions)."""

    model_config = ConfigDict(frozen=True)

    primary_rule: str
    standard_description: str
    time_limits: str
    key_case_law: str


class StandardNotes(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: str
    federal: str


class StandardBlock(BaseModel):
    """Template-specific inputs to the synthesized legal-standard section."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Used as 'Standard for <label>: ...'")
    notes: StandardNotes
    federal_rule: RuleText


class TemplateDefinition(BaseModel):
    """A template as authored: base sections plus its category-specific rule data."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    category: TemplateCategory
    description: str = ""
    version: str = "1.0.0"
    metadata: TemplateMetadata
    standard: StandardBlock
    base_sections: List[Section]
    state_rules: Dict[str, RuleText] = Field(default_factory=dict)

    @field_validator("state_rules")
    @classmethod
    def upper_case_codes(cls, v: Dict[str, RuleText]) -> Dict[str, RuleText]:
        return {code.upper(): rule for code, rule in v.items()}

    @model_validator(mode="after")
    def ids_unique(self) -> "TemplateDefinition":
        # Section ids share one namespace with the synthesized standard
        # sections; field ids share one namespace across the whole template.
        section_ids = {STATE_STANDARD_SECTION_ID, FEDERAL_STANDARD_SECTION_ID}
        field_owner: Dict[str, str] = {}
        for section in self.base_sections:
            if section.id in section_ids:
                raise ValueError(f"duplicate or reserved section id {section.id!r}")
            section_ids.add(section.id)
            for f in section.fields or []:
                if f.id in field_owner:
                    raise ValueError(
                        f"field id {f.id!r} defined in both {field_owner[f.id]!r} and {section.id!r}"
                    )
                field_owner[f.id] = section.id
        return self


class DocumentTemplate(BaseModel):
    """Top-level aggregate: base sections plus one variant per jurisdiction."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: TemplateCategory
    description: str = ""
    version: str = "1.0.0"
    base_sections: List[Section]
    jurisdiction_variants: List[JurisdictionVariant]
    metadata: TemplateMetadata


# ── API responses ───────────────────────────────────────────────────────

class TemplateSummary(BaseModel):
    """Catalog entry for one registered template."""

    id: str
    name: str
    category: TemplateCategory
    description: str = ""
    version: str
    metadata: TemplateMetadata


class TemplateListResponse(BaseModel):
    templates: List[TemplateSummary] = Field(default_factory=list)
    total: int = 0


class SupportedJurisdictions(BaseModel):
    states: List[str] = Field(default_factory=list)
    federal_districts: List[str] = Field(default_factory=list)


class TemplateDetailResponse(TemplateSummary):
    """Catalog entry plus base sections and where the template is available."""

    base_sections: List[Section]
    supported_jurisdictions: SupportedJurisdictions


class VariantSectionsResponse(BaseModel):
    """The resolved section list of one template in one jurisdiction."""

    template_id: str
    jurisdiction_code: str
    court_type: CourtType
    district_code: Optional[str] = None
    circuit: Optional[str] = None
    court_specific_rules_summary: str
    sections: List[Section]
