# Schemas package
from .template_schema import (
    CourtType,
    DocumentTemplate,
    FieldConstraints,
    FieldKind,
    FieldOption,
    FieldSchema,
    JurisdictionRuleEntry,
    JurisdictionVariant,
    Section,
    SectionKind,
    TemplateCategory,
    TemplateDefinition,
)
from .session_schema import (
    CompletionStatusResponse,
    DocumentPlanResponse,
    RenderedPromptResponse,
    SessionResponse,
)

__all__ = [
    "CourtType",
    "DocumentTemplate",
    "FieldConstraints",
    "FieldKind",
    "FieldOption",
    "FieldSchema",
    "JurisdictionRuleEntry",
    "JurisdictionVariant",
    "Section",
    "SectionKind",
    "TemplateCategory",
    "TemplateDefinition",
    "CompletionStatusResponse",
    "DocumentPlanResponse",
    "RenderedPromptResponse",
    "SessionResponse",
]
