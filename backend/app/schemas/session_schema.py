"""Pydantic schemas for document-session requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from .template_schema import CourtType, SectionKind


# ── Requests ────────────────────────────────────────────────────────────

class CreateSessionRequest(BaseModel):
    """Start drafting one template in one jurisdiction."""

    template_id: str = Field(..., min_length=1)
    jurisdiction: Optional[str] = Field(
        None,
        description="State/territory code, e.g. 'LA'. May be omitted when a federal district is given.",
    )
    district: Optional[str] = Field(
        None,
        description="Federal judicial district code, e.g. 'EDLA'. Omit for state court.",
    )


class SetFieldValueRequest(BaseModel):
    """A field answer. Lists are comma-joined; null clears the field."""

    value: Union[str, List[str], bool, int, float, None] = None


class GeneratedContentRequest(BaseModel):
    """Prose accepted for an ai-generated section."""

    content: str


# ── Responses ───────────────────────────────────────────────────────────

class SessionResponse(BaseModel):
    session_id: str
    template_id: str
    template_name: str
    jurisdiction_code: str
    court_type: CourtType
    district_code: Optional[str] = None
    circuit: Optional[str] = None
    values: Dict[str, str] = Field(default_factory=dict)
    generated_sections: List[str] = Field(default_factory=list)
    created_at: datetime
    expires_at: datetime


class CompletionStatusResponse(BaseModel):
    """Per-section completion, keyed by section id in document order."""

    session_id: str
    sections: Dict[str, bool]
    complete: bool


class RenderedPromptResponse(BaseModel):
    """What the generation backend receives for one ai-generated section."""

    section_id: str
    instructions: str
    rendered_prompt: str


class DocumentSectionView(BaseModel):
    id: str
    name: str
    kind: SectionKind
    order: int
    required: bool
    complete: bool
    content: str = ""


class DocumentPlanResponse(BaseModel):
    """The fully populated section list, ready for an external renderer."""

    session_id: str
    template_id: str
    template_name: str
    jurisdiction_code: str
    court_type: CourtType
    district_code: Optional[str] = None
    court_specific_rules_summary: str
    sections: List[DocumentSectionView]
    complete: bool
