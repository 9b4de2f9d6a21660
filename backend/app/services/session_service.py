"""Document Session Service — in-memory owner of each FieldValueMap.

A session pins one template variant and collects, per session:
  - field answers (always stored as display strings)
  - accepted prose for ai-generated sections

Sessions expire after DOCUMENT_SESSION_TTL_MINUTES of inactivity (default
30). Expired sessions are purged lazily. Nothing is persisted.
"""

from __future__ import annotations

import logging
import os
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Sequence, Union

from ..agents.template_engine.completion import (
    FieldValidationResult,
    is_field_valid,
    is_section_complete,
    prerequisite_sections,
)
from ..agents.template_engine.interpolator import render
from ..schemas.session_schema import (
    CompletionStatusResponse,
    DocumentPlanResponse,
    DocumentSectionView,
    RenderedPromptResponse,
    SessionResponse,
)
from ..schemas.template_schema import (
    DocumentTemplate,
    FieldKind,
    JurisdictionVariant,
    Section,
    SectionKind,
    TemplateCategory,
)

logger = logging.getLogger(__name__)

FieldValue = Union[str, bool, int, float, Sequence[str], None]


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Errors, translated to HTTP status codes by the routes
# ---------------------------------------------------------------------------
class SessionError(Exception):
    """Base class for session-layer failures."""


class SessionNotFound(SessionError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session '{session_id}' not found or expired")


class SectionNotFound(SessionError):
    def __init__(self, section_id: str):
        self.section_id = section_id
        super().__init__(f"Section '{section_id}' is not part of this document")


class FieldNotFound(SessionError):
    def __init__(self, field_id: str):
        self.field_id = field_id
        super().__init__(f"Field '{field_id}' is not part of this document")


class SectionKindMismatch(SessionError):
    def __init__(self, section_id: str, expected: SectionKind):
        self.section_id = section_id
        self.expected = expected
        super().__init__(f"Section '{section_id}' is not a {expected.value} section")


class PrerequisitesIncomplete(SessionError):
    def __init__(self, section_id: str, incomplete: List[str]):
        self.section_id = section_id
        self.incomplete = incomplete
        super().__init__(
            f"Section '{section_id}' needs these sections completed first: {', '.join(incomplete)}"
        )


class EmptyGeneratedContent(SessionError):
    def __init__(self, section_id: str):
        self.section_id = section_id
        super().__init__(f"Generated content for section '{section_id}' is empty")


# ---------------------------------------------------------------------------
# Session record
# ---------------------------------------------------------------------------
@dataclass
class DocumentSession:
    """One in-progress document. Mutated only through DocumentSessionStore."""

    id: str
    template_id: str
    template_name: str
    category: TemplateCategory
    variant: JurisdictionVariant
    created_at: datetime
    last_activity: datetime
    values: Dict[str, str] = field(default_factory=dict)
    generated: Dict[str, str] = field(default_factory=dict)

    def context_values(self) -> Dict[str, str]:
        """Context placeholders resolvable in every prompt."""
        v = self.variant
        return {
            "jurisdiction": v.jurisdiction_code,
            "courtType": v.court_type.value,
            "district": v.district_code or "",
            "circuit": v.circuit or "",
        }

    def prompt_values(self) -> Dict[str, str]:
        # Field answers win over context values of the same name.
        return {**self.context_values(), **self.values}

    def section(self, section_id: str) -> Section:
        found = self.variant.get_section(section_id)
        if found is None:
            raise SectionNotFound(section_id)
        return found

    def is_complete(self, section: Section) -> bool:
        if section.kind is SectionKind.AI_GENERATED:
            return (
                section.id in self.generated
                and is_section_complete(section, self.values, self.variant.sections)
            )
        return is_section_complete(section, self.values)


def normalize_value(value: FieldValue) -> Optional[str]:
    """Coerce an incoming answer to the stored string form (None clears)."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value if str(item).strip())
    return str(value)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------
class DocumentSessionStore:
    """Thread-safe in-memory session map with inactivity expiry."""

    def __init__(
        self,
        ttl_minutes: Optional[float] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if ttl_minutes is None:
            ttl_minutes = _env_float("DOCUMENT_SESSION_TTL_MINUTES", 30.0)
        self.ttl = timedelta(minutes=ttl_minutes)
        self._clock = clock
        self._sessions: Dict[str, DocumentSession] = {}
        self._lock = threading.Lock()

    # ── lifecycle ───────────────────────────────────────────────────────

    def create(self, template: DocumentTemplate, variant: JurisdictionVariant) -> DocumentSession:
        now = self._clock()
        session = DocumentSession(
            id=uuid.uuid4().hex,
            template_id=template.id,
            template_name=template.name,
            category=template.category,
            variant=variant,
            created_at=now,
            last_activity=now,
        )
        for section in variant.sections:
            for f in section.fields or []:
                if f.default_value is not None:
                    session.values[f.id] = f.default_value

        with self._lock:
            self._purge_expired(now)
            self._sessions[session.id] = session

        where = variant.district_code or variant.jurisdiction_code
        print(f"🗂️  [SESSION] Created {session.id} — template={template.id} jurisdiction={where}")
        return session

    def get(self, session_id: str) -> DocumentSession:
        """Return a live session and refresh its expiry."""
        now = self._clock()
        with self._lock:
            self._purge_expired(now)
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFound(session_id)
            session.last_activity = now
            return session

    def delete(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFound(session_id)
        print(f"🗂️  [SESSION] Deleted {session_id}")

    def expires_at(self, session: DocumentSession) -> datetime:
        return session.last_activity + self.ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _purge_expired(self, now: datetime) -> None:
        expired = [
            sid for sid, s in self._sessions.items()
            if now - s.last_activity > self.ttl
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            print(f"🗂️  [SESSION] Purged {len(expired)} expired session(s)")

    # ── field answers ───────────────────────────────────────────────────

    def set_field_value(
        self,
        session_id: str,
        field_id: str,
        value: FieldValue,
    ) -> FieldValidationResult:
        """Store one answer and return its validation outcome.

        Invalid values are stored too, so the form keeps what the user typed.
        """
        session = self.get(session_id)
        schema = session.variant.find_field(field_id)
        if schema is None:
            raise FieldNotFound(field_id)

        text = normalize_value(value)
        if text is None:
            session.values.pop(field_id, None)
        else:
            session.values[field_id] = text

        result = is_field_valid(schema, text)
        logger.info(
            "session=%s field=%s length=%d valid=%s",
            session_id, field_id, len(text or ""), result.valid,
        )
        return result

    # ── completion and prompts ──────────────────────────────────────────

    def get_completion_status(self, session_id: str) -> CompletionStatusResponse:
        session = self.get(session_id)
        statuses = {s.id: session.is_complete(s) for s in session.variant.sections}
        complete = all(
            statuses[s.id] for s in session.variant.sections if s.required
        )
        return CompletionStatusResponse(session_id=session_id, sections=statuses, complete=complete)

    def get_rendered_prompt(self, session_id: str, section_id: str) -> RenderedPromptResponse:
        """Render an ai-generated section's prompt once its prerequisites are complete."""
        session = self.get(session_id)
        section = session.section(section_id)
        if section.kind is not SectionKind.AI_GENERATED:
            raise SectionKindMismatch(section_id, SectionKind.AI_GENERATED)

        incomplete = [
            prior.id
            for prior in prerequisite_sections(section, session.variant.sections)
            if not is_section_complete(prior, session.values)
        ]
        if incomplete:
            raise PrerequisitesIncomplete(section_id, incomplete)

        return RenderedPromptResponse(
            section_id=section_id,
            instructions=section.instructions or "",
            rendered_prompt=render(section.prompt_template or "", session.prompt_values()),
        )

    def accept_generated_content(self, session_id: str, section_id: str, content: str) -> None:
        """Store prose for an ai-generated section. Blank prose is refused."""
        session = self.get(session_id)
        section = session.section(section_id)
        if section.kind is not SectionKind.AI_GENERATED:
            raise SectionKindMismatch(section_id, SectionKind.AI_GENERATED)
        if content is None or not content.strip():
            raise EmptyGeneratedContent(section_id)

        session.generated[section_id] = content.strip()
        print(f"🗂️  [SESSION] Accepted {len(content.strip())} chars for {session_id}/{section_id}")

    # ── document plan ───────────────────────────────────────────────────

    def build_document_plan(self, session_id: str) -> DocumentPlanResponse:
        session = self.get(session_id)
        variant = session.variant

        views: List[DocumentSectionView] = []
        for section in variant.sections:
            views.append(
                DocumentSectionView(
                    id=section.id,
                    name=section.name,
                    kind=section.kind,
                    order=section.order,
                    required=section.required,
                    complete=session.is_complete(section),
                    content=_section_content(session, section),
                )
            )

        return DocumentPlanResponse(
            session_id=session_id,
            template_id=session.template_id,
            template_name=session.template_name,
            jurisdiction_code=variant.jurisdiction_code,
            court_type=variant.court_type,
            district_code=variant.district_code,
            court_specific_rules_summary=variant.court_specific_rules_summary,
            sections=views,
            complete=all(v.complete for v in views if v.required),
        )

    def to_response(self, session: DocumentSession) -> SessionResponse:
        v = session.variant
        return SessionResponse(
            session_id=session.id,
            template_id=session.template_id,
            template_name=session.template_name,
            jurisdiction_code=v.jurisdiction_code,
            court_type=v.court_type,
            district_code=v.district_code,
            circuit=v.circuit,
            values=dict(session.values),
            generated_sections=list(session.generated),
            created_at=session.created_at,
            expires_at=self.expires_at(session),
        )


def _section_content(session: DocumentSession, section: Section) -> str:
    if section.kind is SectionKind.STATIC:
        return section.static_content or ""
    if section.kind is SectionKind.AI_GENERATED:
        return session.generated.get(section.id, "")

    lines: List[str] = []
    for f in section.fields or []:
        value = session.values.get(f.id)
        if value is None or not value.strip():
            continue
        shown = f.option_label(value) if f.kind is FieldKind.SELECT else value
        lines.append(f"{f.label}: {shown}")
    return "\n".join(lines)
