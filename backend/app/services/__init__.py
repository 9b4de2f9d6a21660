from .session_service import (
    DocumentSession,
    DocumentSessionStore,
    EmptyGeneratedContent,
    FieldNotFound,
    PrerequisitesIncomplete,
    SectionKindMismatch,
    SectionNotFound,
    SessionError,
    SessionNotFound,
)
from .generation_client import generate_section_content

__all__ = [
    "DocumentSession",
    "DocumentSessionStore",
    "EmptyGeneratedContent",
    "FieldNotFound",
    "PrerequisitesIncomplete",
    "SectionKindMismatch",
    "SectionNotFound",
    "SessionError",
    "SessionNotFound",
    "generate_section_content",
]
