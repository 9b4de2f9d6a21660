"""Document session routes — collect answers, render prompts, assemble the plan.

Endpoints:
  POST   /sessions                                         — Start a session
  GET    /sessions/{session_id}                            — Session state
  PUT    /sessions/{session_id}/fields/{field_id}          — Set one field value
  GET    /sessions/{session_id}/completion                 — Per-section completion
  GET    /sessions/{session_id}/sections/{section_id}/prompt    — Rendered prompt
  PUT    /sessions/{session_id}/sections/{section_id}/content   — Accept prose
  POST   /sessions/{session_id}/sections/{section_id}/generate  — Draft prose via backend
  GET    /sessions/{session_id}/document                   — Document plan
  DELETE /sessions/{session_id}                            — End a session
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from ..agents.template_engine.completion import FieldValidationResult
from ..agents.template_engine.errors import NotFound
from ..agents.template_engine.registry import TemplateRegistry
from ..schemas.session_schema import (
    CompletionStatusResponse,
    CreateSessionRequest,
    DocumentPlanResponse,
    GeneratedContentRequest,
    RenderedPromptResponse,
    SessionResponse,
    SetFieldValueRequest,
)
from ..services.generation_client import generate_section_content
from ..services.session_service import (
    DocumentSessionStore,
    EmptyGeneratedContent,
    PrerequisitesIncomplete,
    SectionKindMismatch,
    SessionError,
)
from .templates import get_registry, resolve_jurisdiction

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/sessions",
    tags=["Sessions"],
)


# ── Dependencies & helpers ───────────────────────────────────────────────

def get_session_store(request: Request) -> DocumentSessionStore:
    return request.app.state.sessions


def _http_error(exc: SessionError) -> HTTPException:
    """Map a session-layer error to its HTTP status."""
    if isinstance(exc, PrerequisitesIncomplete):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(exc), "incomplete_sections": exc.incomplete},
        )
    if isinstance(exc, (EmptyGeneratedContent, SectionKindMismatch)):
        return HTTPException(status_code=422, detail=str(exc))
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


# ── Routes ───────────────────────────────────────────────────────────────

@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start Document Session",
)
async def create_session(
    body: CreateSessionRequest,
    registry: TemplateRegistry = Depends(get_registry),
    store: DocumentSessionStore = Depends(get_session_store),
) -> SessionResponse:
    template = registry.get_template(body.template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Template '{body.template_id}' not found")

    code = resolve_jurisdiction(registry, body.jurisdiction, body.district)
    variant = registry.lookup(body.template_id, code, body.district)
    if isinstance(variant, NotFound):
        raise HTTPException(status_code=404, detail=variant.message)

    session = store.create(template, variant)
    return store.to_response(session)


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    summary="Get Document Session",
)
async def get_session(
    session_id: str,
    store: DocumentSessionStore = Depends(get_session_store),
) -> SessionResponse:
    try:
        return store.to_response(store.get(session_id))
    except SessionError as exc:
        raise _http_error(exc) from exc


@router.put(
    "/{session_id}/fields/{field_id}",
    response_model=FieldValidationResult,
    summary="Set Field Value",
    response_description="Validation outcome; invalid values are stored and reported",
)
async def set_field_value(
    session_id: str,
    field_id: str,
    body: SetFieldValueRequest,
    store: DocumentSessionStore = Depends(get_session_store),
) -> FieldValidationResult:
    try:
        return store.set_field_value(session_id, field_id, body.value)
    except SessionError as exc:
        raise _http_error(exc) from exc


@router.get(
    "/{session_id}/completion",
    response_model=CompletionStatusResponse,
    summary="Get Completion Status",
)
async def get_completion_status(
    session_id: str,
    store: DocumentSessionStore = Depends(get_session_store),
) -> CompletionStatusResponse:
    try:
        return store.get_completion_status(session_id)
    except SessionError as exc:
        raise _http_error(exc) from exc


@router.get(
    "/{session_id}/sections/{section_id}/prompt",
    response_model=RenderedPromptResponse,
    summary="Get Rendered Prompt",
)
async def get_rendered_prompt(
    session_id: str,
    section_id: str,
    store: DocumentSessionStore = Depends(get_session_store),
) -> RenderedPromptResponse:
    try:
        return store.get_rendered_prompt(session_id, section_id)
    except SessionError as exc:
        raise _http_error(exc) from exc


@router.put(
    "/{session_id}/sections/{section_id}/content",
    response_model=CompletionStatusResponse,
    summary="Accept Generated Content",
)
async def accept_content(
    session_id: str,
    section_id: str,
    body: GeneratedContentRequest,
    store: DocumentSessionStore = Depends(get_session_store),
) -> CompletionStatusResponse:
    try:
        store.accept_generated_content(session_id, section_id, body.content)
        return store.get_completion_status(session_id)
    except SessionError as exc:
        raise _http_error(exc) from exc


@router.post(
    "/{session_id}/sections/{section_id}/generate",
    response_model=CompletionStatusResponse,
    summary="Generate Section Content",
    response_description="Completion status after the drafted prose is stored",
)
async def generate_content(
    session_id: str,
    section_id: str,
    store: DocumentSessionStore = Depends(get_session_store),
) -> CompletionStatusResponse:
    try:
        session = store.get(session_id)
        prompt = store.get_rendered_prompt(session_id, section_id)
    except SessionError as exc:
        raise _http_error(exc) from exc

    try:
        content = await generate_section_content(
            instructions=prompt.instructions,
            rendered_prompt=prompt.rendered_prompt,
            category=session.category,
            section_id=section_id,
        )
    except EnvironmentError as exc:
        logger.warning("Generation backend not configured: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    if content is None:
        logger.warning("Generation failed for session=%s section=%s", session_id, section_id)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Generation backend returned no content; the section is unchanged and can be retried",
        )

    try:
        store.accept_generated_content(session_id, section_id, content)
        return store.get_completion_status(session_id)
    except SessionError as exc:
        raise _http_error(exc) from exc


@router.get(
    "/{session_id}/document",
    response_model=DocumentPlanResponse,
    summary="Get Document Plan",
)
async def get_document(
    session_id: str,
    store: DocumentSessionStore = Depends(get_session_store),
) -> DocumentPlanResponse:
    try:
        return store.build_document_plan(session_id)
    except SessionError as exc:
        raise _http_error(exc) from exc


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="End Document Session",
)
async def delete_session(
    session_id: str,
    store: DocumentSessionStore = Depends(get_session_store),
) -> Response:
    try:
        store.delete(session_id)
    except SessionError as exc:
        raise _http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
