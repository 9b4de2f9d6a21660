"""Template catalog routes — browse templates and resolve jurisdiction variants.

Endpoints:
  GET /templates                          — List registered templates
  GET /templates/{template_id}            — Template detail + supported jurisdictions
  GET /templates/{template_id}/sections   — Ordered sections for one jurisdiction
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..agents.template_engine.errors import NotFound
from ..agents.template_engine.registry import TemplateRegistry
from ..schemas.template_schema import (
    DocumentTemplate,
    SupportedJurisdictions,
    TemplateCategory,
    TemplateDetailResponse,
    TemplateListResponse,
    TemplateSummary,
    VariantSectionsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/templates",
    tags=["Templates"],
)


# ── Dependencies ─────────────────────────────────────────────────────────

def get_registry(request: Request) -> TemplateRegistry:
    """The registry built during application startup."""
    return request.app.state.registry


def resolve_jurisdiction(
    registry: TemplateRegistry,
    jurisdiction: Optional[str],
    district: Optional[str],
) -> str:
    """Return the state code for a request, deriving it from the district if needed."""
    if jurisdiction and jurisdiction.strip():
        return jurisdiction.strip().upper()
    if district and district.strip():
        known = registry.federal_district(district)
        if known is not None:
            return known.state
        return ""
    raise HTTPException(
        status_code=422,
        detail="Either a jurisdiction code or a federal district code is required",
    )


def _summary(template: DocumentTemplate) -> TemplateSummary:
    return TemplateSummary(
        id=template.id,
        name=template.name,
        category=template.category,
        description=template.description,
        version=template.version,
        metadata=template.metadata,
    )


# ── Routes ───────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=TemplateListResponse,
    summary="List Templates",
)
async def list_templates(
    category: Optional[TemplateCategory] = Query(None, description="Filter by category"),
    registry: TemplateRegistry = Depends(get_registry),
) -> TemplateListResponse:
    templates = [_summary(t) for t in registry.list_templates(category)]
    return TemplateListResponse(templates=templates, total=len(templates))


@router.get(
    "/{template_id}",
    response_model=TemplateDetailResponse,
    summary="Get Template",
)
async def get_template(
    template_id: str,
    registry: TemplateRegistry = Depends(get_registry),
) -> TemplateDetailResponse:
    template = registry.get_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Template '{template_id}' not found")

    return TemplateDetailResponse(
        **_summary(template).model_dump(),
        base_sections=template.base_sections,
        supported_jurisdictions=SupportedJurisdictions(
            **registry.supported_jurisdictions(template_id)
        ),
    )


@router.get(
    "/{template_id}/sections",
    response_model=VariantSectionsResponse,
    summary="List Sections For Jurisdiction",
    response_description="Ordered sections of the jurisdiction variant",
)
async def list_sections(
    template_id: str,
    jurisdiction: Optional[str] = Query(None, description="State/territory code, e.g. LA"),
    district: Optional[str] = Query(None, description="Federal district code, e.g. EDLA"),
    registry: TemplateRegistry = Depends(get_registry),
) -> VariantSectionsResponse:
    code = resolve_jurisdiction(registry, jurisdiction, district)
    variant = registry.lookup(template_id, code, district)
    if isinstance(variant, NotFound):
        logger.info("Unsupported variant requested: %s", variant.message)
        raise HTTPException(status_code=404, detail=variant.message)

    return VariantSectionsResponse(
        template_id=template_id,
        jurisdiction_code=variant.jurisdiction_code,
        court_type=variant.court_type,
        district_code=variant.district_code,
        circuit=variant.circuit,
        court_specific_rules_summary=variant.court_specific_rules_summary,
        sections=variant.sections,
    )
