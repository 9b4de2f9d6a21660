"""Document Template Registry.

Built once at startup: every template is expanded into one variant per
state/territory code and one per federal district, each placeholder-checked,
then cached. After that, lookups are plain dict reads and nothing mutates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from ...constants import STATE_CODES, TEMPLATE_DIR
from ...schemas.template_schema import (
    CourtType,
    DocumentTemplate,
    JurisdictionVariant,
    Section,
    TemplateCategory,
    TemplateDefinition,
)
from .errors import ConfigError, NotFound
from .interpolator import check_placeholders
from .rules import (
    FederalDistrict,
    SubJurisdictionTable,
    build_rule_table,
    federal_rule_entry,
    load_federal_districts,
    load_sub_jurisdictions,
    read_json,
)
from .timing import RegistrationTimer, sync_timer
from .variant_builder import build_variant

VariantKey = Tuple[str, str, Optional[str]]


class TemplateRegistry:
    """Immutable-after-startup map of (template, jurisdiction, district) → variant."""

    def __init__(
        self,
        districts: Optional[Mapping[str, FederalDistrict]] = None,
        sub_jurisdictions: Optional[Mapping[str, SubJurisdictionTable]] = None,
        state_codes: Tuple[str, ...] = STATE_CODES,
    ):
        self._districts = dict(districts) if districts is not None else load_federal_districts()
        self._sub_jurisdictions = (
            dict(sub_jurisdictions) if sub_jurisdictions is not None else load_sub_jurisdictions()
        )
        self._state_codes = tuple(code.upper() for code in state_codes)
        self._templates: Dict[str, DocumentTemplate] = {}
        self._variants: Dict[VariantKey, JurisdictionVariant] = {}

    # ── Registration ─────────────────────────────────────────────────────

    def register(self, definition: Union[TemplateDefinition, Mapping[str, Any]]) -> DocumentTemplate:
        """Build and cache every variant of one template.

        All-or-nothing: any ConfigError (including UnknownPlaceholder)
        propagates and leaves the registry exactly as it was.
        """
        if not isinstance(definition, TemplateDefinition):
            try:
                definition = TemplateDefinition.model_validate(definition)
            except ValidationError as exc:
                raise ConfigError(f"Invalid template definition: {exc}") from exc

        template_id = definition.id
        if template_id in self._templates:
            raise ConfigError(f"Template '{template_id}' is already registered")

        unknown = sorted(set(definition.state_rules) - set(self._state_codes))
        if unknown:
            raise ConfigError(f"Template '{template_id}' has rules for unknown codes: {unknown}")

        timer = RegistrationTimer(template_id)
        built: Dict[VariantKey, JurisdictionVariant] = {}

        with timer.court(CourtType.STATE) as tally:
            rule_table = build_rule_table(definition.state_rules, self._sub_jurisdictions)
            for code in self._state_codes:
                variant = self._build_checked(
                    definition, code,
                    lambda: build_variant(
                        definition.base_sections,
                        rule_table.get(code),
                        CourtType.STATE,
                        standard=definition.standard,
                    ),
                )
                built[(template_id, code, None)] = variant
                tally.append(code)

        with timer.court(CourtType.FEDERAL) as tally:
            for district in self._districts.values():
                variant = self._build_checked(
                    definition, district.code,
                    lambda: build_variant(
                        definition.base_sections,
                        federal_rule_entry(district, definition.standard.federal_rule),
                        CourtType.FEDERAL,
                        district.code,
                        standard=definition.standard,
                        districts=self._districts,
                    ),
                )
                built[(template_id, district.state, district.code)] = variant
                tally.append(district.code)

        timer.summary()

        template = DocumentTemplate(
            id=template_id,
            name=definition.name,
            category=definition.category,
            description=definition.description,
            version=definition.version,
            base_sections=definition.base_sections,
            jurisdiction_variants=list(built.values()),
            metadata=definition.metadata,
        )

        self._templates[template_id] = template
        self._variants.update(built)
        print(f"📚 [REGISTRY] Registered {template_id} — {len(built)} variants")
        return template

    @staticmethod
    def _build_checked(definition: TemplateDefinition, where: str, build) -> JurisdictionVariant:
        try:
            variant = build()
        except ConfigError as exc:
            raise ConfigError(f"Template '{definition.id}' ({where}): {exc}") from exc
        check_placeholders(variant, definition.id)
        return variant

    # ── Lookups ──────────────────────────────────────────────────────────

    def lookup(
        self,
        template_id: str,
        jurisdiction_code: str,
        district_code: Optional[str] = None,
    ) -> Union[JurisdictionVariant, NotFound]:
        """Return the cached variant, or NotFound for an unregistered pair."""
        code = (jurisdiction_code or "").strip().upper()
        district = district_code.strip().upper() if district_code and district_code.strip() else None
        variant = self._variants.get((template_id, code, district))
        if variant is None:
            return NotFound(template_id=template_id, jurisdiction_code=code, district_code=district)
        return variant

    def list_sections(
        self,
        template_id: str,
        jurisdiction_code: str,
        district_code: Optional[str] = None,
    ) -> Union[List[Section], NotFound]:
        """Ordered sections of one variant, for the UI."""
        variant = self.lookup(template_id, jurisdiction_code, district_code)
        if isinstance(variant, NotFound):
            return variant
        return list(variant.sections)

    def get_template(self, template_id: str) -> Optional[DocumentTemplate]:
        return self._templates.get(template_id)

    def list_templates(self, category: Optional[TemplateCategory] = None) -> List[DocumentTemplate]:
        templates = sorted(self._templates.values(), key=lambda t: t.name)
        if category is None:
            return templates
        return [t for t in templates if t.category == category]

    def supported_jurisdictions(self, template_id: str) -> Dict[str, List[str]]:
        """State codes and federal district codes registered for a template."""
        states: List[str] = []
        districts: List[str] = []
        for tid, code, district in self._variants:
            if tid != template_id:
                continue
            if district is None:
                states.append(code)
            else:
                districts.append(district)
        return {"states": states, "federal_districts": districts}

    def federal_district(self, district_code: str) -> Optional[FederalDistrict]:
        return self._districts.get(district_code.strip().upper())

    def __len__(self) -> int:
        return len(self._templates)


def build_registry(
    template_dir: Path = TEMPLATE_DIR,
    *,
    districts: Optional[Mapping[str, FederalDistrict]] = None,
    sub_jurisdictions: Optional[Mapping[str, SubJurisdictionTable]] = None,
) -> TemplateRegistry:
    """Register every ``*.json`` template in ``template_dir``, sorted by file name."""
    template_dir = Path(template_dir)
    if not template_dir.is_dir():
        raise ConfigError(f"Template directory not found: {template_dir}")

    registry = TemplateRegistry(districts=districts, sub_jurisdictions=sub_jurisdictions)
    with sync_timer("registry", f"load {template_dir.name}"):
        for path in sorted(template_dir.glob("*.json")):
            print(f"📚 [REGISTRY] Loading {path.name}")
            registry.register(read_json(path))

    print(f"📚 [REGISTRY] {len(registry)} templates ready")
    return registry
