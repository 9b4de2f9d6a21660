"""Prompt Interpolator — turns an ai-generated section's prompt template
plus collected field values into the literal instruction text.

Placeholders use a narrow ``{{identifier}}`` grammar. Rendering is pure,
literal and single-pass: substituted values are never re-scanned.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional, Set

from ...constants import CONTEXT_PLACEHOLDERS, NOT_PROVIDED
from ...schemas.template_schema import JurisdictionVariant, SectionKind
from .errors import UnknownPlaceholder

# Any {{...}} token, so malformed bodies can be reported instead of ignored.
_TOKEN_RE = re.compile(r"\{\{(.*?)\}\}")
_IDENTIFIER_RE = re.compile(r"^\w+$")


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def extract_placeholders(prompt_template: str) -> List[str]:
    """Return every placeholder body in first-seen order, without duplicates."""
    seen: Dict[str, None] = {}
    for match in _TOKEN_RE.finditer(prompt_template):
        seen.setdefault(match.group(1), None)
    return list(seen)


def render(prompt_template: str, values: Mapping[str, Optional[str]]) -> str:
    """Substitute every ``{{fieldId}}`` with its value or ``"Not provided"``.

    Total for any input: absent, ``None`` and blank values all render as the
    fallback text. List-valued answers must already be joined by the caller.
    """

    def _substitute(match: re.Match) -> str:
        value = values.get(match.group(1))
        return NOT_PROVIDED if _is_blank(value) else str(value)

    return _TOKEN_RE.sub(_substitute, prompt_template)


def check_placeholders(
    variant: JurisdictionVariant,
    template_id: str,
    context_placeholders: Iterable[str] = CONTEXT_PLACEHOLDERS,
) -> None:
    """Verify every prompt placeholder resolves to a field at a lower order.

    Runs once per registered variant. Raises UnknownPlaceholder on a forward
    reference, a self reference, an unknown id, or a malformed token.
    """
    allowed: Set[str] = set(context_placeholders)
    jurisdiction = variant.district_code or variant.jurisdiction_code

    for section in sorted(variant.sections, key=lambda s: s.order):
        if section.kind is SectionKind.AI_GENERATED:
            for name in extract_placeholders(section.prompt_template or ""):
                if not _IDENTIFIER_RE.match(name) or name not in allowed:
                    raise UnknownPlaceholder(template_id, section.id, name, jurisdiction)
        # Fields become visible only to sections after this one.
        allowed.update(section.field_ids())
