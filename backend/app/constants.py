"""Centralized constants shared by the template engine, sessions and routes.

This module is the SINGLE SOURCE OF TRUTH for the jurisdiction code list,
dataset locations, and the fixed identifiers the engine synthesizes.
"""

from __future__ import annotations

from pathlib import Path

# ── Dataset locations ───────────────────────────────────────────────────

DATA_DIR: Path = Path(__file__).resolve().parent / "data"
TEMPLATE_DIR: Path = DATA_DIR / "templates"
FEDERAL_DISTRICTS_FILE: Path = DATA_DIR / "federal_districts.json"
SUB_JURISDICTIONS_FILE: Path = DATA_DIR / "sub_jurisdictions.json"

# ── State / territory codes ─────────────────────────────────────────────
# 50 states + DC. Every registered template must carry a rule entry for
# each of these codes.

STATE_CODES: tuple[str, ...] = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "DC", "FL",
    "GA", "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME",
    "MD", "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH",
    "NJ", "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI",
    "SC", "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI",
    "WY",
)

# ── Synthesized section identifiers ─────────────────────────────────────

STATE_STANDARD_SECTION_ID = "jurisdictionStandard"
FEDERAL_STANDARD_SECTION_ID = "federalStandard"
CAPTION_SECTION_ID = "caption"
DEFAULT_SUB_JURISDICTION_LABEL = "County"

# ── Prompt rendering ────────────────────────────────────────────────────

NOT_PROVIDED = "Not provided"

# Placeholders every ai-generated section may use in addition to field ids.
# Values come from the resolved variant, not from user input.
CONTEXT_PLACEHOLDERS: frozenset[str] = frozenset({
    "jurisdiction",
    "courtType",
    "district",
    "circuit",
})
