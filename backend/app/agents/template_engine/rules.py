"""Jurisdiction rule tables for the document template engine.

Loads the static per-jurisdiction datasets (federal district table,
sub-jurisdiction selector lists, per-template rule text) and resolves them
into ``JurisdictionRuleEntry`` values. Pure data, no drafting logic.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from ...constants import (
    DEFAULT_SUB_JURISDICTION_LABEL,
    FEDERAL_DISTRICTS_FILE,
    STATE_CODES,
    SUB_JURISDICTIONS_FILE,
)
from ...schemas.template_schema import FieldOption, JurisdictionRuleEntry, RuleText
from .errors import ConfigError


# ── Dataset records ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class FederalDistrict:
    """One federal judicial district and the circuit it sits in."""

    code: str
    state: str
    circuit: str

    @property
    def header(self) -> str:
        """Display header, e.g. ``EDLA (Fifth Circuit)``."""
        return f"{self.code} ({self.circuit} Circuit)"


@dataclass(frozen=True)
class SubJurisdictionTable:
    """Selector data for states whose captions name a county, parish, etc."""

    label: str
    options: List[FieldOption] = field(default_factory=list)


# ── Loaders ──────────────────────────────────────────────────────────────

def read_json(path: Path) -> Any:
    """Read a JSON dataset, converting I/O and syntax problems into ConfigError."""
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except OSError as exc:
        raise ConfigError(f"Cannot read dataset {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc


def load_federal_districts(path: Path = FEDERAL_DISTRICTS_FILE) -> Dict[str, FederalDistrict]:
    """Load the district → (home state, circuit) table, keyed by upper-case code."""
    raw = read_json(path)
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: expected an object keyed by district code")

    districts: Dict[str, FederalDistrict] = {}
    for code, entry in raw.items():
        try:
            state = str(entry["state"]).upper()
            circuit = str(entry["circuit"])
        except (KeyError, TypeError) as exc:
            raise ConfigError(f"{path}: district '{code}' is missing {exc}") from exc
        if state not in STATE_CODES:
            raise ConfigError(f"{path}: district '{code}' has unknown home state '{state}'")
        districts[code.upper()] = FederalDistrict(code=code.upper(), state=state, circuit=circuit)
    return districts


def load_sub_jurisdictions(path: Path = SUB_JURISDICTIONS_FILE) -> Dict[str, SubJurisdictionTable]:
    """Load the state → sub-jurisdiction selector table."""
    raw = read_json(path)
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: expected an object keyed by state code")

    tables: Dict[str, SubJurisdictionTable] = {}
    for code, entry in raw.items():
        try:
            options = [FieldOption(**opt) for opt in entry.get("options", [])]
        except (AttributeError, TypeError, ValidationError) as exc:
            raise ConfigError(f"{path}: bad options for '{code}': {exc}") from exc
        if not options:
            raise ConfigError(f"{path}: '{code}' lists no sub-jurisdictions")
        values = [o.value for o in options]
        if len(set(values)) != len(values):
            raise ConfigError(f"{path}: '{code}' has duplicate option values")
        tables[code.upper()] = SubJurisdictionTable(
            label=entry.get("label") or DEFAULT_SUB_JURISDICTION_LABEL,
            options=options,
        )
    return tables


# ── Rule table assembly ──────────────────────────────────────────────────

def build_rule_table(
    state_rules: Mapping[str, RuleText],
    sub_jurisdictions: Optional[Mapping[str, SubJurisdictionTable]] = None,
) -> Dict[str, JurisdictionRuleEntry]:
    """Merge a template's per-state rule text with the shared selector data.

    Codes without rule text are simply absent from the result; the variant
    builder reports them when asked to build that jurisdiction.
    """
    sub_jurisdictions = sub_jurisdictions or {}
    table: Dict[str, JurisdictionRuleEntry] = {}
    for code, rule in state_rules.items():
        code = code.upper()
        selector = sub_jurisdictions.get(code)
        table[code] = JurisdictionRuleEntry(
            jurisdiction_code=code,
            primary_rule=rule.primary_rule,
            standard_description=rule.standard_description,
            time_limits=rule.time_limits,
            key_case_law=rule.key_case_law,
            sub_jurisdictions=list(selector.options) if selector else None,
            sub_jurisdiction_label=selector.label if selector else None,
        )
    return table


def federal_rule_entry(district: FederalDistrict, federal_rule: RuleText) -> JurisdictionRuleEntry:
    """Rule entry for a federal district. Federal captions take no sub-jurisdiction."""
    return JurisdictionRuleEntry(
        jurisdiction_code=district.state,
        primary_rule=federal_rule.primary_rule,
        standard_description=federal_rule.standard_description,
        time_limits=federal_rule.time_limits,
        key_case_law=federal_rule.key_case_law,
    )


def slugify_label(label: str) -> str:
    """``"Parish"`` → ``"parish"``, ``"Judicial District"`` → ``"judicialDistrict"``."""
    words = [w for w in re.split(r"[^A-Za-z0-9]+", label) if w]
    if not words:
        return DEFAULT_SUB_JURISDICTION_LABEL.lower()
    head, *rest = words
    return head.lower() + "".join(w[:1].upper() + w[1:].lower() for w in rest)
