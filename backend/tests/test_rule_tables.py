"""Jurisdiction dataset tests — the shipped rule tables and their loaders."""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json

import pytest

from app.agents.template_engine.errors import ConfigError
from app.agents.template_engine.rules import (
    FederalDistrict,
    build_rule_table,
    federal_rule_entry,
    load_federal_districts,
    load_sub_jurisdictions,
    read_json,
)
from app.constants import STATE_CODES, TEMPLATE_DIR
from app.schemas.template_schema import RuleText, TemplateDefinition


class TestShippedDatasets:
    def test_fifty_one_codes(self):
        assert len(STATE_CODES) == 51
        assert "DC" in STATE_CODES

    def test_federal_districts(self):
        districts = load_federal_districts()
        assert len(districts) == 90
        assert districts["EDLA"] == FederalDistrict(code="EDLA", state="LA", circuit="Fifth")
        assert districts["DDC"].header == "DDC (D.C. Circuit)"
        assert all(d.state in STATE_CODES for d in districts.values())

    def test_sub_jurisdictions(self):
        tables = load_sub_jurisdictions()
        assert tables["LA"].label == "Parish"
        assert len(tables["LA"].options) == 64
        assert all(t.label == "County" for code, t in tables.items() if code != "LA")

    @pytest.mark.parametrize("path", sorted(TEMPLATE_DIR.glob("*.json")), ids=lambda p: p.stem)
    def test_template_has_rule_for_every_code(self, path):
        definition = TemplateDefinition.model_validate(read_json(path))
        assert set(definition.state_rules) == set(STATE_CODES)


class TestRuleTableAssembly:
    RULE = RuleText(
        primary_rule="Rule",
        standard_description="Standard",
        time_limits="Limits",
        key_case_law="Cases",
    )

    def test_selector_attached_where_known(self):
        table = build_rule_table({"la": self.RULE, "TX": self.RULE}, load_sub_jurisdictions())
        assert table["LA"].sub_jurisdiction_label == "Parish"
        assert table["LA"].sub_jurisdictions
        assert table["TX"].sub_jurisdictions is None

    def test_federal_entry_has_no_selector(self):
        entry = federal_rule_entry(FederalDistrict(code="EDLA", state="LA", circuit="Fifth"), self.RULE)
        assert entry.jurisdiction_code == "LA"
        assert entry.sub_jurisdictions is None
        assert entry.primary_rule == "Rule"


class TestLoaderErrors:
    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            read_json(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            read_json(tmp_path / "absent.json")

    def test_district_with_unknown_state(self, tmp_path):
        path = tmp_path / "districts.json"
        path.write_text(json.dumps({"XXZZ": {"state": "ZZ", "circuit": "First"}}), encoding="utf-8")
        with pytest.raises(ConfigError):
            load_federal_districts(path)

    def test_empty_sub_jurisdiction_list(self, tmp_path):
        path = tmp_path / "subs.json"
        path.write_text(json.dumps({"LA": {"label": "Parish", "options": []}}), encoding="utf-8")
        with pytest.raises(ConfigError):
            load_sub_jurisdictions(path)
