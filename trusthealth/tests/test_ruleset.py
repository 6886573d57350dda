from __future__ import annotations

import json

import pytest

from trusthealth.errors import RulesetNotFound
from trusthealth.engine.rules import calculate_priority
from trusthealth.engine.ruleset import get_ruleset, load_ruleset, ruleset_path


def _write(tmp_path, data):
    path = tmp_path / "nba_rules_test.json"
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


MINIMAL_RULE = {
    "rule_id": "x-1",
    "name": "Fund the house",
    "category": "funding",
    "trigger_type": "risk",
    "trigger_field": "unfunded_real_estate",
}


def test_v1_ruleset_loads():
    ruleset = get_ruleset("v1")
    assert ruleset.version == "v1"
    assert len(ruleset.rules) == 17
    ids = [r.rule_id for r in ruleset.rules]
    assert ids == [f"nba-{i:03d}" for i in range(1, 18)]


def test_v1_rules_have_remediation_content():
    for rule in get_ruleset("v1").rules:
        assert rule.steps, rule.rule_id
        assert rule.done_definition, rule.rule_id
        assert rule.enabled
        assert 0 <= calculate_priority(rule) <= 100


def test_v1_document_review_rule_targets_document_status():
    rules = {r.rule_id: r for r in get_ruleset("v1").rules}
    assert rules["nba-016"].trigger_field == "documents.status"
    assert rules["nba-001"].trigger_field == "unfunded_real_estate"
    assert calculate_priority(rules["nba-001"]) == 87.25


def test_get_ruleset_is_cached():
    assert get_ruleset("v1") is get_ruleset("v1")


def test_unknown_version_raises():
    with pytest.raises(RulesetNotFound):
        get_ruleset("v999")


def test_missing_file_raises(tmp_path):
    with pytest.raises(RulesetNotFound):
        load_ruleset(tmp_path / "nope.json")


def test_minimal_rule_gets_defaults(tmp_path):
    ruleset = load_ruleset(_write(tmp_path, {"version": "t", "rules": [MINIMAL_RULE]}))
    rule = ruleset.rules[0]
    assert rule.trigger_operator.value == "exists"
    assert rule.enabled is True
    assert rule.owner_suggestion.value == "self"
    assert calculate_priority(rule) == 0


def test_invalid_json_is_rejected(tmp_path):
    with pytest.raises(ValueError, match="not valid JSON"):
        load_ruleset(_write(tmp_path, "{ nope"))


def test_unknown_category_is_rejected(tmp_path):
    bad = dict(MINIMAL_RULE, category="astrology")
    with pytest.raises(ValueError, match="does not match schema"):
        load_ruleset(_write(tmp_path, {"version": "t", "rules": [bad]}))


def test_unknown_trigger_type_is_rejected(tmp_path):
    bad = dict(MINIMAL_RULE, trigger_type="vibes")
    with pytest.raises(ValueError):
        load_ruleset(_write(tmp_path, {"version": "t", "rules": [bad]}))


def test_duplicate_rule_ids_are_rejected(tmp_path):
    with pytest.raises(ValueError, match="duplicate"):
        load_ruleset(_write(tmp_path, {"version": "t", "rules": [MINIMAL_RULE, MINIMAL_RULE]}))


def test_ruleset_path_naming():
    assert ruleset_path("v1").name == "nba_rules_v1.json"
    assert ruleset_path("v1").exists()
