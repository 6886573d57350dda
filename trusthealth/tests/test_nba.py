from __future__ import annotations

import pytest

from trusthealth.schemas import ComputeResult, DataGap, FieldPath, NBARule, RedFlag, TrustProfile
from trusthealth.engine.compute import compute_trust_health
from trusthealth.engine.rules import (
    calculate_priority,
    evaluate_next_best_actions,
    evaluate_trigger,
    gap_matches,
)
from trusthealth.engine.ruleset import get_ruleset
from trusthealth.demo_data import demo_input


TRUST = TrustProfile(id="t1")


def _result(**overrides) -> ComputeResult:
    base = dict(
        funding_coverage_value_pct=100,
        funding_coverage_count_pct=100,
        probate_exposure_amount=0,
        document_completeness_score=100,
        incapacity_readiness_score=100,
        evidence_completeness_pct=100,
    )
    base.update(overrides)
    return ComputeResult(**base)


def _rule(rule_id: str = "r-1", **overrides) -> NBARule:
    base = dict(
        rule_id=rule_id,
        name=f"Rule {rule_id}",
        category="funding",
        trigger_type="risk",
        trigger_field="unfunded_real_estate",
        risk_reduction=50,
        equity_protected=50,
        time_score=50,
        dependency_unlock=50,
    )
    base.update(overrides)
    return NBARule(**base)


def _flag(n: int, type: str, assets=(), docs=()) -> RedFlag:
    return RedFlag(
        flag_id=f"rf-{n:04d}",
        type=type,
        severity="high",
        message="m",
        related_asset_ids=list(assets),
        related_doc_ids=list(docs),
    )


def _gap(n: int, text: str) -> DataGap:
    path = FieldPath.parse(text)
    return DataGap(gap_id=f"dg-{n:04d}", field=path.render(), path=path, message="m", resolution_hint="h")


# -------------------------
# PRIORITY
# -------------------------
def test_priority_is_fixed_linear_combination():
    rule = _rule(risk_reduction=95, equity_protected=90, time_score=60, dependency_unlock=70)
    assert calculate_priority(rule) == 87.25


def test_priority_bounds():
    assert calculate_priority(_rule(risk_reduction=0, equity_protected=0, time_score=0, dependency_unlock=0)) == 0
    assert calculate_priority(
        _rule(risk_reduction=100, equity_protected=100, time_score=100, dependency_unlock=100)
    ) == 100


def test_rule_factors_must_be_in_range():
    with pytest.raises(ValueError):
        _rule(risk_reduction=101)


# -------------------------
# RISK / CONFLICT TRIGGERS
# -------------------------
def test_risk_trigger_unions_related_ids():
    result = _result(red_flags=[
        _flag(1, "unfunded_real_estate", assets=["h1"]),
        _flag(2, "missing_poa"),
        _flag(3, "unfunded_real_estate", assets=["h2", "h1"]),
    ])
    match = evaluate_trigger(_rule(), result)
    assert match.triggered
    assert match.related_asset_ids == ["h1", "h2"]
    assert match.related_doc_ids == []


def test_conflict_trigger_matches_flag_type():
    rule = _rule(trigger_type="conflict", trigger_field="beneficiary_mismatch", category="beneficiary")
    result = _result(red_flags=[_flag(1, "beneficiary_mismatch", assets=["a5"])])
    match = evaluate_trigger(rule, result)
    assert match.triggered and match.related_asset_ids == ["a5"]


def test_risk_trigger_no_matching_flag():
    result = _result(red_flags=[_flag(1, "missing_poa")])
    assert not evaluate_trigger(_rule(), result).triggered


def test_outdated_documents_carry_doc_ids():
    rule = _rule(trigger_field="outdated_documents", category="documents")
    result = _result(red_flags=[_flag(1, "outdated_documents", docs=["d1"]), _flag(2, "outdated_documents", docs=["d2"])])
    assert evaluate_trigger(rule, result).related_doc_ids == ["d1", "d2"]


# -------------------------
# GAP TRIGGERS
# -------------------------
def test_gap_pattern_matches_field_name():
    assert gap_matches(_gap(1, "assets[a1].estimated_value"), "estimated_value")
    assert gap_matches(_gap(1, "trust_profile.county"), "trust_profile.county")
    assert gap_matches(_gap(1, "documents[d1].status"), "documents.status")
    assert gap_matches(_gap(1, "documents[d1].status"), "documents[d1].status")


def test_gap_pattern_does_not_match_partial_segments():
    assert not gap_matches(_gap(1, "assets[a10].status"), "a1")
    assert not gap_matches(_gap(1, "assets[a1].estimated_value"), "value")
    assert not gap_matches(_gap(1, "documents[d1].status"), "documents.status.needs_review")
    assert not gap_matches(_gap(1, "assets[a1].funding_status"), "documents.status")


def test_gap_trigger_collects_record_ids():
    rule = _rule(trigger_type="gap", trigger_field="funding_status")
    result = _result(data_gaps=[
        _gap(1, "assets[a1].funding_status"),
        _gap(2, "trust_profile.county"),
        _gap(3, "assets[a2].funding_status"),
    ])
    match = evaluate_trigger(rule, result)
    assert match.triggered
    assert match.related_asset_ids == ["a1", "a2"]


def test_gap_trigger_for_document_status():
    rule = _rule(trigger_type="gap", trigger_field="documents.status", category="documents")
    match = evaluate_trigger(rule, _result(data_gaps=[_gap(1, "documents[d9].status")]))
    assert match.triggered
    assert match.related_doc_ids == ["d9"]
    assert match.related_asset_ids == []


# -------------------------
# GAP RECORDS
# -------------------------
def test_gap_without_path_is_built_from_field():
    gap = DataGap.model_validate({
        "gap_id": "dg-0001",
        "field": "trust_profile.county",
        "message": "County missing",
        "resolution_hint": "Enter the county",
    })
    assert gap.path == FieldPath(entity="trust_profile", name="county")

    gap_rule = _rule(trigger_type="gap", trigger_field="trust_profile.county", category="documents")
    missing_rule = _rule(trigger_type="missing", trigger_field="trust_profile.county", category="documents")
    result = _result(data_gaps=[gap])
    assert evaluate_trigger(gap_rule, result).triggered
    assert evaluate_trigger(missing_rule, result).triggered


def test_gap_field_must_agree_with_path():
    with pytest.raises(ValueError, match="does not match path"):
        DataGap(
            gap_id="dg-0001",
            field="trust_profile.county",
            path=FieldPath(entity="assets", entity_id="a1", name="estimated_value"),
            message="m",
            resolution_hint="h",
        )


def test_gap_with_unparseable_field_is_rejected():
    with pytest.raises(ValueError, match="unparseable"):
        DataGap(gap_id="dg-0001", field="county", message="m", resolution_hint="h")


# -------------------------
# THRESHOLD TRIGGERS
# -------------------------
@pytest.mark.parametrize(
    "operator,value,metric,expected",
    [
        ("lt", "80", 79.99, True),
        ("lt", "80", 80, False),
        ("gt", "50", 50.01, True),
        ("gt", "50", 50, False),
        ("eq", "100", 100, True),
        ("eq", "100", 99.99, False),
    ],
)
def test_threshold_operators(operator, value, metric, expected):
    rule = _rule(
        trigger_type="threshold",
        trigger_field="evidence_completeness_pct",
        trigger_operator=operator,
        trigger_value=value,
    )
    assert evaluate_trigger(rule, _result(evidence_completeness_pct=metric)).triggered is expected


@pytest.mark.parametrize("raw", ["abc", "", "nan", "inf", "80%", "80_0", "1e2"])
def test_malformed_threshold_is_no_match(raw):
    rule = _rule(trigger_type="threshold", trigger_field="evidence_completeness_pct", trigger_operator="lt", trigger_value=raw)
    assert not evaluate_trigger(rule, _result(evidence_completeness_pct=0)).triggered


def test_threshold_exists_operator_never_matches():
    rule = _rule(trigger_type="threshold", trigger_field="evidence_completeness_pct", trigger_operator="exists", trigger_value="50")
    assert not evaluate_trigger(rule, _result(evidence_completeness_pct=0)).triggered


def test_threshold_unknown_metric_is_no_match():
    rule = _rule(trigger_type="threshold", trigger_field="happiness_pct", trigger_operator="lt", trigger_value="50")
    assert not evaluate_trigger(rule, _result()).triggered


def test_funding_threshold_attaches_probate_assets():
    rule = _rule(trigger_type="threshold", trigger_field="funding_coverage_value_pct", trigger_operator="lt", trigger_value="80")
    result = _result(funding_coverage_value_pct=40, probate_exposure_amount=500, probate_exposure_assets=["a2", "a7"])
    match = evaluate_trigger(rule, result)
    assert match.triggered
    assert match.related_asset_ids == ["a2", "a7"]

    other = _rule(trigger_type="threshold", trigger_field="incapacity_readiness_score", trigger_operator="lt", trigger_value="80")
    assert evaluate_trigger(other, _result(incapacity_readiness_score=40, probate_exposure_assets=["a2"])).related_asset_ids == []


# -------------------------
# MISSING TRIGGERS
# -------------------------
def test_missing_trigger_requires_exact_field():
    result = _result(data_gaps=[_gap(1, "trust_profile.county")])
    assert evaluate_trigger(_rule(trigger_type="missing", trigger_field="trust_profile.county"), result).triggered
    assert not evaluate_trigger(_rule(trigger_type="missing", trigger_field="county"), result).triggered


# -------------------------
# RANKING
# -------------------------
def _flagged() -> ComputeResult:
    return _result(red_flags=[_flag(1, "unfunded_real_estate", assets=["h1"])])


def test_single_match_goes_to_top3():
    out = evaluate_next_best_actions(_flagged(), TRUST, [_rule()])
    assert [a.rule_id for a in out.top3] == ["r-1"]
    assert out.backlog == []


def test_five_matches_split_three_and_two_by_priority():
    rules = [_rule(f"r-{i}", risk_reduction=r) for i, r in enumerate([10, 90, 30, 70, 50], start=1)]
    out = evaluate_next_best_actions(_flagged(), TRUST, rules)
    assert [a.rule_id for a in out.top3] == ["r-2", "r-4", "r-5"]
    assert [a.rule_id for a in out.backlog] == ["r-3", "r-1"]
    assert out.top3[0].priority_score >= out.top3[-1].priority_score >= out.backlog[0].priority_score


def test_equal_priorities_keep_rule_order():
    rules = [_rule(f"r-{i}") for i in range(1, 5)]
    out = evaluate_next_best_actions(_flagged(), TRUST, rules)
    assert [a.rule_id for a in out.top3] == ["r-1", "r-2", "r-3"]
    assert [a.rule_id for a in out.backlog] == ["r-4"]

    reversed_out = evaluate_next_best_actions(_flagged(), TRUST, list(reversed(rules)))
    assert [a.rule_id for a in reversed_out.top3] == ["r-4", "r-3", "r-2"]


def test_disabled_rules_are_skipped():
    rules = [_rule("r-1", enabled=False), _rule("r-2")]
    out = evaluate_next_best_actions(_flagged(), TRUST, rules)
    assert [a.rule_id for a in out.top3] == ["r-2"]


def test_nothing_matches_on_clean_result():
    out = evaluate_next_best_actions(_result(), TRUST, get_ruleset("v1").rules)
    assert out.top3 == [] and out.backlog == []


def test_action_carries_remediation_detail():
    rule = _rule(
        steps=["Call the title company", "Record the deed"],
        evidence_required=["Recorded deed"],
        done_definition="Deed recorded",
        escalation_conditions=["Lender objects"],
        owner_suggestion="title_company",
        estimated_complexity="high",
        estimated_time_minutes=120,
    )
    action = evaluate_next_best_actions(_flagged(), TRUST, [rule]).top3[0]
    assert action.steps == ["Call the title company", "Record the deed"]
    assert action.evidence_required == ["Recorded deed"]
    assert action.done_definition == "Deed recorded"
    assert action.escalation_conditions == ["Lender objects"]
    assert action.owner_suggestion.value == "title_company"
    assert action.estimated_complexity.value == "high"
    assert action.estimated_time_minutes == 120
    assert action.related_asset_ids == ["h1"]
    assert action.priority_score == 50.0


# -------------------------
# V1 RULES ON THE DEMO TRUST
# -------------------------
def test_demo_trust_actions():
    inp = demo_input()
    out = evaluate_next_best_actions(compute_trust_health(inp), inp.trust, get_ruleset("v1").rules)

    assert [a.rule_id for a in out.top3] == ["nba-001", "nba-004", "nba-010"]
    assert [a.rule_id for a in out.backlog] == ["nba-005", "nba-003", "nba-002", "nba-013", "nba-011"]
    assert [a.priority_score for a in out.top3] == [87.25, 76.25, 72.5]

    by_id = {a.rule_id: a for a in out.top3 + out.backlog}
    assert by_id["nba-001"].related_asset_ids == ["asset-002"]
    assert by_id["nba-010"].related_asset_ids == ["asset-002", "asset-006", "asset-007"]
    assert by_id["nba-013"].related_asset_ids == ["asset-006"]


def test_demo_actions_are_stable_across_runs():
    inp = demo_input()
    rules = get_ruleset("v1").rules
    first = evaluate_next_best_actions(compute_trust_health(inp), inp.trust, rules)
    second = evaluate_next_best_actions(compute_trust_health(inp), inp.trust, rules)
    assert first.model_dump() == second.model_dump()
