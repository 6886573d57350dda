# trusthealth/engine/rules.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ..schemas import (
    ComputeResult,
    DataGap,
    FieldPath,
    NBAAction,
    NBAOutput,
    NBARule,
    TriggerOperator,
    TriggerType,
    TrustProfile,
)
from .scoring import round2

TOP_N = 3
_THRESHOLD_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")

# priority weights (fixed, never per rule)
WEIGHT_RISK_REDUCTION = 0.45
WEIGHT_EQUITY_PROTECTED = 0.35
WEIGHT_TIME_SCORE = 0.10
WEIGHT_DEPENDENCY_UNLOCK = 0.10

METRICS: Dict[str, Callable[[ComputeResult], float]] = {
    "funding_coverage_value_pct": lambda r: r.funding_coverage_value_pct,
    "funding_coverage_count_pct": lambda r: r.funding_coverage_count_pct,
    "probate_exposure_amount": lambda r: r.probate_exposure_amount,
    "document_completeness_score": lambda r: r.document_completeness_score,
    "incapacity_readiness_score": lambda r: r.incapacity_readiness_score,
    "evidence_completeness_pct": lambda r: r.evidence_completeness_pct,
}


@dataclass
class TriggerMatch:
    triggered: bool
    related_asset_ids: List[str] = field(default_factory=list)
    related_doc_ids: List[str] = field(default_factory=list)


NO_MATCH = TriggerMatch(False)


def _dedupe(ids: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(ids))


def calculate_priority(rule: NBARule) -> float:
    """Fixed linear combination of the four rule factors, rounded to cents."""
    score = (
        rule.risk_reduction * WEIGHT_RISK_REDUCTION
        + rule.equity_protected * WEIGHT_EQUITY_PROTECTED
        + rule.time_score * WEIGHT_TIME_SCORE
        + rule.dependency_unlock * WEIGHT_DEPENDENCY_UNLOCK
    )
    return round2(score)


# -------------------------
# Trigger handlers
# -------------------------
def _match_flags(rule: NBARule, result: ComputeResult) -> TriggerMatch:
    hits = [f for f in result.red_flags if f.type.value == rule.trigger_field]
    if not hits:
        return NO_MATCH
    return TriggerMatch(
        True,
        _dedupe(i for f in hits for i in f.related_asset_ids),
        _dedupe(i for f in hits for i in f.related_doc_ids),
    )


def _pattern_segments(pattern: str) -> tuple[str, ...]:
    parsed = FieldPath.parse(pattern)
    if parsed is not None:
        return parsed.segments()
    return tuple(s for s in pattern.split(".") if s)


def _contains_run(haystack: Sequence[str], needle: Sequence[str]) -> bool:
    n = len(needle)
    return n > 0 and any(tuple(haystack[i:i + n]) == tuple(needle) for i in range(len(haystack) - n + 1))


def gap_matches(gap: DataGap, pattern: str) -> bool:
    """
    True when the pattern names a contiguous run of the gap's path segments.

    ``estimated_value`` matches ``assets[a1].estimated_value``;
    ``documents.status`` matches ``documents[d1].status`` (the record id is
    optional in a pattern); ``a1`` never matches ``assets[a10].status``.
    """
    needle = _pattern_segments(pattern)
    p = gap.path
    return _contains_run(p.segments(), needle) or _contains_run((p.entity, p.name), needle)


def _match_gap(rule: NBARule, result: ComputeResult) -> TriggerMatch:
    hits = [g for g in result.data_gaps if gap_matches(g, rule.trigger_field)]
    if not hits:
        return NO_MATCH

    asset_ids, doc_ids = [], []
    for g in hits:
        if g.path.entity_id is None:
            continue
        if g.path.entity == "assets":
            asset_ids.append(g.path.entity_id)
        elif g.path.entity == "documents":
            doc_ids.append(g.path.entity_id)
    return TriggerMatch(True, _dedupe(asset_ids), _dedupe(doc_ids))


def _parse_threshold(raw: str) -> Optional[float]:
    # plain decimals only: no nan, inf, exponents or digit separators
    if not isinstance(raw, str) or not _THRESHOLD_RE.match(raw.strip()):
        return None
    return float(raw)


def _match_threshold(rule: NBARule, result: ComputeResult) -> TriggerMatch:
    getter = METRICS.get(rule.trigger_field)
    threshold = _parse_threshold(rule.trigger_value)
    if getter is None or threshold is None:
        return NO_MATCH

    metric = getter(result)
    if rule.trigger_operator == TriggerOperator.LT:
        hit = metric < threshold
    elif rule.trigger_operator == TriggerOperator.GT:
        hit = metric > threshold
    elif rule.trigger_operator == TriggerOperator.EQ:
        hit = metric == threshold
    else:
        hit = False

    if not hit:
        return NO_MATCH

    # unfunded assets are what moves funding coverage
    if rule.trigger_field == "funding_coverage_value_pct":
        return TriggerMatch(True, _dedupe(result.probate_exposure_assets))
    return TriggerMatch(True)


def _match_missing(rule: NBARule, result: ComputeResult) -> TriggerMatch:
    hit = any(g.field == rule.trigger_field for g in result.data_gaps)
    return TriggerMatch(hit)


TRIGGER_HANDLERS: Dict[TriggerType, Callable[[NBARule, ComputeResult], TriggerMatch]] = {
    TriggerType.RISK: _match_flags,
    TriggerType.CONFLICT: _match_flags,
    TriggerType.GAP: _match_gap,
    TriggerType.THRESHOLD: _match_threshold,
    TriggerType.MISSING: _match_missing,
}


def evaluate_trigger(rule: NBARule, result: ComputeResult) -> TriggerMatch:
    handler = TRIGGER_HANDLERS.get(rule.trigger_type)
    if handler is None:
        return NO_MATCH
    return handler(rule, result)


def build_action(rule: NBARule, match: TriggerMatch) -> NBAAction:
    return NBAAction(
        rule_id=rule.rule_id,
        name=rule.name,
        description=rule.description,
        priority_score=calculate_priority(rule),
        category=rule.category,
        steps=list(rule.steps),
        evidence_required=list(rule.evidence_required),
        done_definition=rule.done_definition,
        escalation_conditions=list(rule.escalation_conditions),
        owner_suggestion=rule.owner_suggestion,
        estimated_complexity=rule.estimated_complexity,
        estimated_time_minutes=rule.estimated_time_minutes,
        related_asset_ids=match.related_asset_ids,
        related_doc_ids=match.related_doc_ids,
    )


def evaluate_next_best_actions(
    result: ComputeResult,
    trust: TrustProfile,
    rules: Sequence[NBARule],
) -> NBAOutput:
    """
    Match every enabled rule against a scoring result and rank the hits.

    Ties on priority keep rule order (the sort is stable), so the split
    between ``top3`` and ``backlog`` is reproducible. ``trust`` is part of
    the contract for profile-aware triggers; no v1 trigger reads it.
    """
    matched: List[NBAAction] = []
    for rule in rules:
        if not rule.enabled:
            continue
        match = evaluate_trigger(rule, result)
        if match.triggered:
            matched.append(build_action(rule, match))

    matched.sort(key=lambda a: a.priority_score, reverse=True)
    return NBAOutput(top3=matched[:TOP_N], backlog=matched[TOP_N:])
