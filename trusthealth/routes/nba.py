# trusthealth/routes/nba.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..db import get_db
from ..logging_config import log_event
from ..settings import get_settings
from .compute import require_latest_computation

from trusthealth.engine.rules import evaluate_next_best_actions
from trusthealth.engine.ruleset import get_ruleset

router = APIRouter(tags=["nba"])
settings = get_settings()


def _respond(out: schemas.NBAOutput, rules_version: str, **extra) -> schemas.NBAResponse:
    return schemas.NBAResponse(
        top3=out.top3,
        backlog=out.backlog,
        rules_version=rules_version,
        total_actions=len(out.top3) + len(out.backlog),
        **extra,
    )


@router.post("/trusts/{trust_id}/nba", response_model=schemas.NBAResponse)
def next_best_actions(trust_id: str, db: Session = Depends(get_db)):
    """
    Rank actions for the latest stored computation of a trust against the
    configured rule set.
    """
    comp = require_latest_computation(db, trust_id)
    ruleset = get_ruleset(settings.RULESET_VERSION)

    results = schemas.ComputeResult.model_validate(comp.results)
    trust = schemas.TrustProfile.model_validate(comp.trust)
    out = evaluate_next_best_actions(results, trust, ruleset.rules)

    log_event("NBA", "Next best actions evaluated", {
        "trust_id": trust_id,
        "computation_id": comp.id,
        "computation_version": comp.version,
        "top3_rules": [a.rule_id for a in out.top3],
        "backlog_count": len(out.backlog),
    })
    return _respond(
        out,
        ruleset.version,
        computation_id=comp.id,
        computation_version=comp.version,
        computed_at=comp.created_at.isoformat() if comp.created_at else None,
    )


@router.post("/nba/evaluate", response_model=schemas.NBAResponse)
def evaluate(body: schemas.NBAEvaluateRequest):
    """Stateless evaluation; callers may bring their own rule list."""
    if body.rules is None:
        ruleset = get_ruleset(settings.RULESET_VERSION)
        rules, version = ruleset.rules, ruleset.version
    else:
        rules, version = body.rules, "custom"

    out = evaluate_next_best_actions(body.results, body.trust, rules)
    return _respond(out, version)


@router.get("/rules", response_model=schemas.RuleSet)
def active_rules():
    return get_ruleset(settings.RULESET_VERSION)
