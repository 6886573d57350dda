# trusthealth/routes/compute.py
from __future__ import annotations

import hashlib
import json

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from ..errors import ComputationNotFound
from ..logging_config import log_event, log_failure
from ..settings import get_settings

from trusthealth.engine.compute import compute_trust_health

router = APIRouter(prefix="/trusts", tags=["compute"])
settings = get_settings()


# -------------------------
# SNAPSHOT HELPERS
# -------------------------
def hash_input(inp: schemas.ComputeInput) -> str:
    """Deterministic digest of everything the engine reads."""
    canonical = json.dumps(inp.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def latest_computation(db: Session, trust_id: str) -> models.Computation | None:
    return (
        db.query(models.Computation)
        .filter(models.Computation.trust_id == trust_id)
        .order_by(models.Computation.version.desc())
        .first()
    )


def require_latest_computation(db: Session, trust_id: str) -> models.Computation:
    comp = latest_computation(db, trust_id)
    if comp is None:
        raise ComputationNotFound(f"No computation stored for trust {trust_id}")
    return comp


def _next_version(db: Session, trust_id: str) -> int:
    current = (
        db.query(func.max(models.Computation.version))
        .filter(models.Computation.trust_id == trust_id)
        .scalar()
    )
    return (current or 0) + 1


def _to_response(comp: models.Computation, cached: bool) -> schemas.ComputeResponse:
    return schemas.ComputeResponse(
        computation_id=comp.id,
        trust_id=comp.trust_id,
        version=comp.version,
        cached=cached,
        computed_at=comp.created_at.isoformat() if comp.created_at else None,
        results=schemas.ComputeResult.model_validate(comp.results),
    )


# -------------------------
# COMPUTE
# -------------------------
@router.post("/{trust_id}/compute", response_model=schemas.ComputeResponse)
def compute(
    trust_id: str,
    body: schemas.ComputeInput,
    response: Response,
    trigger: str = Query("manual"),
    db: Session = Depends(get_db),
):
    response.headers["X-Engine-Version"] = settings.ENGINE_VERSION

    if body.trust.id != trust_id:
        raise HTTPException(400, "Trust id in body does not match path")
    if trigger not in settings.TRIGGER_SOURCES:
        trigger = "manual"

    input_hash = hash_input(body)
    latest = latest_computation(db, trust_id)
    if latest is not None and latest.input_hash == input_hash:
        log_event("COMPUTE_CACHED", "Inputs unchanged; returning stored result", {
            "trust_id": trust_id,
            "version": latest.version,
        })
        return _to_response(latest, cached=True)

    results = compute_trust_health(body)
    version = _next_version(db, trust_id)

    comp = models.Computation(
        trust_id=trust_id,
        version=version,
        input_hash=input_hash,
        trigger=trigger,
        trust=body.trust.model_dump(mode="json"),
        results=results.model_dump(mode="json"),
        app_version=settings.APP_VERSION,
        engine_version=settings.ENGINE_VERSION,
        ruleset_version=settings.RULESET_VERSION,
        schema_version=settings.SCHEMA_VERSION,
    )
    db.add(comp)
    try:
        db.commit()
    except IntegrityError:
        # another request stored this version first
        db.rollback()
        log_failure("COMPUTE_VERSION_CONFLICT", {"trust_id": trust_id, "version": version})
        raise HTTPException(409, "Concurrent computation for this trust; retry")
    db.refresh(comp)

    log_event("COMPUTE", "Trust health computed", {
        "trust_id": trust_id,
        "computation_id": comp.id,
        "version": comp.version,
        "trigger": trigger,
        "funding_coverage_value_pct": results.funding_coverage_value_pct,
        "probate_exposure_amount": results.probate_exposure_amount,
        "red_flag_count": len(results.red_flags),
        "data_gap_count": len(results.data_gaps),
    })
    return _to_response(comp, cached=False)


@router.get("/{trust_id}/compute/latest", response_model=schemas.ComputeResponse)
def get_latest(trust_id: str, db: Session = Depends(get_db)):
    return _to_response(require_latest_computation(db, trust_id), cached=False)


@router.get("/{trust_id}/compute/history")
def get_history(
    trust_id: str,
    limit: int = Query(settings.HISTORY_LIMIT, ge=1, le=200),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(models.Computation)
        .filter(models.Computation.trust_id == trust_id)
        .order_by(models.Computation.version.desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "computation_id": c.id,
            "version": c.version,
            "trigger": c.trigger,
            "input_hash": c.input_hash,
            "computed_at": c.created_at.isoformat() if c.created_at else None,
            "funding_coverage_value_pct": c.results.get("funding_coverage_value_pct"),
            "probate_exposure_amount": c.results.get("probate_exposure_amount"),
            "red_flag_count": len(c.results.get("red_flags", [])),
            "data_gap_count": len(c.results.get("data_gaps", [])),
        }
        for c in rows
    ]
