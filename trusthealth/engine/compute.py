# trusthealth/engine/compute.py
from __future__ import annotations

from ..schemas import ComputeInput, ComputeResult
from .flags import detect_data_gaps, detect_red_flags
from .scoring import (
    document_completeness,
    evidence_completeness,
    funding_coverage_count,
    funding_coverage_value,
    incapacity_readiness,
    probate_exposure,
)


def compute_trust_health(inp: ComputeInput) -> ComputeResult:
    """
    Score one trust from its records.

    Pure: no I/O, no clock, no shared state. Each metric carries the formula
    string and the record ids it was derived from.
    """
    trust, assets, documents, evidence = inp.trust, inp.assets, inp.documents, inp.evidence

    value = funding_coverage_value(assets)
    count = funding_coverage_count(assets)
    probate = probate_exposure(assets)
    docs = document_completeness(documents, assets)
    incapacity = incapacity_readiness(documents, trust)
    ev = evidence_completeness(assets, documents, evidence)

    return ComputeResult(
        funding_coverage_value_pct=value.score,
        funding_coverage_count_pct=count.score,
        probate_exposure_amount=probate.score,
        probate_exposure_assets=probate.contributing_ids,
        document_completeness_score=docs.score,
        incapacity_readiness_score=incapacity.score,
        evidence_completeness_pct=ev.score,
        red_flags=detect_red_flags(assets, documents, trust),
        data_gaps=detect_data_gaps(assets, documents, trust),
        formulas={
            "funding_coverage_value": value.formula,
            "funding_coverage_count": count.formula,
            "probate_exposure": probate.formula,
            "document_completeness": docs.formula,
            "incapacity_readiness": incapacity.formula,
            "evidence_completeness": ev.formula,
        },
        contributing_asset_ids={
            "funded_value": value.contributing_ids,
            "funded_count": count.contributing_ids,
            "probate_exposed": probate.contributing_ids,
            "evidence_covered_assets": ev.contributing_ids,
        },
        contributing_evidence_ids={
            "asset_evidence": ev.asset_evidence_ids,
            "document_evidence": ev.doc_evidence_ids,
        },
    )
