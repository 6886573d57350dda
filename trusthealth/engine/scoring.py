# trusthealth/engine/scoring.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Sequence

from ..schemas import Asset, AssetType, Document, DocStatus, DocType, EvidenceItem, FundingStatus, TrustProfile
from .docs import build_document_requirements, has_complete

# Retirement accounts pass by beneficiary designation, not by title.
EXCLUDED_FROM_VALUE_FUNDING = frozenset({AssetType.RETIREMENT})
EXCLUDED_FROM_COUNT_FUNDING = frozenset({AssetType.RETIREMENT, AssetType.INSURANCE})
EXCLUDED_FROM_PROBATE = frozenset({AssetType.RETIREMENT, AssetType.INSURANCE})

INCAPACITY_COMPONENTS = (
    ("healthcare_directive", 30),
    ("financial_poa", 30),
    ("successor_trustee", 20),
    ("certificate_of_trust", 20),
)


@dataclass
class MetricResult:
    score: float
    formula: str
    contributing_ids: List[str] = field(default_factory=list)


@dataclass
class EvidenceResult(MetricResult):
    asset_evidence_ids: List[str] = field(default_factory=list)
    doc_evidence_ids: List[str] = field(default_factory=list)


def round2(n: float) -> float:
    """
    Round half-up to two decimals on the decimal form of ``n``.
    Every percentage and priority passes through here.
    """
    return float(Decimal(str(n)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def fmt(n: float) -> str:
    """Thousands separators; cents only when there are cents."""
    if float(n).is_integer():
        return f"{int(n):,}"
    return f"{n:,.2f}"


def num(n: float) -> str:
    return str(int(n)) if float(n).is_integer() else str(n)


def _value(a: Asset) -> float:
    return a.estimated_value or 0


def funding_coverage_value(assets: Sequence[Asset]) -> MetricResult:
    eligible = [a for a in assets if a.type not in EXCLUDED_FROM_VALUE_FUNDING]
    if not eligible:
        return MetricResult(0.0, "No eligible assets (retirement accounts excluded). 0 / 0 = 0%")

    total = sum(_value(a) for a in eligible)
    if total == 0:
        return MetricResult(0.0, "Total eligible asset value is $0. 0 / 0 = 0%")

    funded = [a for a in eligible if a.funding_status == FundingStatus.FUNDED]
    funded_value = sum(_value(a) for a in funded)
    pct = round2(funded_value / total * 100)

    formula = f"funded_value / total_value = ${fmt(funded_value)} / ${fmt(total)} = {num(pct)}%"
    return MetricResult(pct, formula, [a.id for a in funded])


def funding_coverage_count(assets: Sequence[Asset]) -> MetricResult:
    eligible = [a for a in assets if a.type not in EXCLUDED_FROM_COUNT_FUNDING]
    if not eligible:
        return MetricResult(0.0, "No fundable assets (retirement and insurance excluded). 0 / 0 = 0%")

    funded = [a for a in eligible if a.funding_status == FundingStatus.FUNDED]
    pct = round2(len(funded) / len(eligible) * 100)

    formula = f"funded_count / total_fundable = {len(funded)} / {len(eligible)} = {num(pct)}%"
    return MetricResult(pct, formula, [a.id for a in funded])


def probate_exposure(assets: Sequence[Asset]) -> MetricResult:
    """
    Dollar value that would pass through probate: every asset that is not
    funded (unfunded, partial, unknown), minus beneficiary-designated kinds.
    ``score`` is the dollar amount here, not a percentage.
    """
    exposed = [
        a for a in assets
        if a.type not in EXCLUDED_FROM_PROBATE and a.funding_status != FundingStatus.FUNDED
    ]
    if not exposed:
        return MetricResult(0.0, "No unfunded assets exposed to probate. $0")

    total = 0.0
    parts = []
    for a in exposed:
        val = _value(a)
        total += val
        parts.append(f"{a.name or a.id} (${fmt(val)})")

    formula = f"sum of unfunded asset values: {' + '.join(parts)} = ${fmt(total)}"
    return MetricResult(total, formula, [a.id for a in exposed])


def document_completeness(documents: Sequence[Document], assets: Sequence[Asset]) -> MetricResult:
    reqs = build_document_requirements(assets)
    if not reqs:
        # absence of requirements is not completeness
        return MetricResult(0.0, "No required documents defined. 0%")

    total_weight = sum(r.weight for r in reqs)
    earned = 0.0
    parts = []
    for req in reqs:
        if any(req.is_satisfied_by(d) for d in documents):
            earned += req.weight
            parts.append(f"{req.label}: {num(req.weight)}/{num(req.weight)} (complete)")
        else:
            parts.append(f"{req.label}: 0/{num(req.weight)} (missing/incomplete)")

    pct = round2(earned / total_weight * 100)
    formula = f"{', '.join(parts)} => {num(earned)}/{num(total_weight)} = {num(pct)}%"
    return MetricResult(pct, formula)


def incapacity_readiness(documents: Sequence[Document], trust: TrustProfile) -> MetricResult:
    present = {
        "healthcare_directive": has_complete(documents, DocType.HEALTHCARE_DIRECTIVE),
        "financial_poa": has_complete(documents, DocType.FINANCIAL_POA),
        "successor_trustee": bool(trust.successor_trustee_names),
        "certificate_of_trust": has_complete(documents, DocType.CERTIFICATE_OF_TRUST),
    }

    earned = 0
    parts = []
    for name, weight in INCAPACITY_COMPONENTS:
        got = weight if present[name] else 0
        earned += got
        parts.append(f"{name}: {got}/{weight}")

    formula = f"{' + '.join(parts)} = {earned}/100 = {earned}%"
    return MetricResult(float(earned), formula)


def evidence_completeness(
    assets: Sequence[Asset],
    documents: Sequence[Document],
    evidence: Sequence[EvidenceItem],
) -> EvidenceResult:
    complete_docs = [d for d in documents if d.status == DocStatus.COMPLETE]
    total = len(assets) + len(complete_docs)
    if total == 0:
        return EvidenceResult(0.0, "No assets or complete documents to verify. 0 / 0 = 0%")

    asset_ids = {a.id for a in assets}
    doc_ids = {d.id for d in complete_docs}

    # only evidence pointing at a record we were given counts
    asset_evidence = [e for e in evidence if e.linked_asset_id in asset_ids]
    doc_evidence = [e for e in evidence if e.linked_doc_id in doc_ids]
    covered_asset_ids = {e.linked_asset_id for e in asset_evidence}
    covered_doc_ids = {e.linked_doc_id for e in doc_evidence}

    covered_assets = [a for a in assets if a.id in covered_asset_ids]
    covered_docs = [d for d in complete_docs if d.id in covered_doc_ids]
    covered = len(covered_assets) + len(covered_docs)

    pct = round2(covered / total * 100)
    formula = (
        "items_with_evidence / total_items = "
        f"({len(covered_assets)} assets + {len(covered_docs)} docs) / "
        f"({len(assets)} assets + {len(complete_docs)} docs) = "
        f"{covered} / {total} = {num(pct)}%"
    )
    return EvidenceResult(
        pct,
        formula,
        [a.id for a in covered_assets],
        asset_evidence_ids=list(dict.fromkeys(e.id for e in asset_evidence)),
        doc_evidence_ids=list(dict.fromkeys(e.id for e in doc_evidence)),
    )
