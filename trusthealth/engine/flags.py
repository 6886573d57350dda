# trusthealth/engine/flags.py
"""
Red-flag and data-gap detection.

Both detectors are pure: ids are assigned from a counter scoped to one call,
so the same records always produce the same ids in the same order.
"""
from __future__ import annotations

import re
from typing import Callable, List, Sequence

from ..schemas import (
    Asset,
    AssetType,
    DataGap,
    Document,
    DocStatus,
    DocType,
    FieldPath,
    FlagType,
    FundingStatus,
    RedFlag,
    Severity,
    TrustProfile,
)
from .docs import has_complete, has_recorded_deed
from .scoring import fmt

CRITICAL_PROPERTY_VALUE = 100_000


def _counter(prefix: str) -> Callable[[], str]:
    n = 0

    def next_id() -> str:
        nonlocal n
        n += 1
        return f"{prefix}-{n:04d}"

    return next_id


def normalize_name(s: str) -> str:
    return re.sub(r"\s+", " ", s.strip().lower())


def _label(a: Asset | Document) -> str:
    return a.name or a.id


def detect_red_flags(
    assets: Sequence[Asset],
    documents: Sequence[Document],
    trust: TrustProfile,
) -> List[RedFlag]:
    flags: List[RedFlag] = []
    next_id = _counter("rf")

    def add(ftype: FlagType, severity: Severity, message: str, assets_=(), docs_=()):
        flags.append(
            RedFlag(
                flag_id=next_id(),
                type=ftype,
                severity=severity,
                message=message,
                related_asset_ids=list(assets_),
                related_doc_ids=list(docs_),
            )
        )

    real_estate = [a for a in assets if a.type == AssetType.REAL_ESTATE]

    # 1. real estate not titled in the trust
    for a in real_estate:
        if a.funding_status == FundingStatus.FUNDED:
            continue
        value = a.estimated_value or 0
        severity = Severity.CRITICAL if value >= CRITICAL_PROPERTY_VALUE else Severity.HIGH
        add(
            FlagType.UNFUNDED_REAL_ESTATE,
            severity,
            f'Real estate "{_label(a)}" (est. ${fmt(value)}) is not funded into the trust. '
            "This property will go through probate.",
            [a.id],
        )

    # 2. no recorded deed tied to the property
    for a in real_estate:
        if not has_recorded_deed(documents, a.id):
            add(
                FlagType.DEED_RECORDING_GAP,
                Severity.HIGH,
                f'Real estate "{_label(a)}" has no complete recorded property deed on file.',
                [a.id],
            )

    # 3. designated vs intended beneficiary
    for a in assets:
        if not (a.beneficiary_designation and a.intended_beneficiary):
            continue
        if normalize_name(a.beneficiary_designation) != normalize_name(a.intended_beneficiary):
            add(
                FlagType.BENEFICIARY_MISMATCH,
                Severity.HIGH,
                f'Asset "{_label(a)}" has a beneficiary mismatch: designated '
                f'"{a.beneficiary_designation}" but intended "{a.intended_beneficiary}".',
                [a.id],
            )

    # 4
    if not trust.successor_trustee_names:
        add(
            FlagType.MISSING_SUCCESSOR_TRUSTEE,
            Severity.CRITICAL,
            "No successor trustee is named. If the current trustee becomes incapacitated or dies, "
            "the trust may require court intervention.",
        )

    # 5
    if not has_complete(documents, DocType.FINANCIAL_POA):
        add(
            FlagType.MISSING_POA,
            Severity.CRITICAL,
            "No complete Financial Power of Attorney on file. Without one, a court-appointed "
            "conservator may be needed to manage finances during incapacity.",
        )

    # 6
    if not has_complete(documents, DocType.HEALTHCARE_DIRECTIVE):
        add(
            FlagType.MISSING_HEALTHCARE_DIRECTIVE,
            Severity.MEDIUM,
            "No complete Healthcare Directive on file. Medical decisions may default to statutory "
            "priority if you become incapacitated.",
        )

    # 7. business interest with unknown assignment
    for a in assets:
        if a.type == AssetType.BUSINESS and a.funding_status == FundingStatus.UNKNOWN:
            add(
                FlagType.BUSINESS_TRANSFER_UNKNOWN,
                Severity.HIGH,
                f'Business interest "{_label(a)}" has unknown funding status. The membership/ownership '
                "interest may not be assigned to the trust.",
                [a.id],
            )

    # 8. one flag per outdated document
    for d in documents:
        if d.status == DocStatus.OUTDATED:
            add(
                FlagType.OUTDATED_DOCUMENTS,
                Severity.MEDIUM,
                f'Document "{_label(d)}" is outdated and may no longer reflect current trust terms.',
                docs_=[d.id],
            )

    # 9
    if not has_complete(documents, DocType.POUR_OVER_WILL):
        add(
            FlagType.NO_POUR_OVER_WILL,
            Severity.MEDIUM,
            "No complete Pour-Over Will on file. Any assets not funded into the trust at death may "
            "pass through intestate succession instead of being caught by a pour-over provision.",
        )

    return flags


def detect_data_gaps(
    assets: Sequence[Asset],
    documents: Sequence[Document],
    trust: TrustProfile,
) -> List[DataGap]:
    gaps: List[DataGap] = []
    next_id = _counter("dg")

    def add(path: FieldPath, message: str, hint: str):
        gaps.append(
            DataGap(
                gap_id=next_id(),
                field=path.render(),
                path=path,
                message=message,
                resolution_hint=hint,
            )
        )

    # null and 0 both mean "no known value"
    for a in assets:
        if not a.estimated_value:
            add(
                FieldPath(entity="assets", entity_id=a.id, name="estimated_value"),
                f'Asset "{_label(a)}" is missing an estimated value.',
                "Enter the current estimated market value or account balance for this asset.",
            )

    for a in assets:
        if a.funding_status == FundingStatus.UNKNOWN:
            add(
                FieldPath(entity="assets", entity_id=a.id, name="funding_status"),
                f'Asset "{_label(a)}" has unknown funding status.',
                "Check whether this asset has been retitled to the trust or has the trust as "
                "beneficiary. Update funding status to funded, unfunded, or partial.",
            )

    if not trust.county:
        add(
            FieldPath(entity="trust_profile", name="county"),
            "Trust profile is missing the county. County is needed to determine local recording "
            "requirements and probate thresholds.",
            "Enter the county where the trust was established or where the primary residence is located.",
        )

    for a in assets:
        if a.type in (AssetType.INSURANCE, AssetType.RETIREMENT) and not a.beneficiary_designation:
            kind = "Insurance" if a.type == AssetType.INSURANCE else "Retirement"
            add(
                FieldPath(entity="assets", entity_id=a.id, name="beneficiary_designation"),
                f'{kind} account "{_label(a)}" is missing beneficiary designation information.',
                "Contact the institution to obtain the current beneficiary designation form and "
                "enter who is currently named.",
            )

    for d in documents:
        if d.status == DocStatus.NEEDS_REVIEW:
            add(
                FieldPath(entity="documents", entity_id=d.id, name="status"),
                f'Document "{_label(d)}" needs review. Its current status may be inaccurate or it '
                "may need attorney attention.",
                "Review this document with your estate planning attorney and update its status to "
                "complete or outdated.",
            )

    return gaps
