# trusthealth/engine/docs.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..schemas import Asset, AssetType, Document, DocStatus, DocType

# Base weights for the documents every trust should hold.
BASE_DOC_WEIGHTS: dict[DocType, float] = {
    DocType.TRUST_DOCUMENT: 3,
    DocType.POUR_OVER_WILL: 2,
    DocType.FINANCIAL_POA: 2.5,
    DocType.HEALTHCARE_DIRECTIVE: 2,
    DocType.CERTIFICATE_OF_TRUST: 1.5,
}

PROPERTY_DEED_WEIGHT = 2


@dataclass(frozen=True)
class DocRequirement:
    doc_type: DocType
    weight: float
    label: str
    asset_id: Optional[str] = None  # set for per-property deeds

    def is_satisfied_by(self, doc: Document) -> bool:
        if doc.doc_type != self.doc_type or doc.status != DocStatus.COMPLETE:
            return False
        if self.asset_id is not None:
            return doc.linked_asset_id == self.asset_id
        return True


def build_document_requirements(assets: Iterable[Asset]) -> List[DocRequirement]:
    """
    Weighted checklist of documents the trust should hold.

    1. Always the base estate-plan documents.
    2. One recorded deed per real-estate asset, tied to that asset.
    """
    reqs = [
        DocRequirement(doc_type=t, weight=w, label=t.value)
        for t, w in BASE_DOC_WEIGHTS.items()
    ]

    for a in assets:
        if a.type == AssetType.REAL_ESTATE:
            reqs.append(
                DocRequirement(
                    doc_type=DocType.PROPERTY_DEED,
                    weight=PROPERTY_DEED_WEIGHT,
                    label=f"property_deed[{a.name or a.id}]",
                    asset_id=a.id,
                )
            )
    return reqs


def has_complete(documents: Iterable[Document], doc_type: DocType) -> bool:
    return any(d.doc_type == doc_type and d.status == DocStatus.COMPLETE for d in documents)


def has_recorded_deed(documents: Iterable[Document], asset_id: str) -> bool:
    return any(
        d.doc_type == DocType.PROPERTY_DEED
        and d.status == DocStatus.COMPLETE
        and d.linked_asset_id == asset_id
        for d in documents
    )
