# trusthealth/demo_data.py
"""
Rivera Family Living Trust: a fixed, realistic dataset used by the demo
script and by the regression tests.
"""
from .schemas import Asset, ComputeInput, Document, EvidenceItem, TrustProfile

DEMO_TRUST_ID = "trust-demo-001"

DEMO_TRUST = {
    "id": DEMO_TRUST_ID,
    "trust_name": "Rivera Family Living Trust",
    "trust_type": "revocable",
    "jurisdiction": "CA",
    "county": "Los Angeles",
    "date_established": "2021-03-15",
    "grantor_names": ["Jordan Rivera", "Casey Rivera"],
    "trustee_names": ["Jordan Rivera", "Casey Rivera"],
    "successor_trustee_names": ["Alex Rivera", "Pacific Trust Company"],
    "beneficiary_names": ["Alex Rivera", "Morgan Rivera", "Riverside Community Foundation"],
    "estimated_estate_value": 3190000,
    "has_pour_over_will": True,
    "has_power_of_attorney": False,
    "has_healthcare_directive": True,
    "status": "active",
}


def _asset(id, name, type, value, funding, designation=None, intended=None, institution=None):
    return {
        "id": id,
        "trust_id": DEMO_TRUST_ID,
        "name": name,
        "type": type,
        "estimated_value": value,
        "funding_status": funding,
        "beneficiary_designation": designation,
        "intended_beneficiary": intended,
        "institution": institution,
    }


DEMO_ASSETS = [
    _asset("asset-001", "Primary Residence - 742 Elm Street, Pasadena, CA 91101",
           "real_estate", 1250000, "funded"),
    _asset("asset-002", "Rental Property - 1580 Ocean Blvd, Unit 4B, Long Beach, CA 90802",
           "real_estate", 485000, "unfunded"),
    _asset("asset-003", "Joint Checking Account - First Republic Bank",
           "financial", 42000, "funded", institution="First Republic Bank"),
    _asset("asset-004", "Brokerage Account - Charles Schwab",
           "financial", 315000, "funded", designation="trust", institution="Charles Schwab"),
    _asset("asset-005", "Term Life Insurance - Northwestern Mutual",
           "insurance", 500000, "funded",
           designation="Casey Rivera (individual)", intended="Rivera Family Living Trust",
           institution="Northwestern Mutual"),
    _asset("asset-006", "Rivera Design Studio LLC - 60% Membership Interest",
           "business", 280000, "unknown", institution="California Secretary of State"),
    _asset("asset-007", "2022 Tesla Model Y - VIN ending 9847",
           "personal_property", 38000, "unfunded", institution="California DMV"),
    _asset("asset-008", "Traditional IRA - Fidelity Investments",
           "retirement", 195000, "funded",
           designation="Casey Rivera (primary); Alex Rivera (contingent); Morgan Rivera (contingent)",
           institution="Fidelity Investments"),
    _asset("asset-009", "Savings Account - Ally Bank",
           "financial", 85000, "funded", designation="trust", institution="Ally Bank"),
]


def _doc(id, name, doc_type, status, linked_asset_id=None):
    return {
        "id": id,
        "trust_id": DEMO_TRUST_ID,
        "name": name,
        "doc_type": doc_type,
        "status": status,
        "linked_asset_id": linked_asset_id,
    }


DEMO_DOCUMENTS = [
    _doc("doc-001", "Rivera Family Living Trust Agreement", "trust_document", "complete"),
    _doc("doc-002", "Pour-Over Will - Jordan Rivera", "pour_over_will", "complete"),
    _doc("doc-003", "Durable Financial Power of Attorney - Jordan Rivera", "financial_poa", "missing"),
    _doc("doc-004", "Advance Healthcare Directive - Jordan Rivera", "healthcare_directive", "complete"),
    _doc("doc-005", "Advance Healthcare Directive - Casey Rivera", "healthcare_directive", "complete"),
    _doc("doc-006", "Certificate of Trust", "certificate_of_trust", "complete"),
    _doc("doc-007", "Grant Deed - 742 Elm Street, Pasadena (Primary Residence)",
         "property_deed", "complete", "asset-001"),
    _doc("doc-008", "Grant Deed - 1580 Ocean Blvd, Unit 4B, Long Beach (Rental Property)",
         "property_deed", "missing", "asset-002"),
]

DEMO_EVIDENCE = [
    {"id": "ev-001", "trust_id": DEMO_TRUST_ID, "linked_doc_id": "doc-001", "type": "scan", "verified": True},
    {"id": "ev-002", "trust_id": DEMO_TRUST_ID, "linked_asset_id": "asset-001", "type": "recording", "verified": True},
    {"id": "ev-003", "trust_id": DEMO_TRUST_ID, "linked_asset_id": "asset-003", "type": "letter", "verified": True},
    {"id": "ev-004", "trust_id": DEMO_TRUST_ID, "linked_asset_id": "asset-004", "type": "form", "verified": True},
    {"id": "ev-005", "trust_id": DEMO_TRUST_ID, "linked_asset_id": "asset-006", "type": "form", "verified": False},
    {"id": "ev-006", "trust_id": DEMO_TRUST_ID, "linked_doc_id": "doc-007", "type": "scan", "verified": True},
]


def demo_payload() -> dict:
    """Request body for ``POST /trusts/{id}/compute``."""
    return {
        "trust": dict(DEMO_TRUST),
        "assets": [dict(a) for a in DEMO_ASSETS],
        "documents": [dict(d) for d in DEMO_DOCUMENTS],
        "evidence": [dict(e) for e in DEMO_EVIDENCE],
    }


def demo_input() -> ComputeInput:
    return ComputeInput(
        trust=TrustProfile(**DEMO_TRUST),
        assets=[Asset(**a) for a in DEMO_ASSETS],
        documents=[Document(**d) for d in DEMO_DOCUMENTS],
        evidence=[EvidenceItem(**e) for e in DEMO_EVIDENCE],
    )
