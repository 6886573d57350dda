# trusthealth/schemas.py
from __future__ import annotations

import re
from enum import Enum
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator


# -------------------------
# Categorical values
# -------------------------
class AssetType(str, Enum):
    REAL_ESTATE = "real_estate"
    FINANCIAL = "financial"
    INSURANCE = "insurance"
    BUSINESS = "business"
    RETIREMENT = "retirement"
    PERSONAL_PROPERTY = "personal_property"
    DIGITAL = "digital"
    OTHER = "other"


class FundingStatus(str, Enum):
    FUNDED = "funded"
    UNFUNDED = "unfunded"
    PARTIAL = "partial"
    UNKNOWN = "unknown"


class DocType(str, Enum):
    TRUST_DOCUMENT = "trust_document"
    AMENDMENT = "amendment"
    POUR_OVER_WILL = "pour_over_will"
    FINANCIAL_POA = "financial_poa"
    HEALTHCARE_DIRECTIVE = "healthcare_directive"
    CERTIFICATE_OF_TRUST = "certificate_of_trust"
    PROPERTY_DEED = "property_deed"
    BENEFICIARY_FORM = "beneficiary_form"
    ACCOUNT_TITLE_CHANGE = "account_title_change"
    OPERATING_AGREEMENT = "operating_agreement"
    INSURANCE_POLICY = "insurance_policy"
    TAX_RETURN = "tax_return"
    OTHER = "other"


class DocStatus(str, Enum):
    COMPLETE = "complete"
    MISSING = "missing"
    OUTDATED = "outdated"
    NEEDS_REVIEW = "needs_review"


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FlagType(str, Enum):
    UNFUNDED_REAL_ESTATE = "unfunded_real_estate"
    DEED_RECORDING_GAP = "deed_recording_gap"
    BENEFICIARY_MISMATCH = "beneficiary_mismatch"
    MISSING_SUCCESSOR_TRUSTEE = "missing_successor_trustee"
    MISSING_POA = "missing_poa"
    MISSING_HEALTHCARE_DIRECTIVE = "missing_healthcare_directive"
    BUSINESS_TRANSFER_UNKNOWN = "business_transfer_unknown"
    OUTDATED_DOCUMENTS = "outdated_documents"
    NO_POUR_OVER_WILL = "no_pour_over_will"


class TriggerType(str, Enum):
    RISK = "risk"
    GAP = "gap"
    THRESHOLD = "threshold"
    MISSING = "missing"
    CONFLICT = "conflict"


class TriggerOperator(str, Enum):
    EXISTS = "exists"
    LT = "lt"
    GT = "gt"
    EQ = "eq"


class RuleCategory(str, Enum):
    FUNDING = "funding"
    DOCUMENTS = "documents"
    BENEFICIARY = "beneficiary"
    INCAPACITY = "incapacity"
    BUSINESS = "business"
    EVIDENCE = "evidence"


class OwnerSuggestion(str, Enum):
    SELF = "self"
    ATTORNEY = "attorney"
    FINANCIAL_ADVISOR = "financial_advisor"
    CPA = "cpa"
    INSURANCE_AGENT = "insurance_agent"
    TITLE_COMPANY = "title_company"


class Complexity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# -------------------------
# Input records
# -------------------------
class TrustProfile(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    trust_name: str = ""
    trust_type: str = "revocable"
    jurisdiction: str = ""
    county: Optional[str] = None
    date_established: Optional[str] = None

    # display names, in the order the trust instrument lists them
    grantor_names: List[str] = Field(default_factory=list)
    trustee_names: List[str] = Field(default_factory=list)
    successor_trustee_names: List[str] = Field(default_factory=list)
    beneficiary_names: List[str] = Field(default_factory=list)

    estimated_estate_value: Optional[float] = None
    # self-reported summary; scoring reads the documents themselves
    has_pour_over_will: Optional[bool] = None
    has_power_of_attorney: Optional[bool] = None
    has_healthcare_directive: Optional[bool] = None
    status: str = "active"

    @field_validator(
        "grantor_names",
        "trustee_names",
        "successor_trustee_names",
        "beneficiary_names",
        mode="before",
    )
    @classmethod
    def _coerce_list(cls, v: Any):
        if v is None:
            return []
        # anything else is left for pydantic to reject
        return v


class Asset(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    trust_id: str = ""
    name: str = ""
    type: AssetType
    estimated_value: Optional[float] = Field(None, ge=0)
    funding_status: FundingStatus = FundingStatus.UNKNOWN
    beneficiary_designation: Optional[str] = None
    intended_beneficiary: Optional[str] = None
    institution: Optional[str] = None
    notes: Optional[str] = None


class Document(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    trust_id: str = ""
    name: str = ""
    doc_type: DocType
    status: DocStatus
    linked_asset_id: Optional[str] = None
    notes: Optional[str] = None


class EvidenceItem(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    trust_id: str = ""
    linked_asset_id: Optional[str] = None
    linked_doc_id: Optional[str] = None
    type: str = "scan"
    verified: bool = False


class ComputeInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    trust: TrustProfile
    assets: List[Asset] = Field(default_factory=list)
    documents: List[Document] = Field(default_factory=list)
    evidence: List[EvidenceItem] = Field(default_factory=list)


# -------------------------
# Field paths
# -------------------------
_PATH_RE = re.compile(r"^(?P<entity>[a-z_]+)(?:\[(?P<id>[^\]]+)\])?\.(?P<name>[a-z_]+)$")


class FieldPath(BaseModel):
    """
    Structured location of a data gap: which record kind, which record, which field.

    Renders to the dotted form used in gap messages
    (``assets[a1].estimated_value``, ``trust_profile.county``).
    """

    model_config = ConfigDict(frozen=True)

    entity: str
    entity_id: Optional[str] = None
    name: str

    def render(self) -> str:
        if self.entity_id is None:
            return f"{self.entity}.{self.name}"
        return f"{self.entity}[{self.entity_id}].{self.name}"

    def segments(self) -> tuple[str, ...]:
        if self.entity_id is None:
            return (self.entity, self.name)
        return (self.entity, self.entity_id, self.name)

    @classmethod
    def parse(cls, text: str) -> Optional["FieldPath"]:
        m = _PATH_RE.match(text or "")
        if not m:
            return None
        return cls(entity=m.group("entity"), entity_id=m.group("id"), name=m.group("name"))


# -------------------------
# Engine output
# -------------------------
class RedFlag(BaseModel):
    model_config = ConfigDict(frozen=True)

    flag_id: str
    type: FlagType
    severity: Severity
    message: str
    related_asset_ids: List[str] = Field(default_factory=list)
    related_doc_ids: List[str] = Field(default_factory=list)


class DataGap(BaseModel):
    model_config = ConfigDict(frozen=True)

    gap_id: str
    field: str
    path: FieldPath
    message: str
    resolution_hint: str

    @model_validator(mode="before")
    @classmethod
    def _path_from_field(cls, data: Any):
        if isinstance(data, dict) and data.get("path") is None:
            parsed = FieldPath.parse(data.get("field", ""))
            if parsed is None:
                raise ValueError(f"unparseable gap field: {data.get('field')!r}")
            data = {**data, "path": parsed}
        return data

    @model_validator(mode="after")
    def _field_matches_path(self):
        if self.field != self.path.render():
            raise ValueError(f"gap field {self.field!r} does not match path {self.path.render()!r}")
        return self


class ComputeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    funding_coverage_value_pct: float = Field(ge=0, le=100)
    funding_coverage_count_pct: float = Field(ge=0, le=100)
    probate_exposure_amount: float = Field(ge=0)
    probate_exposure_assets: List[str] = Field(default_factory=list)
    document_completeness_score: float = Field(ge=0, le=100)
    incapacity_readiness_score: float = Field(ge=0, le=100)
    evidence_completeness_pct: float = Field(ge=0, le=100)
    red_flags: List[RedFlag] = Field(default_factory=list)
    data_gaps: List[DataGap] = Field(default_factory=list)
    formulas: Dict[str, str] = Field(default_factory=dict)
    contributing_asset_ids: Dict[str, List[str]] = Field(default_factory=dict)
    contributing_evidence_ids: Dict[str, List[str]] = Field(default_factory=dict)


# -------------------------
# Next best actions
# -------------------------
class NBARule(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str
    name: str
    description: str = ""
    category: RuleCategory
    trigger_type: TriggerType
    trigger_field: str
    trigger_operator: TriggerOperator = TriggerOperator.EXISTS
    trigger_value: str = ""  # raw; parsed only by threshold triggers

    risk_reduction: float = Field(0, ge=0, le=100)
    equity_protected: float = Field(0, ge=0, le=100)
    time_score: float = Field(0, ge=0, le=100)
    dependency_unlock: float = Field(0, ge=0, le=100)

    steps: List[str] = Field(default_factory=list)
    evidence_required: List[str] = Field(default_factory=list)
    done_definition: str = ""
    escalation_conditions: List[str] = Field(default_factory=list)
    owner_suggestion: OwnerSuggestion = OwnerSuggestion.SELF
    estimated_complexity: Complexity = Complexity.MEDIUM
    estimated_time_minutes: Optional[int] = None
    enabled: bool = True


class RuleSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str
    rules: List[NBARule] = Field(default_factory=list)


class NBAAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str
    name: str
    description: str
    priority_score: float
    category: RuleCategory
    steps: List[str] = Field(default_factory=list)
    evidence_required: List[str] = Field(default_factory=list)
    done_definition: str = ""
    escalation_conditions: List[str] = Field(default_factory=list)
    owner_suggestion: OwnerSuggestion
    estimated_complexity: Complexity
    estimated_time_minutes: Optional[int] = None
    related_asset_ids: List[str] = Field(default_factory=list)
    related_doc_ids: List[str] = Field(default_factory=list)


class NBAOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    top3: List[NBAAction] = Field(default_factory=list)
    backlog: List[NBAAction] = Field(default_factory=list)


# -------------------------
# API bodies
# -------------------------
class ComputeResponse(BaseModel):
    computation_id: str
    trust_id: str
    version: int
    cached: bool
    computed_at: Optional[str] = None
    results: ComputeResult


class NBAEvaluateRequest(BaseModel):
    results: ComputeResult
    trust: TrustProfile
    rules: Optional[List[NBARule]] = None


class NBAResponse(BaseModel):
    top3: List[NBAAction] = Field(default_factory=list)
    backlog: List[NBAAction] = Field(default_factory=list)
    rules_version: str
    total_actions: int
    computation_id: Optional[str] = None
    computation_version: Optional[int] = None
    computed_at: Optional[str] = None
