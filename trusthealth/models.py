# trusthealth/models.py
from __future__ import annotations

import uuid
import json
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    String,
    DateTime,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.types import TypeDecorator, TEXT

from .db import Base


# -------------------------
# SQLite-safe JSON object
# -------------------------
class JsonDict(TypeDecorator):
    impl = TEXT
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return "{}"
        if isinstance(value, dict):
            return json.dumps(value, ensure_ascii=False, sort_keys=True)
        if isinstance(value, str):
            s = value.strip()
            return s if s else "{}"
        return "{}"

    def process_result_value(self, value, dialect):
        if not value:
            return {}
        try:
            parsed = json.loads(value)
            return parsed if isinstance(parsed, dict) else {}
        except ValueError:
            return {}


def _uuid() -> str:
    return str(uuid.uuid4())


class Computation(Base):
    """
    One stored scoring run. ``version`` counts up per trust; the engine
    output is kept whole in ``results`` so every field survives the trip.
    """

    __tablename__ = "computations"
    __table_args__ = (UniqueConstraint("trust_id", "version", name="uq_computation_trust_version"),)

    id = Column(String, primary_key=True, default=_uuid)
    trust_id = Column(String, nullable=False, index=True)
    version = Column(Integer, nullable=False)

    # sha256 of the canonical input; same hash means same result
    input_hash = Column(String, nullable=False, index=True)
    trigger = Column(String, nullable=False, default="manual")

    trust = Column(JsonDict, default=dict, nullable=False)
    results = Column(JsonDict, default=dict, nullable=False)

    # Provenance
    app_version = Column(String, nullable=True)
    engine_version = Column(String, nullable=True)
    ruleset_version = Column(String, nullable=True)
    schema_version = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
