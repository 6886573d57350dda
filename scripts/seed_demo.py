# scripts/seed_demo.py
import os, sys
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from dotenv import load_dotenv
load_dotenv()

from trusthealth.db import Base, engine, SessionLocal
from trusthealth import models
from trusthealth.demo_data import DEMO_TRUST_ID, demo_input
from trusthealth.engine import compute_trust_health
from trusthealth.routes.compute import hash_input
from trusthealth.settings import get_settings


def seed_demo():
    Base.metadata.create_all(bind=engine)
    settings = get_settings()

    db = SessionLocal()
    try:
        if db.query(models.Computation).filter(models.Computation.trust_id == DEMO_TRUST_ID).first():
            print("Demo trust already seeded.")
            return

        inp = demo_input()
        results = compute_trust_health(inp)
        db.add(
            models.Computation(
                trust_id=DEMO_TRUST_ID,
                version=1,
                input_hash=hash_input(inp),
                trigger="manual",
                trust=inp.trust.model_dump(mode="json"),
                results=results.model_dump(mode="json"),
                app_version=settings.APP_VERSION,
                engine_version=settings.ENGINE_VERSION,
                ruleset_version=settings.RULESET_VERSION,
                schema_version=settings.SCHEMA_VERSION,
            )
        )
        db.commit()
        print(f"Seeded demo trust {DEMO_TRUST_ID}.")
    finally:
        db.close()


if __name__ == "__main__":
    seed_demo()
