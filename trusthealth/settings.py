import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    APP_VERSION: str = "1.0.0"
    ENGINE_VERSION: str = "scoring-v1"
    SCHEMA_VERSION: str = "v1-compute-results"

    # --- CONFIG ---
    ENV = os.getenv("TRUSTHEALTH_ENV", "production")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./trusthealth.db")
    RULESET_VERSION = os.getenv("RULESET_VERSION", "v1")

    # --- COMPUTE ---
    TRIGGER_SOURCES = ("manual", "asset_change", "document_change", "schedule")
    HISTORY_LIMIT = 50

@lru_cache
def get_settings():
    return Settings()
