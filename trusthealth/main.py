# trusthealth/main.py
from fastapi import FastAPI
from contextlib import asynccontextmanager
from .db import Base, engine
from . import models  # noqa: F401  registers tables on Base
from .errors import install_error_handlers
from .routes import compute, nba
from .settings import get_settings
from .engine.ruleset import get_ruleset

settings = get_settings()


def _ensure_db_ready() -> None:
    Base.metadata.create_all(bind=engine)


# Run schema init at import time so pytest cannot bypass it
_ensure_db_ready()


@asynccontextmanager
async def lifespan(app: FastAPI):
    _ensure_db_ready()
    # fail at startup, not on the first request, if the rule table is broken
    get_ruleset(settings.RULESET_VERSION)
    yield


app = FastAPI(title="Trust Health API", version=settings.APP_VERSION, lifespan=lifespan)
install_error_handlers(app)

app.include_router(compute.router)
app.include_router(nba.router)


@app.get("/")
def health():
    return {
        "status": "ok",
        "service": "trusthealth",
        "env": settings.ENV,
        "engine_version": settings.ENGINE_VERSION,
        "ruleset_version": settings.RULESET_VERSION,
    }
