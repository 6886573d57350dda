from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarHTTP
import logging

from .logging_config import log_failure

logger = logging.getLogger("trusthealth")


class RulesetNotFound(RuntimeError):
    pass


class ComputationNotFound(RuntimeError):
    pass


def install_error_handlers(app):
    @app.exception_handler(StarHTTP)
    async def http_exc(_: Request, exc: StarHTTP):
        return JSONResponse({"error": f"HTTP_{exc.status_code}", "detail": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(ComputationNotFound)
    async def no_computation(_: Request, exc: ComputationNotFound):
        return JSONResponse({"error": "COMPUTATION_NOT_FOUND", "detail": str(exc)}, status_code=404)

    @app.exception_handler(RulesetNotFound)
    async def no_ruleset(_: Request, exc: RulesetNotFound):
        log_failure("RULESET_NOT_FOUND", {"detail": str(exc)})
        return JSONResponse({"error": "RULESET_NOT_FOUND", "detail": str(exc)}, status_code=500)

    @app.exception_handler(Exception)
    async def unhandled(_: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse({"error": "INTERNAL_ERROR", "detail": "Unexpected error"}, status_code=500)
