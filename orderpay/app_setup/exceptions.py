"""
Gestionnaires d’exceptions utilisés par la factory.
- HTTPException -> {"error": detail} avec le code d’origine
- ConfigurationError -> 500 {"error": message} (clé Stripe, secret webhook, Supabase absents)
"""
import logging

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException
from fastapi.responses import JSONResponse

from orderpay.common.errors import ConfigurationError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(ConfigurationError)
    async def configuration_error(request: Request, exc: ConfigurationError):
        logger.error("Configuration manquante sur %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})
