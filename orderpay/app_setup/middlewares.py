"""
Middleware transverse de l’application.
- register_cors_middleware: CORS permissif sur toutes les routes, y compris le webhook
  (en-tête stripe-signature autorisé), réponse directe aux requêtes OPTIONS,
  et quelques en-têtes de sécurité.
Notes:
- Le corps des requêtes n’est jamais lu ici: le webhook Stripe doit recevoir les octets bruts.
"""
from typing import List

from fastapi import FastAPI, Request
from fastapi.responses import Response

ALLOW_METHODS = "GET,POST,OPTIONS"
ALLOW_HEADERS = "Content-Type, stripe-signature"


def _cors_headers(request: Request, origins: List[str]) -> dict:
    origin = request.headers.get("origin")
    if "*" in origins or not origin:
        allow_origin = "*"
    elif origin in origins:
        allow_origin = origin
    else:
        allow_origin = origins[0]
    return {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
    }


def register_cors_middleware(app: FastAPI, origins: List[str]) -> None:
    """
    - OPTIONS: 200 sans corps, avant tout routage (pré-vol navigateur ou non)
    - Autres méthodes: en-têtes CORS ajoutés à la réponse
    - En-têtes: X-Content-Type-Options, Referrer-Policy
    """
    @app.middleware("http")
    async def cors_and_security_headers(request: Request, call_next):
        headers = _cors_headers(request, origins)
        if request.method.upper() == "OPTIONS":
            return Response(status_code=200, headers=headers)

        response = await call_next(request)
        for key, value in headers.items():
            response.headers[key] = value
        if "X-Content-Type-Options" not in response.headers:
            response.headers["X-Content-Type-Options"] = "nosniff"
        if "Referrer-Policy" not in response.headers:
            response.headers["Referrer-Policy"] = "no-referrer"
        return response
