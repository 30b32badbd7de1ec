"""
Factory d’application recommandée pour les entrypoints (ex: orderpay.asgi).
Ordonne les étapes d’initialisation de manière lisible et testable.
"""
from typing import Optional

from fastapi import FastAPI

from orderpay.config import Settings, load_settings
from orderpay.infra.clients import VendorClients
from .lifespan import lifespan
from .middlewares import register_cors_middleware
from .exceptions import register_exception_handlers
from .routers import register_routers


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Construit l’app FastAPI avec le lifespan et enregistre:
      - la configuration (Settings) et le conteneur de clients fournisseurs sur app.state
      - le middleware CORS/en-têtes
      - les gestionnaires d’exceptions
      - tous les routers (payments, notifications, customers, health)
    Retour:
      FastAPI prêt à être utilisé par le serveur ASGI.
    """
    settings = settings or load_settings()
    app = FastAPI(title="Fast Savory's Order Payments", lifespan=lifespan)
    app.state.settings = settings
    app.state.clients = VendorClients(settings)
    register_cors_middleware(app, settings.cors_origins)
    register_exception_handlers(app)
    register_routers(app)
    return app
