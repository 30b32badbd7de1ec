"""
Registre central des routers.
- Payments: checkout, payment link, webhook Stripe, synchronisation, statut de lien
- Notifications: notify-manychat
- Customers: manychat-client
- Health
"""
from fastapi import FastAPI
from orderpay.payments import views as payments_views
from orderpay.notifications import views as notifications_views
from orderpay.customers import views as customers_views
from orderpay.health.router import router as health_router


def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l’application.
    - Tous sous le préfixe /api.
    """
    app.include_router(payments_views.router)
    app.include_router(notifications_views.router)
    app.include_router(customers_views.router)
    app.include_router(health_router)
