from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from orderpay.infra.clients import VendorClients, get_clients
from orderpay.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/api", tags=["Health"])

ROUTES = {
    "health": {"method": "GET", "path": "/api/health"},
    "webhookStripe": {"method": "POST", "path": "/api/webhook-stripe"},
    "syncCheckoutSession": {"method": "POST", "path": "/api/sync-checkout-session"},
    "createCheckoutSession": {"method": "POST", "path": "/api/create-checkout-session"},
    "createPaymentLink": {"method": "POST", "path": "/api/create-payment-link"},
    "paymentLinkStatus": {"method": "GET", "path": "/api/payment-link/{id}"},
    "notifyManychat": {"method": "POST", "path": "/api/notify-manychat"},
    "manychatClient": {"method": "GET,POST", "path": "/api/manychat-client"},
}


@router.get("/health")
def health(request: Request, clients: VendorClients = Depends(get_clients)):
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": clients.settings.environment,
        "routes": ROUTES,
        "rate_limit": rate_limit_health_info(request),
    }
