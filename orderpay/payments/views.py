import logging
from typing import Any, Dict

from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import JSONResponse

from orderpay.common.errors import ConfigurationError, safe_error_message
from orderpay.infra.clients import VendorClients, get_clients
from orderpay.utils.rate_limit import optional_rate_limit
from orderpay.payments import stripe_client
from orderpay.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Payments API"])


async def _json_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except Exception:
        return {}
    return body if isinstance(body, dict) else {}


# module orderpay.payments.views
@router.get("/create-checkout-session", include_in_schema=False)
async def create_checkout_session_get():
    return JSONResponse({"error": "Use POST /api/create-checkout-session (JSON body)."}, status_code=405)


@router.post("/create-checkout-session", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_checkout_session(request: Request, clients: VendorClients = Depends(get_clients)):
    """
    Crée une session Checkout Stripe pour une commande.
    - Entrée JSON: {orderId, amount, customerEmail?, customerName?}
    - amount en reais, converti en centavos pour Stripe
    - Réponse: {success, url, sessionId}
    - Erreurs: 500 si STRIPE_SECRET_KEY absente, 400 si payload invalide ou refus Stripe
    """
    body = await _json_body(request)
    try:
        return payments_service.start_checkout(clients, body)
    except (HTTPException, ConfigurationError):
        raise
    except Exception as e:
        logger.exception("Stripe Checkout error")
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/create-payment-link", include_in_schema=False)
async def create_payment_link_get():
    return JSONResponse({"error": "Use POST /api/create-payment-link (JSON body)."}, status_code=405)


@router.post("/create-payment-link", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_payment_link(request: Request, clients: VendorClients = Depends(get_clients)):
    """
    Crée un Payment Link Stripe; redirection post-paiement vers WhatsApp.
    - Entrée JSON: {orderId, amount, customerEmail?, customerName?}
    - Réponse: {success, url, paymentLinkId}
    """
    body = await _json_body(request)
    try:
        return payments_service.start_payment_link(clients, body)
    except (HTTPException, ConfigurationError):
        raise
    except Exception as e:
        logger.exception("Stripe payment link error")
        detail = safe_error_message(e, "Erro ao gerar link de pagamento", clients.settings.is_development)
        raise HTTPException(status_code=400, detail=detail)


@router.post("/webhook-stripe", include_in_schema=False)
async def webhook_stripe(request: Request, clients: VendorClients = Depends(get_clients)):
    """
    Webhook Stripe: met à jour le statut de paiement de la commande.
    - Corps brut lu tel quel: la signature porte sur les octets exacts
    - Signature: chaque secret de STRIPE_WEBHOOK_SECRET est essayé (rotation)
    - 400 si aucune signature valide (Stripe relivrera selon son propre calendrier)
    - 500 si le traitement échoue (base indisponible, commande absente)
    - Réponse: {"received": true}, y compris pour les événements ignorés
    """
    clients.require_stripe()
    secrets = clients.require_webhook_secrets()
    db = clients.require_supabase()

    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")
    try:
        event = stripe_client.construct_event(payload, sig_header, secrets)
    except Exception as e:
        logger.error("Webhook signature verification failed: %s", e)
        raise HTTPException(status_code=400, detail=f"Webhook Error: {e}")

    try:
        payments_service.handle_event(db, event)
    except Exception:
        logger.exception("Webhook handler error")
        raise HTTPException(status_code=500, detail="Webhook handler failed")
    return {"received": True}


@router.post("/sync-checkout-session")
async def sync_checkout_session(request: Request, clients: VendorClients = Depends(get_clients)):
    """
    Alternative sans webhook: relit la session Stripe et synchronise le statut de la commande.
    - Entrée JSON: {sessionId}
    - Réponse: {success, orderId, payment_status, amount_paid}
    - Erreurs: 400 si sessionId manquant ou échec, 404 si la session ne porte pas d'order_id
    """
    clients.require_stripe()
    clients.require_supabase()
    body = await _json_body(request)
    session_id = body.get("sessionId")
    if not session_id:
        raise HTTPException(status_code=400, detail="sessionId é obrigatório")
    try:
        return payments_service.sync_checkout_session(clients, str(session_id))
    except (HTTPException, ConfigurationError):
        raise
    except Exception as e:
        logger.exception("Sync Checkout error")
        detail = safe_error_message(e, "Falha ao sincronizar checkout", clients.settings.is_development)
        raise HTTPException(status_code=400, detail=detail)


@router.get("/payment-link/{link_id}")
async def payment_link_status(link_id: str, clients: VendorClients = Depends(get_clients)):
    """Retourne l'objet Payment Link tel que renvoyé par Stripe."""
    gateway = clients.require_stripe()
    if not link_id:
        raise HTTPException(status_code=400, detail="Payment link ID is required")
    try:
        return JSONResponse(gateway.retrieve_payment_link(link_id))
    except Exception as e:
        logger.exception("Stripe payment link retrieve error")
        raise HTTPException(status_code=400, detail=str(e))
