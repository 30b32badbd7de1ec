"""Endpoint de notification ManyChat, appelé par la vitrine après l'enregistrement d'une commande.
- Répond TOUJOURS en HTTP 200: succès/échec dans le corps {success, error?}
- ManyChat non configuré: sortie propre avec success=false
"""
import logging

from fastapi import APIRouter, Depends, Request

from orderpay.common.result import fail
from orderpay.infra.clients import VendorClients, get_clients
from orderpay.notifications.manychat import notify_new_order

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Notifications API"])


@router.post("/notify-manychat")
async def notify_manychat(request: Request, clients: VendorClients = Depends(get_clients)):
    """
    Corps: {order: {...}}. Valide la présence d'un identifiant (id ou order_code)
    puis délègue à notify_new_order.
    """
    if not clients.manychat_configured:
        logger.info("[notify-manychat] ManyChat not configured, skipping notification")
        return fail("ManyChat not configured").to_response()

    try:
        try:
            body = await request.json()
        except ValueError:
            body = {}
        order = (body or {}).get("order") if isinstance(body, dict) else None

        if not order or not isinstance(order, dict):
            logger.warning("[notify-manychat] No order data in request body")
            return fail("No order data provided").to_response()
        if not order.get("id") and not order.get("order_code"):
            logger.warning("[notify-manychat] Order missing id/order_code")
            return fail("Order missing identifier (id or order_code)").to_response()

        ref = order.get("order_code") or order.get("id")
        logger.info("[notify-manychat] Processing notification for order %s", ref)
        result = notify_new_order(clients, order)
        if result.success:
            logger.info("[notify-manychat] Notification sent for order %s", ref)
        else:
            logger.warning("[notify-manychat] Notification failed for order %s: %s", ref, result.error)
        return result.to_response()
    except Exception as e:
        logger.exception("[notify-manychat] Unexpected error")
        return fail(f"Internal error: {e}").to_response()


@router.api_route("/notify-manychat", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def notify_manychat_other_methods():
    return fail("Method not allowed. Use POST.").to_response()
