"""Endpoint ManyChat de rattachement client / lecture de la dernière commande.
- GET ?id_manychat=...: client déjà rattaché -> dernière commande
- POST {id_manychat, mensagem_do_pedido?}: rattache un nouvel abonné via le code de commande
Toutes les issues sont en HTTP 200 avec un booléen success (ManyChat ne branche pas sur le code HTTP).
"""
import logging

from fastapi import APIRouter, Depends, Request

from orderpay.common.result import fail
from orderpay.infra.clients import VendorClients, get_clients
from orderpay.customers import service as customers_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Customers API"])


@router.get("/manychat-client")
async def manychat_client_get(request: Request, clients: VendorClients = Depends(get_clients)):
    if not clients.supabase_configured:
        logger.error("[manychat-client] Supabase not configured")
        return fail("Database not configured").to_response()

    manychat_id = request.query_params.get("id_manychat") or request.query_params.get("manychat_id")
    if not manychat_id:
        return fail("id_manychat is required").to_response()

    logger.info("[manychat-client] GET request for manychat_id: %s", manychat_id)
    try:
        return customers_service.lookup_client(clients.require_supabase(), manychat_id).to_response()
    except Exception as e:
        logger.exception("[manychat-client] Error")
        return fail(f"Internal error: {e}").to_response()


@router.post("/manychat-client")
async def manychat_client_post(request: Request, clients: VendorClients = Depends(get_clients)):
    if not clients.supabase_configured:
        logger.error("[manychat-client] Supabase not configured")
        return fail("Database not configured").to_response()

    try:
        try:
            body = await request.json()
        except ValueError:
            body = {}
        body = body if isinstance(body, dict) else {}
        manychat_id = body.get("id_manychat")
        if not manychat_id:
            return fail("id_manychat is required").to_response()

        logger.info("[manychat-client] POST request - manychat_id: %s", manychat_id)
        result = customers_service.register_client(
            clients.require_supabase(), str(manychat_id), body.get("mensagem_do_pedido")
        )
        return result.to_response()
    except Exception as e:
        logger.exception("[manychat-client] Error")
        return fail(f"Internal error: {e}").to_response()


@router.api_route("/manychat-client", methods=["PUT", "PATCH", "DELETE"], include_in_schema=False)
async def manychat_client_other_methods():
    return fail("Use GET or POST method").to_response()
