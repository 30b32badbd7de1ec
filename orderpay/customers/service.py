"""Couche service de la feature Customers (appelée par ManyChat).
Rôles:
- Retrouver un client par son identifiant d'abonné ManyChat.
- Sinon, extraire le code de commande (FAST-####) du message et rattacher le client via la commande.
- Retourner la dernière commande formatée et le nombre total de commandes.
Tous les cas (y compris « introuvable ») sont des Ok | Fail, jamais des exceptions.
"""
import logging
import re
from typing import Optional

from supabase import Client

from orderpay.common.result import Result, fail, ok
from orderpay.notifications.formatting import format_order_summary
from . import repository

logger = logging.getLogger(__name__)

ORDER_CODE_PATTERN = re.compile(r"FAST-(\d{4})", re.IGNORECASE)


def extract_order_code(message: Optional[str]) -> Optional[str]:
    """'... Código: FAST-0042 ...' -> 'FAST-0042'; aucun motif -> None."""
    if not message:
        return None
    match = ORDER_CODE_PATTERN.search(message)
    if match:
        return f"FAST-{match.group(1)}"
    return None


def lookup_client(db: Client, manychat_id: str) -> Result:
    """GET: client déjà rattaché -> dernière commande + nombre de commandes."""
    client = repository.find_client_by_manychat_id(db, manychat_id)
    if not client:
        logger.info("[manychat-client] Client not found for manychat_id: %s", manychat_id)
        return fail("Client not found", registered=False)

    phone = client.get("phone")
    last_order = repository.find_last_order_by_phone(db, phone)
    if not last_order:
        return ok(
            registered=True,
            client_name=client.get("name"),
            order=None,
            orders_count=0,
            message="No orders found for this client",
        )
    return ok(
        registered=True,
        client_name=client.get("name"),
        order=format_order_summary(last_order),
        orders_count=repository.count_orders_by_phone(db, phone),
    )


def register_client(db: Client, manychat_id: str, message: Optional[str]) -> Result:
    """
    POST: enregistre l'abonné ManyChat.
    - Déjà rattaché: renvoie simplement la dernière commande
    - Nouveau: code de commande extrait du message -> commande -> client (par téléphone)
    """
    existing = repository.find_client_by_manychat_id(db, manychat_id)
    if existing:
        phone = existing.get("phone")
        logger.info("[manychat-client] Client already registered: %s", phone)
        return ok(
            client_registered=True,
            already_registered=True,
            client_name=existing.get("name"),
            order=format_order_summary(repository.find_last_order_by_phone(db, phone)),
            orders_count=repository.count_orders_by_phone(db, phone),
        )

    if not message:
        return fail("mensagem_do_pedido is required for new client registration")

    code = extract_order_code(message)
    if not code:
        logger.warning("[manychat-client] Could not extract order code from message")
        return fail("Could not extract order code (FAST-XXXX) from message")
    logger.info("[manychat-client] Extracted order code: %s", code)

    order = repository.find_order_by_code(db, code)
    if not order:
        logger.warning("[manychat-client] Order not found: %s", code)
        return fail(f"Order {code} not found")

    phone = order.get("client_phone")
    # Le téléphone peut ne pas (encore) exister dans fast_clients: on continue
    if repository.link_client_manychat_id(db, phone, manychat_id):
        logger.info("[manychat-client] Updated client %s with manychat_id: %s", phone, manychat_id)
    repository.link_order_manychat_id(db, order.get("id"), manychat_id)

    return ok(
        client_registered=True,
        newly_registered=True,
        order_code=code,
        client_phone=phone,
        order=format_order_summary(order),
        orders_count=repository.count_orders_by_phone(db, phone),
    )
