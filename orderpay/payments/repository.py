"""
Accès données pour la feature 'payments' (table fast_orders).
Les erreurs Supabase remontent en RepositoryError: le webhook doit pouvoir répondre 500
pour que Stripe relivre l'événement.
"""
from typing import Any, Dict
import logging

from supabase import Client

from orderpay.common.errors import OrderNotFoundError, RepositoryError

logger = logging.getLogger(__name__)

ORDERS_TABLE = "fast_orders"


# module orderpay.payments.repository
def fetch_order_payment(db: Client, order_id: str) -> Dict[str, Any]:
    """
    Lit le total et le statut de paiement d'une commande.
    Retour: {"total": float, "payment_status": str | None, "amount_paid": float}
    """
    try:
        res = (
            db.table(ORDERS_TABLE)
            .select("total, payment_status, amount_paid")
            .eq("id", order_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("payments.repository.fetch_order_payment failed order_id=%s", order_id)
        raise RepositoryError(str(e)) from e

    rows = res.data or []
    if not rows:
        raise OrderNotFoundError(order_id)
    row = rows[0]
    return {
        "total": float(row.get("total") or 0),
        "payment_status": row.get("payment_status"),
        "amount_paid": float(row.get("amount_paid") or 0),
    }


def update_order_payment(db: Client, order_id: str, fields: Dict[str, Any]) -> None:
    """
    Écrase les colonnes de paiement de la commande (dernier écrit gagne).
    """
    try:
        (
            db.table(ORDERS_TABLE)
            .update(fields)
            .eq("id", order_id)
            .execute()
        )
    except Exception as e:
        logger.exception("payments.repository.update_order_payment failed order_id=%s", order_id)
        raise RepositoryError(str(e)) from e
