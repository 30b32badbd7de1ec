"""
Accès données pour la feature 'customers' (tables fast_clients et fast_orders).
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

from supabase import Client

from orderpay.common.errors import RepositoryError

logger = logging.getLogger(__name__)

CLIENTS_TABLE = "fast_clients"
ORDERS_TABLE = "fast_orders"


def _first(res) -> Optional[Dict[str, Any]]:
    rows = getattr(res, "data", None) or []
    if isinstance(rows, dict):
        return rows
    return rows[0] if rows else None


# module orderpay.customers.repository
def find_client_by_manychat_id(db: Client, manychat_id: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            db.table(CLIENTS_TABLE)
            .select("phone, name")
            .eq("manychat_id", manychat_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("customers.repository.find_client_by_manychat_id failed manychat_id=%s", manychat_id)
        raise RepositoryError(str(e)) from e
    return _first(res)


def find_last_order_by_phone(db: Client, phone: str) -> Optional[Dict[str, Any]]:
    """Commande la plus récente du client (created_at décroissant)."""
    try:
        res = (
            db.table(ORDERS_TABLE)
            .select("*")
            .eq("client_phone", phone)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("customers.repository.find_last_order_by_phone failed phone=%s", phone)
        raise RepositoryError(str(e)) from e
    return _first(res)


def count_orders_by_phone(db: Client, phone: str) -> int:
    """
    Nombre total de commandes du client.
    Utilise count='exact' si disponible, sinon fallback sur len(data).
    """
    try:
        res = db.table(ORDERS_TABLE).select("id", count="exact").eq("client_phone", phone).execute()
    except Exception as e:
        logger.exception("customers.repository.count_orders_by_phone failed phone=%s", phone)
        raise RepositoryError(str(e)) from e
    if getattr(res, "count", None) is not None:
        return int(res.count)
    return len(res.data or [])


def find_order_by_code(db: Client, order_code: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            db.table(ORDERS_TABLE)
            .select("*")
            .eq("order_code", order_code)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("customers.repository.find_order_by_code failed order_code=%s", order_code)
        raise RepositoryError(str(e)) from e
    return _first(res)


def link_client_manychat_id(db: Client, phone: str, manychat_id: str) -> bool:
    """Associe l'abonné ManyChat au client (clé naturelle: téléphone). False si échec."""
    try:
        (
            db.table(CLIENTS_TABLE)
            .update({
                "manychat_id": manychat_id,
                "manychat_updated_at": datetime.now(timezone.utc).isoformat(),
            })
            .eq("phone", phone)
            .execute()
        )
        return True
    except Exception:
        logger.exception("customers.repository.link_client_manychat_id failed phone=%s", phone)
        return False


def link_order_manychat_id(db: Client, order_id: Any, manychat_id: str) -> bool:
    try:
        db.table(ORDERS_TABLE).update({"manychat_id": manychat_id}).eq("id", order_id).execute()
        return True
    except Exception:
        logger.exception("customers.repository.link_order_manychat_id failed order_id=%s", order_id)
        return False
