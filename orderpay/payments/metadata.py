"""
Lecture des métadonnées Stripe: identifiant de commande et référence de paiement.
"""
from typing import Any, Dict, Optional


# module orderpay.payments.metadata
def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def extract_order_id(obj: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    Retrouve l'identifiant de commande depuis un objet Stripe (payment intent, session, charge).
    Ordre: metadata.order_id, puis client_reference_id, puis payment_intent.metadata.order_id
    (quand le payment intent est développé).
    """
    obj = _as_dict(obj)
    order_id = (
        _as_dict(obj.get("metadata")).get("order_id")
        or obj.get("client_reference_id")
        or _as_dict(_as_dict(obj.get("payment_intent")).get("metadata")).get("order_id")
    )
    return str(order_id) if order_id else None


def payment_reference(obj: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    Référence Stripe à stocker avec la commande (colonne stripe_payment_id):
    id du payment intent développé, sinon son identifiant brut, sinon l'id de l'objet.
    """
    obj = _as_dict(obj)
    intent = obj.get("payment_intent")
    if isinstance(intent, dict):
        return intent.get("id") or obj.get("id")
    return intent or obj.get("id")
