"""
Cas d'usage 'payments': orchestre stripe_client, metadata, repository et la règle de statut.
- start_checkout / start_payment_link: validation puis création côté Stripe
- handle_event: machine d'état du webhook Stripe
- sync_checkout_session: rattrapage manuel quand le webhook n'arrive pas
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from fastapi import HTTPException
from supabase import Client

from orderpay.infra.clients import VendorClients
from . import metadata as meta
from . import repository
from .status import PaymentStatus, cents_to_amount, classify
from .stripe_client import build_cancel_url, whatsapp_confirmation_url

logger = logging.getLogger(__name__)

SUCCEEDED_EVENTS = (
    "payment_intent.succeeded",
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
)
REFUND_EVENT = "charge.refunded"


@dataclass(frozen=True)
class PaymentUpdate:
    order_id: str
    payment_status: PaymentStatus
    amount_paid: float
    reference: Optional[str] = None


@dataclass(frozen=True)
class EventOutcome:
    event_type: str
    action: str  # "updated" | "refunded" | "ignored"
    update: Optional[PaymentUpdate] = None


def _validate_intake(body: Dict[str, Any]):
    order_id = body.get("orderId")
    amount = body.get("amount")
    if not order_id or not amount:
        raise HTTPException(status_code=400, detail="orderId e amount são obrigatórios")
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="amount inválido")
    return order_id, amount


def start_checkout(clients: VendorClients, body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Crée la session Checkout pour {orderId, amount, customerEmail?, customerName?}.
    Retour: {"success": True, "url": ..., "sessionId": ...}
    """
    gateway = clients.require_stripe()
    order_id, amount = _validate_intake(body)
    settings = clients.settings
    logger.info("Creating Checkout Session for order %s, amount: R$ %s", order_id, amount)
    session = gateway.create_checkout_session(
        order_id=order_id,
        amount=amount,
        success_url=settings.checkout_success_url,
        cancel_url=build_cancel_url(settings.checkout_cancel_url, order_id),
        customer_email=body.get("customerEmail"),
        customer_name=body.get("customerName"),
    )
    return {"success": True, "url": session.get("url"), "sessionId": session.get("id")}


def start_payment_link(clients: VendorClients, body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Crée un Payment Link; la redirection post-paiement ouvre WhatsApp avec le texte de confirmation.
    Retour: {"success": True, "url": ..., "paymentLinkId": ...}
    """
    gateway = clients.require_stripe()
    order_id, amount = _validate_intake(body)
    logger.info("Creating payment link for order %s, amount: R$ %s", order_id, amount)
    link = gateway.create_payment_link(
        order_id=order_id,
        amount=amount,
        redirect_url=whatsapp_confirmation_url(clients.settings.whatsapp_number, order_id),
        customer_name=body.get("customerName"),
    )
    logger.info("Payment link created: %s", link.get("url"))
    return {"success": True, "url": link.get("url"), "paymentLinkId": link.get("id")}


def record_payment(db: Client, order_id: str, amount_paid: float, reference: Optional[str]) -> PaymentUpdate:
    """
    Applique la règle de statut au total stocké puis persiste
    {payment_status, amount_paid, stripe_payment_id}.
    Idempotent: rejouer le même événement réécrit les mêmes valeurs.
    """
    order = repository.fetch_order_payment(db, order_id)
    status = classify(amount_paid, order["total"])
    repository.update_order_payment(db, order_id, {
        "payment_status": status.value,
        "amount_paid": amount_paid,
        "stripe_payment_id": reference,
    })
    return PaymentUpdate(order_id=order_id, payment_status=status, amount_paid=amount_paid, reference=reference)


def record_refund(db: Client, order_id: str) -> PaymentUpdate:
    """Un remboursement force refunded, quel que soit le statut précédent."""
    repository.update_order_payment(db, order_id, {"payment_status": PaymentStatus.REFUNDED.value})
    return PaymentUpdate(order_id=order_id, payment_status=PaymentStatus.REFUNDED, amount_paid=0.0)


def handle_event(db: Client, event: Dict[str, Any]) -> EventOutcome:
    """
    Traite un événement Stripe déjà vérifié.
    - payment_intent.succeeded: montant amount_received, référence = id du payment intent
    - checkout.session.completed / async_payment_succeeded: montant amount_total,
      référence = payment intent de la session sinon id de session
    - charge.refunded: statut forcé à refunded
    - Sans order_id ou type inconnu: ignoré (pas une erreur)
    Les erreurs base de données remontent (RepositoryError).
    """
    event_type = (event or {}).get("type") or ""
    obj = ((event or {}).get("data") or {}).get("object") or {}
    logger.info("Webhook received: %s (%s)", event_type, (event or {}).get("id"))

    if event_type in SUCCEEDED_EVENTS:
        order_id = meta.extract_order_id(obj)
        if not order_id:
            logger.warning("%s sans metadata.order_id/client_reference_id; ignoré", event_type)
            return EventOutcome(event_type, "ignored")
        if event_type == "payment_intent.succeeded":
            amount_paid = cents_to_amount(obj.get("amount_received"))
        else:
            amount_paid = cents_to_amount(obj.get("amount_total"))
        update = record_payment(db, order_id, amount_paid, meta.payment_reference(obj))
        logger.info("Order %s updated: %s (R$ %s)", order_id, update.payment_status.value, amount_paid)
        return EventOutcome(event_type, "updated", update)

    if event_type == REFUND_EVENT:
        order_id = meta.extract_order_id(obj)
        if not order_id:
            logger.warning("charge.refunded sans metadata.order_id; ignoré")
            return EventOutcome(event_type, "ignored")
        update = record_refund(db, order_id)
        logger.info("Order %s marked as refunded", order_id)
        return EventOutcome(event_type, "refunded", update)

    return EventOutcome(event_type, "ignored")


def sync_checkout_session(clients: VendorClients, session_id: str) -> Dict[str, Any]:
    """
    Rattrapage sans webhook: relit la session Stripe et réapplique la règle si payée.
    - Session non payée: lecture seule, le statut stocké n'est jamais dégradé
    - 404 si la session ne porte aucun order_id
    Retour: {"success", "orderId", "payment_status", "amount_paid"}
    """
    gateway = clients.require_stripe()
    db = clients.require_supabase()

    session = gateway.retrieve_checkout_session(session_id)
    order_id = meta.extract_order_id(session)
    if not order_id:
        raise HTTPException(status_code=404, detail="order_id não encontrado na Checkout Session")

    if session.get("payment_status") == "paid":
        update = record_payment(
            db, order_id, cents_to_amount(session.get("amount_total")), meta.payment_reference(session)
        )
        status, amount_paid = update.payment_status.value, update.amount_paid
    else:
        order = repository.fetch_order_payment(db, order_id)
        status = order.get("payment_status") or PaymentStatus.AWAITING_PAYMENT.value
        amount_paid = order.get("amount_paid", 0.0)

    logger.info("Sync Checkout: session %s -> order %s (%s)", session_id, order_id, status)
    return {
        "success": True,
        "orderId": str(order_id),
        "payment_status": status,
        "amount_paid": amount_paid,
    }
