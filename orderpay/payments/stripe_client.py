"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
La clé secrète est passée à chaque appel (api_key=...), jamais posée sur le module global.
"""
import json
import logging
from typing import Any, Dict, Iterable, Optional
from urllib.parse import quote

import stripe

from .status import amount_to_cents

logger = logging.getLogger(__name__)

CURRENCY = "brl"
CHECKOUT_SESSION_PLACEHOLDERS = ("{ORDER_ID}", "{order_id}")


# module orderpay.payments.stripe_client
def to_dict(obj: Any) -> Dict[str, Any]:
    """
    Normalise un objet Stripe (StripeObject) en dict Python simple.
    - Les dicts passent tels quels (tests, événements déjà parsés)
    """
    if obj is None:
        return {}
    if isinstance(obj, stripe.StripeObject):
        # str() sérialise en JSON, objets imbriqués compris (payment_intent développé)
        return json.loads(str(obj))
    return dict(obj)


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def build_cancel_url(base: str, order_id: Any) -> str:
    """
    Construit l'URL d'annulation contenant l'identifiant de commande.
    - Remplace {ORDER_ID} / {order_id} si présent
    - Concatène si la base finit par "order_id="
    - Sinon ajoute ?order_id=... ou &order_id=...
    """
    encoded = quote(str(order_id), safe="")
    for placeholder in CHECKOUT_SESSION_PLACEHOLDERS:
        if placeholder in base:
            return base.replace(placeholder, encoded)
    if base.endswith("order_id="):
        return base + encoded
    sep = "&" if "?" in base else "?"
    return f"{base}{sep}order_id={encoded}"


def whatsapp_confirmation_url(number: str, order_id: Any) -> str:
    text = f"Ola! Paguei o pedido #{order_id}"
    return f"https://wa.me/{number}?text={quote(text, safe='')}"


def _line_item(order_id: Any, amount: float, customer_name: Optional[str]) -> Dict[str, Any]:
    return {
        "price_data": {
            "currency": CURRENCY,
            "product_data": {
                "name": f"Pedido Fast Savory's #{order_id}",
                "description": f"Pedido para {customer_name or 'Cliente'}",
            },
            "unit_amount": amount_to_cents(amount),  # centavos
        },
        "quantity": 1,
    }


class StripeGateway:
    """
    Client Stripe lié à une clé secrète.
    Construit par VendorClients.require_stripe(); remplaçable par un faux en tests.
    """

    def __init__(self, api_key: str):
        self.api_key = api_key

    def create_checkout_session(
        self,
        *,
        order_id: Any,
        amount: float,
        success_url: str,
        cancel_url: str,
        customer_email: Optional[str] = None,
        customer_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Crée une session Stripe Checkout pour une commande.
        L'identifiant de commande est posé à deux endroits (client_reference_id et metadata)
        pour être retrouvé quel que soit l'objet renvoyé par Stripe au webhook.
        Retour: {"id": "cs_...", "url": "https://checkout.stripe.com/..."}
        """
        params: Dict[str, Any] = {
            "mode": "payment",
            "success_url": success_url,
            "cancel_url": cancel_url,
            "client_reference_id": str(order_id),
            "line_items": [_line_item(order_id, amount, customer_name)],
            "payment_intent_data": {
                "metadata": {
                    "order_id": str(order_id),
                    "customer_name": customer_name or "Cliente",
                }
            },
            "metadata": {"order_id": str(order_id)},
        }
        if customer_email:
            params["customer_email"] = customer_email

        session = stripe.checkout.Session.create(api_key=self.api_key, **params)
        return {"id": _field(session, "id"), "url": _field(session, "url")}

    def create_payment_link(
        self,
        *,
        order_id: Any,
        amount: float,
        redirect_url: str,
        customer_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Crée un Payment Link Stripe; après paiement le client est redirigé vers redirect_url
        (lien WhatsApp pré-rempli avec le texte de confirmation).
        """
        item = _line_item(order_id, amount, customer_name)
        item["price_data"]["product_data"]["images"] = []
        link = stripe.PaymentLink.create(
            api_key=self.api_key,
            line_items=[item],
            after_completion={"type": "redirect", "redirect": {"url": redirect_url}},
            allow_promotion_codes=False,
            payment_intent_data={
                "metadata": {
                    "order_id": str(order_id),
                    "customer_name": customer_name or "Cliente",
                }
            },
        )
        return {"id": _field(link, "id"), "url": _field(link, "url")}

    def retrieve_checkout_session(self, session_id: str) -> Dict[str, Any]:
        """
        Récupère une session Checkout (payment_intent développé).
        Retour: dict incluant "id", "payment_status", "amount_total", "metadata", ...
        """
        session = stripe.checkout.Session.retrieve(
            str(session_id), api_key=self.api_key, expand=["payment_intent"]
        )
        return to_dict(session)

    def retrieve_payment_link(self, link_id: str) -> Dict[str, Any]:
        return to_dict(stripe.PaymentLink.retrieve(str(link_id), api_key=self.api_key))


def construct_event(payload: bytes, sig_header: Optional[str], secrets: Iterable[str]) -> Dict[str, Any]:
    """
    Valide la signature d'un webhook Stripe contre chaque secret, le premier valide gagne
    (rotation des secrets sans coupure).
    - payload: corps brut, non parsé (la signature porte sur les octets exacts)
    - Lève la dernière erreur de vérification si aucun secret ne correspond
    Retour: l'événement sous forme de dict.
    """
    last_error: Optional[Exception] = None
    for secret in secrets:
        try:
            stripe.Webhook.construct_event(payload, sig_header or "", secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            last_error = e
            continue
        return json.loads(payload)
    if last_error is not None:
        raise last_error
    raise stripe.SignatureVerificationError("Invalid signature", sig_header)
