"""
Intégration ManyChat (WhatsApp) pour notifier l'opératrice des nouvelles commandes.

- Toutes les fonctions rendent un Ok | Fail et ne lèvent jamais d'exception
- Configuration absente: étape sautée avec un warning
- Un champ sans identifiant de mapping est simplement omis du lot
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from orderpay.common.result import Fail, Ok, Result, fail, ok
from . import formatting as fmt

logger = logging.getLogger(__name__)

SET_CUSTOM_FIELDS_ENDPOINT = "/subscriber/setCustomFields"
SEND_FLOW_ENDPOINT = "/sending/sendFlow"


class ManyChatClient:
    def __init__(self, api_key: str, base_url: str, timeout: float = 10.0):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def request(self, endpoint: str, payload: Dict[str, Any]) -> Result:
        """POST authentifié vers l'API ManyChat; erreurs HTTP et réseau -> Fail."""
        if not self.api_key:
            return fail("MANYCHAT_API_KEY not configured")
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        try:
            resp = httpx.post(f"{self.base_url}{endpoint}", json=payload, headers=headers, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.error("[ManyChat] Request failed: %s", e)
            return fail(str(e))

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not resp.is_success:
            logger.error("[ManyChat] API Error: %s %s", resp.status_code, data)
            message = (data or {}).get("message") or (data or {}).get("error") or f"HTTP {resp.status_code}"
            return fail(str(message))
        return ok(data=data)

    def set_custom_fields(self, subscriber_id: Optional[str], fields: List[Dict[str, Any]]) -> Result:
        if not subscriber_id:
            logger.warning("[ManyChat] No user ID provided for set_custom_fields")
            return fail("No user ID")
        if not fields:
            logger.warning("[ManyChat] No fields provided for set_custom_fields")
            return fail("No fields")
        valid = [f for f in fields if f.get("field_id")]
        if not valid:
            logger.warning("[ManyChat] No valid field IDs configured, skipping set_custom_fields")
            return fail("No valid field IDs")

        logger.info("[ManyChat] Updating %s custom fields for user %s", len(valid), subscriber_id)
        result = self.request(SET_CUSTOM_FIELDS_ENDPOINT, {"subscriber_id": subscriber_id, "fields": valid})
        if result.success:
            logger.info("[ManyChat] Custom fields updated successfully")
        return result

    def send_flow(self, subscriber_id: Optional[str], flow_ns: Optional[str]) -> Result:
        if not subscriber_id:
            logger.warning("[ManyChat] No user ID provided for send_flow")
            return fail("No user ID")
        if not flow_ns:
            logger.warning("[ManyChat] No flow ID provided for send_flow")
            return fail("No flow ID")

        logger.info("[ManyChat] Sending flow %s to user %s", flow_ns, subscriber_id)
        result = self.request(SEND_FLOW_ENDPOINT, {"subscriber_id": subscriber_id, "flow_ns": flow_ns})
        if result.success:
            logger.info("[ManyChat] Flow sent successfully")
        return result


def _field_values(order: Dict[str, Any]) -> Dict[str, str]:
    return {
        "order_number": str(order.get("order_code") or order.get("id") or "N/A"),
        "order_total": fmt.format_currency(order.get("total")),
        "order_description": fmt.format_items(order.get("items")),
        "order_date": fmt.format_delivery_date(order),
        "order_delivery_method": fmt.format_delivery_method(order),
        "client_first_name": fmt.first_name(order.get("client_name")),
        "payment_method": fmt.format_payment_info(order),
        "client_phone": fmt.format_phone(order.get("client_phone")),
    }


def build_custom_fields(order: Dict[str, Any], field_ids: Dict[str, str]) -> List[Dict[str, Any]]:
    """
    Un {field_id, field_value} par mapping configuré, dans l'ordre fixe des valeurs.
    Les identifiants non numériques sont ignorés (warning).
    """
    fields = []
    for name, value in _field_values(order).items():
        raw_id = field_ids.get(name)
        if not raw_id:
            continue
        try:
            field_id = int(raw_id)
        except (TypeError, ValueError):
            logger.warning("[ManyChat] Invalid field id for %s: %r", name, raw_id)
            continue
        fields.append({"field_id": field_id, "field_value": value})
    return fields


def notify_new_order(clients, order: Optional[Dict[str, Any]]) -> Result:
    """
    Notifie ManyChat d'une nouvelle commande.
    1. Vérifie la configuration minimale (clé API + id opératrice)
    2. Pousse les champs personnalisés configurés
    3. Déclenche le flow « Novo Pedido », même si l'étape 2 a échoué
    Ne lève jamais: toute erreur devient Fail.
    """
    logger.info("[ManyChat] Processing new order notification...")
    if not clients.manychat_configured:
        logger.warning("[ManyChat] Not configured (missing API key or user ID). Skipping notification.")
        return fail("Not configured")
    if not order:
        logger.warning("[ManyChat] No order data provided. Skipping notification.")
        return fail("No order data")

    settings = clients.settings
    subscriber_id = settings.manychat_operator_id
    manychat = clients.manychat
    try:
        fields = build_custom_fields(order, settings.manychat_field_ids)
        if fields:
            fields_result = manychat.set_custom_fields(subscriber_id, fields)
            if not fields_result.success:
                logger.warning("[ManyChat] Custom fields update failed: %s", fields_result.error)
        else:
            logger.warning("[ManyChat] No custom field IDs configured. Skipping fields update.")

        if settings.manychat_flow_id:
            flow_result = manychat.send_flow(subscriber_id, settings.manychat_flow_id)
            if not flow_result.success:
                logger.warning("[ManyChat] Flow send failed: %s", flow_result.error)
                return Fail(flow_result.error)
        else:
            logger.warning("[ManyChat] MANYCHAT_FLOW_ID_NOVO_PEDIDO not configured. Skipping flow trigger.")

        logger.info("[ManyChat] Notification completed for order %s", order.get("order_code") or order.get("id"))
        return Ok()
    except Exception as e:
        logger.exception("[ManyChat] Unexpected error in notify_new_order")
        return fail(str(e))
