"""
Mise en forme des commandes pour les champs personnalisés ManyChat.
Les chaînes produites doivent rester identiques: les modèles de message côté ManyChat en dépendent.
"""
import json
import re
from typing import Any, Dict, List, Optional

ITEM_SEPARATOR = " • "
ASAP_LABEL = "Hoje - o mais breve possível"
UNKNOWN_LABEL = "Não informado"
DEFAULT_CLIENT = "Cliente"

PAYMENT_LABELS = {
    "dinheiro": "💵 Dinheiro",
    "cartao1x": "💳 Cartão",
    "pix": "📱 PIX",
}

_DIGITS = re.compile(r"\D")


def format_currency(value: Any) -> str:
    """12.5 -> 'R$ 12,50' (virgule décimale); vide ou invalide -> 'R$ 0,00'."""
    try:
        amount = float(value or 0)
    except (TypeError, ValueError):
        amount = 0.0
    return f"R$ {amount:.2f}".replace(".", ",")


def parse_items(items: Any) -> List[Dict[str, Any]]:
    # Les items peuvent être stockés en JSON texte
    if isinstance(items, str):
        try:
            items = json.loads(items)
        except ValueError:
            return []
    if not isinstance(items, list):
        return []
    return [i for i in items if isinstance(i, dict)]


def format_item(item: Dict[str, Any]) -> str:
    """Format: '2x Coxinha (R$ 10,00) _sem cebola_'"""
    text = f"{item.get('quantity') or 1}x {item.get('name') or 'Item'}"
    if item.get("price"):
        text += f" ({format_currency(item['price'])})"
    if item.get("note"):
        text += f" _{item['note']}_"
    return text


def format_items(items: Any) -> str:
    parsed = parse_items(items)
    if not parsed:
        return "Sem itens"
    return ITEM_SEPARATOR.join(format_item(i) for i in parsed)


def format_phone(phone: Any) -> str:
    """
    11 chiffres -> (DD) DDDDD-DDDD, 10 chiffres -> (DD) DDDD-DDDD,
    autre longueur -> inchangé.
    """
    if not phone:
        return UNKNOWN_LABEL
    digits = _DIGITS.sub("", str(phone))
    if len(digits) == 11:
        return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
    if len(digits) == 10:
        return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
    return str(phone)


def format_delivery_date(order: Dict[str, Any]) -> str:
    """
    Encomenda (scheduled_date AAAA-MM-JJ) -> JJ/MM/AAAA, suivi de l'heure si connue.
    Commande immédiate -> 'Hoje - o mais breve possível'.
    """
    scheduled = order.get("scheduled_date")
    if not scheduled:
        return ASAP_LABEL
    parts = str(scheduled).split("-")
    if len(parts) != 3:
        return str(scheduled)
    date_str = f"{parts[2]}/{parts[1]}/{parts[0]}"
    if order.get("scheduled_time"):
        return f"{date_str} às {order['scheduled_time']}"
    return f"{date_str} (Encomenda)"


def is_delivery(order: Dict[str, Any]) -> bool:
    return order.get("delivery_type") in ("entrega", "delivery")


def format_delivery_method(order: Dict[str, Any]) -> str:
    return "🚚 Entrega" if is_delivery(order) else "🏪 Retirada"


def format_payment_info(order: Dict[str, Any]) -> str:
    method_tag = order.get("payment_method")
    method = PAYMENT_LABELS.get(method_tag) or method_tag or UNKNOWN_LABEL
    location = "na entrega" if is_delivery(order) else "na retirada"
    return f"{method} ({location})"


def first_name(full_name: Optional[str]) -> str:
    parts = (full_name or "").split()
    return parts[0] if parts else DEFAULT_CLIENT


def order_code(order: Dict[str, Any]) -> str:
    if order.get("order_code"):
        return str(order["order_code"])
    return f"FAST-{str(order.get('order_sequence') or '').zfill(4)}"


def format_order_summary(order: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Commande stockée -> champs d'affichage ManyChat (lookup client)."""
    if not order:
        return None
    return {
        "order_code": order_code(order),
        "order_total": format_currency(order.get("total")),
        "order_description": format_items(order.get("items")),
        "order_date": format_delivery_date(order),
        "delivery_method": format_delivery_method(order),
        "client_first_name": first_name(order.get("client_name")),
        "payment_method": format_payment_info(order),
        "client_phone": format_phone(order.get("client_phone")),
        "client_name": order.get("client_name") or DEFAULT_CLIENT,
        "status": order.get("status") or "pending",
        "created_at": order.get("created_at"),
    }
