"""
Règle de statut de paiement: classe un paiement en total ou partiel.
Implémentation unique, appelée par le webhook et la synchronisation manuelle.
"""
from enum import Enum
from typing import Any

# Tolérance (en reais) pour absorber les arrondis issus des centimes
EPSILON = 0.009


class PaymentStatus(str, Enum):
    AWAITING_PAYMENT = "awaiting_payment"
    PAID_PARTIAL = "paid_partial"
    PAID_FULL = "paid_full"
    REFUNDED = "refunded"


def is_partial_payment(amount_paid: float, total: float) -> bool:
    return total > 0 and (amount_paid + EPSILON) < total


def classify(amount_paid: float, total: float) -> PaymentStatus:
    """
    Statut d'une commande à partir du montant payé et du total.
    - total <= 0 (commande gratuite ou total inconnu): paid_full
    - amount_paid + EPSILON < total: paid_partial
    - sinon: paid_full
    """
    if is_partial_payment(amount_paid, total):
        return PaymentStatus.PAID_PARTIAL
    return PaymentStatus.PAID_FULL


def cents_to_amount(cents: Any) -> float:
    """Montant Stripe (centimes) -> reais. None/vides -> 0."""
    return (int(cents or 0)) / 100


def amount_to_cents(amount: Any) -> int:
    return int(round(float(amount) * 100))
