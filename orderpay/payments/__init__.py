"""
Module 'payments' (feature-first): point d'entrée public.
Réexporte la règle de statut et la lecture des métadonnées Stripe.
"""

from .status import EPSILON, PaymentStatus, classify, is_partial_payment
from .metadata import extract_order_id, payment_reference

__all__ = [
    # status
    "EPSILON",
    "PaymentStatus",
    "classify",
    "is_partial_payment",
    # metadata
    "extract_order_id",
    "payment_reference",
]
