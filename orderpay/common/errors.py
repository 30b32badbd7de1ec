"""
Exceptions métier partagées par les features (payments, customers, notifications).
Converties en réponses HTTP par orderpay.app_setup.exceptions.
"""


class ConfigurationError(RuntimeError):
    """Configuration indispensable absente (clé Stripe, secret webhook, Supabase)."""


class RepositoryError(RuntimeError):
    """Échec d'un appel à la base hébergée (Supabase/PostgREST)."""


class OrderNotFoundError(RepositoryError):
    def __init__(self, order_id: str):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


def safe_error_message(error: Exception, default: str, development: bool = False) -> str:
    """Message d'erreur renvoyé au client: détail fournisseur en développement seulement."""
    if development:
        return str(error) or default
    return default
