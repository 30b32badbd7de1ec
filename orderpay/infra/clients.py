"""
Conteneur des clients fournisseurs (Stripe, Supabase, ManyChat).

- Construit une seule fois par la factory à partir de Settings, stocké sur app.state
- Chaque client est créé à la demande puis réutilisé
- Expose pour chaque fournisseur un getter et un test « est configuré »
"""
import logging
from typing import List, Optional

from fastapi import Request
from supabase import Client, create_client

from orderpay.config import Settings
from orderpay.common.errors import ConfigurationError
from orderpay.notifications.manychat import ManyChatClient
from orderpay.payments.stripe_client import StripeGateway

logger = logging.getLogger(__name__)


class VendorClients:
    def __init__(self, settings: Settings):
        self.settings = settings
        self._stripe: Optional[StripeGateway] = None
        self._supabase: Optional[Client] = None
        self._manychat: Optional[ManyChatClient] = None

    # --- Stripe ---
    @property
    def stripe_configured(self) -> bool:
        return bool(self.settings.stripe_secret_key)

    def require_stripe(self) -> StripeGateway:
        if not self.stripe_configured:
            raise ConfigurationError("STRIPE_SECRET_KEY not configured")
        if self._stripe is None:
            self._stripe = StripeGateway(self.settings.stripe_secret_key)
        return self._stripe

    @property
    def webhook_secrets(self) -> List[str]:
        return self.settings.webhook_secrets

    def require_webhook_secrets(self) -> List[str]:
        secrets = self.webhook_secrets
        if not secrets:
            raise ConfigurationError("STRIPE_WEBHOOK_SECRET not configured")
        return secrets

    # --- Supabase (service role, bypass RLS) ---
    @property
    def supabase_configured(self) -> bool:
        return bool(self.settings.supabase_url and self.settings.supabase_service_key)

    def require_supabase(self) -> Client:
        if not self.supabase_configured:
            raise ConfigurationError("SUPABASE credentials not configured")
        if self._supabase is None:
            self._supabase = create_client(self.settings.supabase_url, self.settings.supabase_service_key)
        return self._supabase

    # --- ManyChat ---
    @property
    def manychat_configured(self) -> bool:
        """Minimum requis: clé API et identifiant de l'opératrice."""
        return bool(self.settings.manychat_api_key and self.settings.manychat_operator_id)

    @property
    def manychat(self) -> ManyChatClient:
        if self._manychat is None:
            self._manychat = ManyChatClient(
                api_key=self.settings.manychat_api_key,
                base_url=self.settings.manychat_api_base,
                timeout=self.settings.manychat_timeout,
            )
        return self._manychat


def get_clients(request: Request) -> VendorClients:
    """Dépendance FastAPI: conteneur posé par create_app (surchargé en tests)."""
    return request.app.state.clients
