# orderpay.config
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"

"""
Configuration centrale du service de paiement des commandes.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Construit un objet Settings immuable, créé une seule fois par la factory
  puis transmis aux handlers (pas de clients globaux)
- Normalise les secrets/URLs (Stripe, Supabase, ManyChat), redirections checkout, CORS
"""

DEFAULT_WHATSAPP_NUMBER = "5573999366554"
DEFAULT_SUCCESS_URL = "https://fastsavorys.vercel.app/pages/fast.html?checkout=success&session_id={CHECKOUT_SESSION_ID}"
DEFAULT_CANCEL_URL = "https://fastsavorys.vercel.app/pages/fast.html?checkout=cancel&order_id="
MANYCHAT_API_BASE = "https://api.manychat.com/fb"

# Ordre fixe des champs personnalisés poussés vers ManyChat
MANYCHAT_FIELD_ENV = {
    "order_number": "MANYCHAT_FIELD_ID_ORDER_NUMBER",
    "order_total": "MANYCHAT_FIELD_ID_ORDER_TOTAL",
    "order_description": "MANYCHAT_FIELD_ID_ORDER_DESCRIPTION",
    "order_date": "MANYCHAT_FIELD_ID_ORDER_DATE",
    "order_delivery_method": "MANYCHAT_FIELD_ID_ORDER_DELIVERY_METHOD",
    "client_first_name": "MANYCHAT_FIELD_ID_CLIENT_FIRST_NAME",
    "payment_method": "MANYCHAT_FIELD_ID_PAYMENT_METHOD",
    "client_phone": "MANYCHAT_FIELD_ID_CLIENT_PHONE",
}


def _clean_env(v: Optional[str]) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")


def _normalize_supabase_url(url: str) -> str:
    # SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
    if url and not url.startswith("http"):
        url = "https://" + url
    return url.rstrip("/")


def _split_csv(v: str) -> List[str]:
    return [s.strip() for s in (v or "").split(",") if s.strip()]


@dataclass(frozen=True)
class Settings:
    # Stripe
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    checkout_success_url: str = DEFAULT_SUCCESS_URL
    checkout_cancel_url: str = DEFAULT_CANCEL_URL
    whatsapp_number: str = DEFAULT_WHATSAPP_NUMBER
    # Supabase (service role, opérations privilégiées côté serveur)
    supabase_url: str = ""
    supabase_service_key: str = ""
    # ManyChat
    manychat_api_key: str = ""
    manychat_operator_id: str = ""
    manychat_flow_id: str = ""
    manychat_api_base: str = MANYCHAT_API_BASE
    manychat_timeout: float = 10.0
    manychat_field_ids: Dict[str, str] = field(default_factory=dict)
    # Divers
    environment: str = "development"
    # Détail des erreurs fournisseurs: opt-in explicite (APP_ENV/NODE_ENV=development)
    detailed_errors: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @property
    def webhook_secrets(self) -> List[str]:
        """Secrets de signature webhook (séparés par des virgules, rotation sans coupure)."""
        return _split_csv(self.stripe_webhook_secret)

    @property
    def is_development(self) -> bool:
        return self.detailed_errors


def load_settings(env_path: Optional[Path] = ENV_PATH) -> Settings:
    """
    Lit l'environnement (après chargement du .env) et retourne un Settings.
    Aucune valeur n'est obligatoire au démarrage: les routes concernées
    répondent 500 si une clé indispensable manque.
    """
    if env_path is not None:
        load_dotenv(dotenv_path=env_path, override=False)

    try:
        timeout = float(_clean_env(os.getenv("MANYCHAT_TIMEOUT")) or 10)
    except ValueError:
        timeout = 10.0

    field_ids = {}
    for name, env_name in MANYCHAT_FIELD_ENV.items():
        value = _clean_env(os.getenv(env_name))
        if value:
            field_ids[name] = value

    return Settings(
        stripe_secret_key=_clean_env(os.getenv("STRIPE_SECRET_KEY")),
        stripe_webhook_secret=_clean_env(os.getenv("STRIPE_WEBHOOK_SECRET")),
        checkout_success_url=_clean_env(os.getenv("CHECKOUT_SUCCESS_URL")) or DEFAULT_SUCCESS_URL,
        checkout_cancel_url=_clean_env(os.getenv("CHECKOUT_CANCEL_URL")) or DEFAULT_CANCEL_URL,
        whatsapp_number=_clean_env(os.getenv("WHATSAPP_NUMBER")) or DEFAULT_WHATSAPP_NUMBER,
        supabase_url=_normalize_supabase_url(_clean_env(os.getenv("SUPABASE_URL"))),
        supabase_service_key=_clean_env(
            os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_SERVICE_KEY")
        ),
        manychat_api_key=_clean_env(os.getenv("MANYCHAT_API_KEY")),
        manychat_operator_id=_clean_env(os.getenv("MANYCHAT_USER_ID_JESSICA")),
        manychat_flow_id=_clean_env(os.getenv("MANYCHAT_FLOW_ID_NOVO_PEDIDO")),
        manychat_api_base=(_clean_env(os.getenv("MANYCHAT_API_BASE")) or MANYCHAT_API_BASE).rstrip("/"),
        manychat_timeout=timeout,
        manychat_field_ids=field_ids,
        environment=_clean_env(os.getenv("APP_ENV") or os.getenv("VERCEL_ENV")) or "development",
        detailed_errors=_clean_env(os.getenv("APP_ENV") or os.getenv("NODE_ENV")) == "development",
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")) or ["*"],
    )
