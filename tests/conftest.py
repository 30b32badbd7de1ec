import os

# Pas de Redis pendant les tests: le lifespan désactive le rate limiting
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import hashlib
import hmac
import json
import time
from typing import Any, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

from orderpay.app_setup.factory import create_app
from orderpay.config import Settings
from orderpay.infra.clients import VendorClients, get_clients

WEBHOOK_SECRETS = "whsec_old, whsec_new"


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/"):
            item.add_marker(pytest.mark.integration)


# --- Faux Supabase: tables en mémoire + requêtes chaînées (select/update/eq/order/limit) ---
class _Resp:
    def __init__(self, data=None, count=None):
        self.data = data
        self.count = count


class _Query:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.filters: List[tuple] = []
        self._update: Optional[Dict[str, Any]] = None
        self._order: Optional[tuple] = None
        self._limit: Optional[int] = None
        self._count: Optional[str] = None

    def select(self, columns: str = "*", count: Optional[str] = None):
        self._count = count
        return self

    def update(self, fields: Dict[str, Any]):
        self._update = dict(fields)
        return self

    def eq(self, column: str, value: Any):
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False):
        self._order = (column, desc)
        return self

    def limit(self, n: int):
        self._limit = n
        return self

    def execute(self):
        if self.table_name in self.db.fail_on:
            raise RuntimeError("database unavailable")
        rows = [
            r for r in self.db.tables.setdefault(self.table_name, [])
            if all(str(r.get(c)) == str(v) for c, v in self.filters)
        ]
        if self._update is not None:
            for r in rows:
                r.update(self._update)
            self.db.updates.append((self.table_name, dict(self.filters), dict(self._update)))
            return _Resp([dict(r) for r in rows])
        if self._order:
            column, desc = self._order
            rows = sorted(rows, key=lambda r: str(r.get(column) or ""), reverse=desc)
        count = len(rows) if self._count else None
        if self._limit is not None:
            rows = rows[: self._limit]
        return _Resp([dict(r) for r in rows], count)


class FakeSupabase:
    def __init__(self, tables: Optional[Dict[str, List[dict]]] = None, fail_on=()):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.updates: List[tuple] = []
        self.fail_on = set(fail_on)

    def table(self, name: str) -> _Query:
        return _Query(self, name)

    def row(self, table: str, **match) -> Optional[dict]:
        for r in self.tables.get(table, []):
            if all(str(r.get(k)) == str(v) for k, v in match.items()):
                return r
        return None


# --- Faux StripeGateway ---
class FakeGateway:
    def __init__(self):
        self.calls: List[tuple] = []
        self.sessions: Dict[str, dict] = {}
        self.links: Dict[str, dict] = {}
        self.error: Optional[Exception] = None

    def _maybe_fail(self):
        if self.error is not None:
            raise self.error

    def create_checkout_session(self, **kwargs):
        self.calls.append(("create_checkout_session", kwargs))
        self._maybe_fail()
        return {"id": "cs_test_123", "url": "https://checkout.stripe.com/c/pay/cs_test_123"}

    def create_payment_link(self, **kwargs):
        self.calls.append(("create_payment_link", kwargs))
        self._maybe_fail()
        return {"id": "plink_123", "url": "https://buy.stripe.com/test_123"}

    def retrieve_checkout_session(self, session_id):
        self.calls.append(("retrieve_checkout_session", session_id))
        self._maybe_fail()
        return self.sessions[session_id]

    def retrieve_payment_link(self, link_id):
        self.calls.append(("retrieve_payment_link", link_id))
        self._maybe_fail()
        return self.links[link_id]


def sign_payload(payload: bytes, secret: str, timestamp: Optional[int] = None) -> str:
    """En-tête Stripe-Signature valide (schéma v1 = HMAC-SHA256 de 't.payload')."""
    ts = int(timestamp or time.time())
    signature = hmac.new(secret.encode(), f"{ts}.".encode() + payload, hashlib.sha256).hexdigest()
    return f"t={ts},v1={signature}"


@pytest.fixture
def signer():
    return sign_payload


@pytest.fixture
def event_payload():
    def _make(event_type: str, obj: Dict[str, Any], event_id: str = "evt_test_1") -> bytes:
        return json.dumps({"id": event_id, "object": "event", "type": event_type, "data": {"object": obj}}).encode()
    return _make


@pytest.fixture
def settings() -> Settings:
    return Settings(
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret=WEBHOOK_SECRETS,
        checkout_success_url="https://shop.test/fast.html?checkout=success&session_id={CHECKOUT_SESSION_ID}",
        checkout_cancel_url="https://shop.test/fast.html?checkout=cancel&order_id=",
        whatsapp_number="5573999366554",
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-role-key",
        manychat_api_key="mc-key",
        manychat_operator_id="999",
        manychat_flow_id="content20240101",
        manychat_api_base="https://api.manychat.test/fb",
        manychat_field_ids={
            "order_number": "11",
            "order_total": "12",
            "order_description": "13",
            "order_date": "14",
            "order_delivery_method": "15",
            "client_first_name": "16",
            "payment_method": "17",
            "client_phone": "18",
        },
        environment="test",
    )


@pytest.fixture
def make_db():
    return FakeSupabase


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase({
        "fast_orders": [
            {"id": "7", "total": 50.0, "payment_status": "awaiting_payment", "amount_paid": 0,
             "order_code": "FAST-0007", "client_phone": "73999366554", "client_name": "Maria Souza",
             "items": [{"name": "Coxinha", "quantity": 2, "price": 5}], "delivery_type": "entrega",
             "payment_method": "pix", "created_at": "2026-10-18T12:00:00+00:00"},
            {"id": "8", "total": 30.0, "payment_status": "paid_full", "amount_paid": 30.0},
        ],
        "fast_clients": [
            {"phone": "73999366554", "name": "Maria Souza", "manychat_id": None},
        ],
    })


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def clients(settings, fake_db, fake_gateway) -> VendorClients:
    c = VendorClients(settings)
    c._supabase = fake_db
    c._stripe = fake_gateway
    return c


@pytest.fixture
def app(settings, clients):
    application = create_app(settings)
    application.dependency_overrides[get_clients] = lambda: clients
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def unconfigured_client() -> Generator[TestClient, None, None]:
    """App sans aucune configuration fournisseur (clés absentes)."""
    application = create_app(Settings())
    with TestClient(application) as c:
        yield c
