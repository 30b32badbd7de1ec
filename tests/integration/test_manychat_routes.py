from unittest.mock import MagicMock

from orderpay.notifications import manychat


def _ok_response():
    resp = MagicMock()
    resp.status_code = 200
    resp.is_success = True
    resp.json.return_value = {"status": "success"}
    return resp


# --- /api/notify-manychat ---
def test_notify_manychat_success(client, monkeypatch):
    post = MagicMock(return_value=_ok_response())
    monkeypatch.setattr(manychat.httpx, "post", post)

    r = client.post("/api/notify-manychat", json={"order": {"id": 7, "order_code": "FAST-0007", "total": 50}})
    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert post.call_count == 2


def test_notify_manychat_flow_failure_is_still_200(client, monkeypatch):
    bad = MagicMock(status_code=404, is_success=False)
    bad.json.return_value = {"message": "Flow not found"}
    monkeypatch.setattr(manychat.httpx, "post", MagicMock(side_effect=[_ok_response(), bad]))

    r = client.post("/api/notify-manychat", json={"order": {"id": 7}})
    assert r.status_code == 200
    assert r.json() == {"success": False, "error": "Flow not found"}


def test_notify_manychat_validation(client, monkeypatch):
    post = MagicMock()
    monkeypatch.setattr(manychat.httpx, "post", post)

    assert client.post("/api/notify-manychat", json={}).json() == {"success": False, "error": "No order data provided"}
    assert client.post("/api/notify-manychat", content=b"{", headers={"Content-Type": "application/json"}).json()["error"] \
        == "No order data provided"
    r = client.post("/api/notify-manychat", json={"order": {"total": 50}})
    assert r.status_code == 200
    assert r.json() == {"success": False, "error": "Order missing identifier (id or order_code)"}
    post.assert_not_called()


def test_notify_manychat_not_configured(unconfigured_client):
    r = unconfigured_client.post("/api/notify-manychat", json={"order": {"id": 7}})
    assert r.status_code == 200
    assert r.json() == {"success": False, "error": "ManyChat not configured"}


def test_notify_manychat_other_method(client):
    r = client.get("/api/notify-manychat")
    assert r.status_code == 200
    assert r.json() == {"success": False, "error": "Method not allowed. Use POST."}


# --- /api/manychat-client ---
def test_manychat_client_register_then_lookup(client, fake_db):
    r = client.post("/api/manychat-client", json={"id_manychat": "mc_1", "mensagem_do_pedido": "Pedido FAST-0007"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["newly_registered"] is True
    assert body["order"]["client_first_name"] == "Maria"

    r = client.get("/api/manychat-client", params={"id_manychat": "mc_1"})
    assert r.status_code == 200
    body = r.json()
    assert body["registered"] is True
    assert body["orders_count"] == 1
    assert body["order"]["order_code"] == "FAST-0007"


def test_manychat_client_unknown(client):
    r = client.get("/api/manychat-client", params={"id_manychat": "mc_unknown"})
    assert r.status_code == 200
    assert r.json() == {"success": False, "error": "Client not found", "registered": False}


def test_manychat_client_requires_id(client):
    assert client.get("/api/manychat-client").json() == {"success": False, "error": "id_manychat is required"}
    assert client.post("/api/manychat-client", json={}).json() == {"success": False, "error": "id_manychat is required"}


def test_manychat_client_order_not_found(client):
    r = client.post("/api/manychat-client", json={"id_manychat": "mc_2", "mensagem_do_pedido": "FAST-9999"})
    assert r.status_code == 200
    assert r.json() == {"success": False, "error": "Order FAST-9999 not found"}


def test_manychat_client_database_error_is_200(client, fake_db):
    fake_db.fail_on.add("fast_clients")
    r = client.get("/api/manychat-client", params={"id_manychat": "mc_1"})
    assert r.status_code == 200
    assert r.json()["success"] is False
    assert r.json()["error"].startswith("Internal error:")


def test_manychat_client_unconfigured(unconfigured_client):
    r = unconfigured_client.get("/api/manychat-client", params={"id_manychat": "mc_1"})
    assert r.json() == {"success": False, "error": "Database not configured"}


def test_manychat_client_other_method(client):
    r = client.delete("/api/manychat-client")
    assert r.status_code == 200
    assert r.json() == {"success": False, "error": "Use GET or POST method"}
