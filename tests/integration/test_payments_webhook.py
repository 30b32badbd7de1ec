import pytest

WEBHOOK = "/api/webhook-stripe"


def _post(client, payload, header):
    headers = {"Content-Type": "application/json"}
    if header is not None:
        headers["stripe-signature"] = header
    return client.post(WEBHOOK, content=payload, headers=headers)


@pytest.mark.parametrize("secret", ["whsec_old", "whsec_new"])
def test_webhook_checkout_completed_updates_order(client, fake_db, signer, event_payload, secret):
    payload = event_payload("checkout.session.completed", {
        "id": "cs_1", "object": "checkout.session", "client_reference_id": "7",
        "amount_total": 5000, "payment_intent": "pi_1",
    })
    r = _post(client, payload, signer(payload, secret))
    assert r.status_code == 200
    assert r.json() == {"received": True}
    row = fake_db.row("fast_orders", id="7")
    assert row["payment_status"] == "paid_full"
    assert row["amount_paid"] == 50.0


def test_webhook_payment_intent_succeeded_full(client, fake_db, signer, event_payload):
    payload = event_payload("payment_intent.succeeded", {
        "id": "pi_7", "object": "payment_intent", "metadata": {"order_id": "7"}, "amount_received": 5000,
    })
    r = _post(client, payload, signer(payload, "whsec_new"))
    assert r.status_code == 200
    assert r.json() == {"received": True}
    row = fake_db.row("fast_orders", id="7")
    assert (row["payment_status"], row["amount_paid"]) == ("paid_full", 50.0)


def test_webhook_refund(client, fake_db, signer, event_payload):
    payload = event_payload("charge.refunded", {"id": "ch_1", "object": "charge", "metadata": {"order_id": "8"}})
    r = _post(client, payload, signer(payload, "whsec_new"))
    assert r.status_code == 200
    assert fake_db.row("fast_orders", id="8")["payment_status"] == "refunded"


def test_webhook_ignored_event_is_acknowledged(client, fake_db, signer, event_payload):
    payload = event_payload("invoice.paid", {"id": "in_1"})
    r = _post(client, payload, signer(payload, "whsec_old"))
    assert r.status_code == 200
    assert r.json() == {"received": True}
    assert fake_db.updates == []


def test_webhook_bad_signature_is_400(client, fake_db, signer, event_payload):
    payload = event_payload("checkout.session.completed", {"id": "cs_1", "client_reference_id": "7", "amount_total": 5000})
    r = _post(client, payload, signer(payload, "whsec_attacker"))
    assert r.status_code == 400
    assert r.json()["error"].startswith("Webhook Error:")
    assert fake_db.updates == []


def test_webhook_missing_signature_is_400(client, event_payload):
    r = _post(client, event_payload("charge.refunded", {}), None)
    assert r.status_code == 400


def test_webhook_handler_failure_is_500(client, fake_db, signer, event_payload):
    fake_db.fail_on.add("fast_orders")
    payload = event_payload("checkout.session.completed", {"id": "cs_1", "client_reference_id": "7", "amount_total": 5000})
    r = _post(client, payload, signer(payload, "whsec_new"))
    assert r.status_code == 500
    assert r.json() == {"error": "Webhook handler failed"}


def test_webhook_unknown_order_is_500(client, signer, event_payload):
    payload = event_payload("payment_intent.succeeded", {"id": "pi_1", "metadata": {"order_id": "404"}, "amount_received": 100})
    r = _post(client, payload, signer(payload, "whsec_new"))
    assert r.status_code == 500


def test_webhook_unconfigured_is_500(unconfigured_client, event_payload):
    r = _post(unconfigured_client, event_payload("charge.refunded", {}), "t=1,v1=x")
    assert r.status_code == 500
    assert r.json() == {"error": "STRIPE_SECRET_KEY not configured"}
