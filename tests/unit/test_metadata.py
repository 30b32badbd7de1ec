from orderpay.payments.metadata import extract_order_id, payment_reference


def test_extract_order_id_prefers_metadata():
    obj = {"metadata": {"order_id": "7"}, "client_reference_id": "99"}
    assert extract_order_id(obj) == "7"


def test_extract_order_id_falls_back_to_client_reference():
    assert extract_order_id({"metadata": {}, "client_reference_id": 12}) == "12"


def test_extract_order_id_from_expanded_payment_intent():
    session = {"metadata": {}, "payment_intent": {"id": "pi_1", "metadata": {"order_id": "33"}}}
    assert extract_order_id(session) == "33"


def test_extract_order_id_missing():
    assert extract_order_id({}) is None
    assert extract_order_id(None) is None
    assert extract_order_id({"payment_intent": "pi_1"}) is None


def test_payment_reference():
    assert payment_reference({"id": "cs_1", "payment_intent": {"id": "pi_1"}}) == "pi_1"
    assert payment_reference({"id": "cs_1", "payment_intent": "pi_2"}) == "pi_2"
    assert payment_reference({"id": "cs_1", "payment_intent": None}) == "cs_1"
    assert payment_reference({"id": "pi_3", "object": "payment_intent"}) == "pi_3"
