import pytest

from orderpay.payments.status import (
    EPSILON,
    PaymentStatus,
    amount_to_cents,
    cents_to_amount,
    classify,
    is_partial_payment,
)


@pytest.mark.parametrize("total", [0.01, 1.0, 12.5, 50.0, 1234.56])
def test_classify_around_total(total):
    assert classify(total, total) == PaymentStatus.PAID_FULL
    assert classify(total - 1, total) == PaymentStatus.PAID_PARTIAL
    assert classify(total + 1, total) == PaymentStatus.PAID_FULL


@pytest.mark.parametrize("paid", [0, 0.5, 10, 999])
def test_classify_zero_total_is_full(paid):
    assert classify(paid, 0) == PaymentStatus.PAID_FULL


def test_classify_negative_total_is_full():
    assert classify(0, -5) == PaymentStatus.PAID_FULL


def test_epsilon_absorbs_sub_cent_rounding():
    # 0.1 + 0.2 style artefacts from cents arithmetic
    assert classify(49.995, 50.0) == PaymentStatus.PAID_FULL
    assert classify(50.0 - EPSILON, 50.0) == PaymentStatus.PAID_FULL
    assert classify(49.99, 50.0) == PaymentStatus.PAID_PARTIAL


def test_is_partial_payment():
    assert is_partial_payment(20, 50) is True
    assert is_partial_payment(50, 50) is False
    assert is_partial_payment(0, 0) is False


def test_status_values_are_wire_strings():
    assert PaymentStatus.PAID_FULL == "paid_full"
    assert PaymentStatus.REFUNDED.value == "refunded"
    assert {s.value for s in PaymentStatus} == {"awaiting_payment", "paid_partial", "paid_full", "refunded"}


def test_cents_conversions():
    assert cents_to_amount(5000) == 50.0
    assert cents_to_amount(None) == 0
    assert amount_to_cents(12.345) == 1234
    assert amount_to_cents("19.99") == 1999
