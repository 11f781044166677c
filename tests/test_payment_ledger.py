import pytest

from billing.errors import ConflictError, InvalidFieldValue, InvalidStatus, MissingRequiredField, NotFoundError
from billing.services import payment_ledger, quotation_lifecycle


@pytest.fixture
def quotation(app_ctx, user_id, quotation_payload):
    return quotation_lifecycle.create_quotation(quotation_payload(), user_id)


def payment_body(quotation_id, **overrides):
    body = {"quotationId": quotation_id, "amount": 120.5, "date": "2024-02-01T09:00:00Z", "status": "Pending"}
    body.update(overrides)
    return body


def test_create_copies_customer_from_quotation(quotation, user_id):
    payment = payment_ledger.create_payment(payment_body(quotation.id, customerName="ignored"), user_id)

    assert payment.customer_name == "Acme"
    assert payment.amount == 120.5
    assert payment.created_by == user_id
    assert payment.date.isoformat() == "2024-02-01T09:00:00"
    assert not payment.auto_issued


def test_create_accepts_string_quotation_id(quotation, user_id):
    payment = payment_ledger.create_payment(payment_body(str(quotation.id)), user_id)
    assert payment.quotation_id == quotation.id


@pytest.mark.parametrize(
    "overrides, error, field",
    [
        ({"quotationId": None}, MissingRequiredField, "quotationId"),
        ({"status": ""}, MissingRequiredField, "status"),
        ({"quotationId": "abc"}, InvalidFieldValue, "quotationId"),
        ({"quotationId": 9999}, InvalidFieldValue, "quotationId"),
        ({"quotationId": True}, InvalidFieldValue, "quotationId"),
        ({"quotationId": 1.9}, InvalidFieldValue, "quotationId"),
        ({"amount": -1}, InvalidFieldValue, "amount"),
        ({"amount": "10"}, InvalidFieldValue, "amount"),
        ({"date": "yesterday"}, InvalidFieldValue, "date"),
        ({"status": "Refunded"}, InvalidStatus, "status"),
    ],
)
def test_create_rejects_bad_input(quotation, user_id, overrides, error, field):
    with pytest.raises(error) as exc:
        payment_ledger.create_payment(payment_body(quotation.id, **overrides), user_id)
    assert exc.value.field == field
    assert payment_ledger.list_all() == []


def test_get_by_id_enriches_references(quotation, user_id):
    created = payment_ledger.create_payment(payment_body(quotation.id), user_id)

    body = payment_ledger.get_by_id(created.id).to_dict()

    assert body["quotation"] == {"id": quotation.id, "client": "Acme", "number": "Q1", "total": 200}
    assert body["createdBy"] == {"id": user_id, "name": "Test User", "email": "tester@example.com"}


def test_get_missing_payment(app_ctx):
    with pytest.raises(NotFoundError):
        payment_ledger.get_by_id(404)


def test_update_overwrites_and_clears_gateway_ids(quotation, user_id, quotation_payload):
    other = quotation_lifecycle.create_quotation(quotation_payload(client="Globex"), user_id)
    created = payment_ledger.create_payment(
        payment_body(quotation.id, gatewayOrderId="order_1", razorpayPaymentId="pay_1"), user_id
    )
    assert created.gateway_payment_id == "pay_1"

    updated = payment_ledger.update_payment(created.id, payment_body(other.id, amount=99, status="Completed"))

    assert updated.quotation_id == other.id
    assert updated.customer_name == "Globex"
    assert updated.amount == 99
    assert updated.status == "Completed"
    assert updated.gateway_order_id is None
    assert updated.gateway_payment_id is None
    assert updated.created_by == user_id


def test_update_missing_payment(quotation):
    with pytest.raises(NotFoundError):
        payment_ledger.update_payment(404, payment_body(quotation.id))


def test_moving_auto_issued_payment_onto_another_auto_issued_quotation_conflicts(app_ctx, user_id, quotation_payload):
    first = quotation_lifecycle.create_quotation(quotation_payload(status="Accepted"), user_id)
    second = quotation_lifecycle.create_quotation(quotation_payload(status="Accepted", client="Globex"), user_id)
    moving = payment_ledger.list_by_quotation_ids([first.id])[0]

    with pytest.raises(ConflictError):
        payment_ledger.update_payment(moving.id, payment_body(second.id))
    assert len(payment_ledger.list_by_quotation_ids([first.id])) == 1


def test_delete_payment(quotation, user_id):
    created = payment_ledger.create_payment(payment_body(quotation.id), user_id)
    payment_ledger.delete_payment(created.id)

    with pytest.raises(NotFoundError):
        payment_ledger.get_by_id(created.id)
    with pytest.raises(NotFoundError):
        payment_ledger.delete_payment(created.id)


def test_list_all_is_newest_first(quotation, user_id):
    ids = [payment_ledger.create_payment(payment_body(quotation.id, amount=i), user_id).id for i in range(3)]
    assert [p.id for p in payment_ledger.list_all()] == list(reversed(ids))


def test_customer_queries(app_ctx, user_id, quotation_payload):
    acme_1 = quotation_lifecycle.create_quotation(quotation_payload(client="Acme"), user_id)
    acme_2 = quotation_lifecycle.create_quotation(quotation_payload(client="Acme", number="Q2"), user_id)
    globex = quotation_lifecycle.create_quotation(quotation_payload(client="Globex"), user_id)
    for q in (acme_1, acme_2, globex):
        payment_ledger.create_payment(payment_body(q.id), user_id)

    assert payment_ledger.distinct_customers_from_quotations() == ["Acme", "Globex"]
    assert sorted(payment_ledger.quotation_ids_for_customer("Acme")) == sorted([acme_1.id, acme_2.id])
    assert {p.quotation_id for p in payment_ledger.list_by_customer("Acme")} == {acme_1.id, acme_2.id}
    assert [q["number"] for q in payment_ledger.list_quotations_for_customer("Acme")] == ["Q2", "Q1"]
    assert payment_ledger.list_by_customer("Nobody") == []
    assert payment_ledger.list_by_quotation_ids([]) == []


def test_record_gateway_order(quotation, user_id):
    created = payment_ledger.create_payment(payment_body(quotation.id), user_id)

    assert payment_ledger.record_gateway_order(created.id, "order_abc").gateway_order_id == "order_abc"
    assert payment_ledger.record_gateway_order(404, "order_abc") is None


def test_create_accepts_integral_float_quotation_id(quotation, user_id):
    payment = payment_ledger.create_payment(payment_body(float(quotation.id)), user_id)
    assert payment.quotation_id == quotation.id
