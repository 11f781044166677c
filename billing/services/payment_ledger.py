from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from billing import db
from billing.errors import ConflictError, InvalidFieldValue, NotFoundError, StoreError
from billing.models.payment import Payment
from billing.models.quotation import Quotation
from billing.validators import clean_payment


def _payment_query():
    # 見積と作成者を読み出し時に結合する
    return Payment.query.options(joinedload(Payment.quotation), joinedload(Payment.creator))


def _newest_first(query):
    return query.order_by(Payment.created_at.desc(), Payment.id.desc())


def _commit(action, payment_id=None):
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        current_app.logger.warning("[PAYMENT] %s conflict payment_id=%s: %s", action, payment_id, e.orig)
        raise ConflictError("Payment conflicts with an existing auto-issued payment", field="quotationId")
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("[PAYMENT] %s failed payment_id=%s: %s", action, payment_id, e)
        raise StoreError(f"Could not {action} payment")


def _resolve_quotation(quotation_id):
    quotation = db.session.get(Quotation, quotation_id)
    if quotation is None:
        raise InvalidFieldValue("Invalid quotation ID", field="quotationId")
    return quotation


def list_all():
    return _newest_first(_payment_query()).all()


def get_by_id(payment_id):
    payment = _payment_query().filter(Payment.id == payment_id).first()
    if payment is None:
        raise NotFoundError("Payment not found", field="id")
    return payment


def list_by_quotation_ids(quotation_ids):
    quotation_ids = list(quotation_ids)
    if not quotation_ids:
        return []
    return _newest_first(_payment_query().filter(Payment.quotation_id.in_(quotation_ids))).all()


def quotation_ids_for_customer(customer_name):
    rows = db.session.query(Quotation.id).filter(Quotation.client == customer_name).all()
    return [row.id for row in rows]


def list_by_customer(customer_name):
    return list_by_quotation_ids(quotation_ids_for_customer(customer_name))


def list_quotations_for_customer(customer_name):
    quotations = Quotation.query.filter(Quotation.client == customer_name).order_by(Quotation.created_at.desc()).all()
    return [q.to_summary() for q in quotations]


def distinct_customers_from_quotations():
    rows = db.session.query(Quotation.client).distinct().order_by(Quotation.client).all()
    return [row.client for row in rows]


def create_payment(data, acting_user_id):
    values = clean_payment(data)
    quotation = _resolve_quotation(values["quotation_id"])

    payment = Payment(customer_name=quotation.client, created_by=acting_user_id, **values)
    db.session.add(payment)
    _commit("create")
    current_app.logger.info(
        "[PAYMENT] created id=%s quotation_id=%s amount=%s status=%s",
        payment.id, payment.quotation_id, payment.amount, payment.status,
    )
    return payment


def update_payment(payment_id, data):
    values = clean_payment(data)
    quotation = _resolve_quotation(values["quotation_id"])
    payment = db.session.get(Payment, payment_id)
    if payment is None:
        raise NotFoundError("Payment not found", field="id")

    for key, value in values.items():
        setattr(payment, key, value)
    payment.customer_name = quotation.client
    if payment.auto_issued:
        # 自動発行分は付け替え先の見積に一意キーを合わせる
        payment.auto_issue_key = str(quotation.id)
    _commit("update", payment_id)
    current_app.logger.info("[PAYMENT] updated id=%s status=%s", payment.id, payment.status)
    return payment


def delete_payment(payment_id):
    payment = db.session.get(Payment, payment_id)
    if payment is None:
        raise NotFoundError("Payment not found", field="id")
    db.session.delete(payment)
    _commit("delete", payment_id)
    current_app.logger.info("[PAYMENT] deleted id=%s", payment_id)


def record_gateway_order(payment_id, order_id):
    payment = db.session.get(Payment, payment_id)
    if payment is None:
        return None
    payment.gateway_order_id = order_id
    _commit("update", payment_id)
    return payment
