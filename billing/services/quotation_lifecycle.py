"""Quotation create/update/delete and the Accepted → payment trigger."""
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from billing import db
from billing.errors import BillingError, ConflictError, NotFoundError, StoreError
from billing.models.payment import Payment
from billing.models.payment_reconciliation import PaymentReconciliation
from billing.models.quotation import Quotation
from billing.models.quotation_item import QuotationItem
from billing.services.payment_issuer import ensure_payment_for_accepted_quotation
from billing.services.reconciliation import record_failed_issue
from billing.services.sequence import allocate_next, allocation_lock
from billing.validators import clean_quotation

# 採番衝突時の再試行は1回まで
MAX_ALLOCATION_ATTEMPTS = 2


def _build_items(lines):
    return [QuotationItem(**line) for line in lines]


def _issue_payment(quotation, acting_user_id):
    # 支払い発行の失敗で見積をロールバックしない（照合レコードに残す）
    quotation_id = quotation.id
    client = quotation.client
    total = quotation.total
    try:
        return ensure_payment_for_accepted_quotation(quotation_id, client, total, acting_user_id)
    except BillingError as e:
        record_failed_issue(quotation_id, client, total, acting_user_id, e.message)
        return None


def list_quotations():
    return Quotation.query.order_by(Quotation.created_at.desc(), Quotation.id.desc()).all()


def get_quotation(quotation_id):
    quotation = db.session.get(Quotation, quotation_id)
    if quotation is None:
        raise NotFoundError("Quotation not found", field="id")
    return quotation


def create_quotation(data, acting_user_id):
    values = clean_quotation(data)
    lines = values.pop("items")
    current_app.logger.info(
        "[QUOTE] create number=%s client=%s status=%s items=%s user_id=%s",
        values["number"], values["client"], values["status"], len(lines), acting_user_id,
    )

    quotation = None
    with allocation_lock:
        for attempt in range(1, MAX_ALLOCATION_ATTEMPTS + 1):
            quotation = Quotation(quotation_no=allocate_next(), created_by=acting_user_id, **values)
            quotation.items = _build_items(lines)
            db.session.add(quotation)
            try:
                db.session.commit()
                break
            except IntegrityError as e:
                db.session.rollback()
                current_app.logger.warning(
                    "[SEQ] quotation_no collision quotation_no=%s attempt=%s: %s",
                    quotation.quotation_no, attempt, e.orig,
                )
                if attempt == MAX_ALLOCATION_ATTEMPTS:
                    raise ConflictError("Quotation number is already taken, please retry", field="quotationNo")
            except SQLAlchemyError as e:
                db.session.rollback()
                current_app.logger.exception("[QUOTE] insert failed: %s", e)
                raise StoreError("Could not save quotation")

    current_app.logger.info("[QUOTE] created id=%s quotation_no=%s", quotation.id, quotation.quotation_no)

    if quotation.is_accepted:
        current_app.logger.info("[QUOTE] created as Accepted, issuing payment quotation_id=%s", quotation.id)
        _issue_payment(quotation, acting_user_id)

    return quotation


def update_quotation(quotation_id, data, acting_user_id):
    values = clean_quotation(data)
    lines = values.pop("items")
    quotation = get_quotation(quotation_id)

    was_accepted = quotation.is_accepted
    current_app.logger.info(
        "[QUOTE] update id=%s status %s -> %s user_id=%s", quotation.id, quotation.status, values["status"], acting_user_id
    )

    # quotation_no / created_by は更新しない
    for key, value in values.items():
        setattr(quotation, key, value)
    quotation.items = _build_items(lines)

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("[QUOTE] update failed id=%s: %s", quotation_id, e)
        raise StoreError("Could not update quotation")

    if quotation.is_accepted and not was_accepted:
        current_app.logger.info("[QUOTE] status changed to Accepted, issuing payment quotation_id=%s", quotation.id)
        _issue_payment(quotation, acting_user_id)

    return quotation


def delete_quotation(quotation_id):
    quotation = get_quotation(quotation_id)
    try:
        deleted_payments = Payment.query.filter(Payment.quotation_id == quotation.id).delete(synchronize_session=False)
        PaymentReconciliation.query.filter(
            PaymentReconciliation.quotation_id == quotation.id
        ).delete(synchronize_session=False)
        db.session.delete(quotation)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("[QUOTE] delete failed id=%s: %s", quotation_id, e)
        raise StoreError("Could not delete quotation")

    current_app.logger.info("[QUOTE] deleted id=%s payments=%s", quotation_id, deleted_payments)
    return deleted_payments
