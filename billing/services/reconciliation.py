"""Reconciliation items for accepted quotations whose payment was not written.

``record_failed_issue`` is called by the quotation lifecycle when the
auto-issuer fails; ``reconcile_pending_payments`` replays the issuer for every
open item (the issuer is idempotent, so replays never duplicate payments).
Replays read the quotation's current status, client and total; items whose
quotation is gone or no longer Accepted are closed without a payment.
"""
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from billing import db
from billing.errors import BillingError
from billing.models.payment_reconciliation import PaymentReconciliation
from billing.models.quotation import Quotation
from billing.services.notifications import notify_payment_reconciliation
from billing.services.payment_issuer import ensure_payment_for_accepted_quotation


def record_failed_issue(quotation_id, customer_name, amount, acting_user_id, reason):
    current_app.logger.error(
        "[RECONCILE] auto-payment missing quotation_id=%s customer=%s amount=%s reason=%s",
        quotation_id, customer_name, amount, reason,
    )
    item = None
    try:
        item = PaymentReconciliation.query.filter_by(quotation_id=quotation_id, resolved_at=None).first()
        if item is None:
            item = PaymentReconciliation(
                quotation_id=quotation_id,
                customer_name=customer_name,
                amount=amount,
                acting_user_id=acting_user_id,
                reason=reason,
                attempts=1,
            )
            db.session.add(item)
        else:
            item.attempts += 1
            item.reason = reason
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        item = None
        current_app.logger.exception(
            "[RECONCILE] could not persist reconciliation item quotation_id=%s: %s", quotation_id, e
        )

    notify_payment_reconciliation(quotation_id, customer_name, amount, acting_user_id, reason)
    return item


def open_items():
    return (
        PaymentReconciliation.query.filter(PaymentReconciliation.resolved_at.is_(None))
        .order_by(PaymentReconciliation.created_at.asc(), PaymentReconciliation.id.asc())
        .all()
    )


def reconcile_pending_payments():
    items = open_items()
    resolved = 0
    for item in items:
        quotation_id = item.quotation_id
        quotation = db.session.get(Quotation, quotation_id)
        if quotation is None:
            # 見積が削除済みなら発行対象なし
            current_app.logger.info("[RECONCILE] quotation_id=%s no longer exists, closing item", quotation_id)
        elif not quotation.is_accepted:
            # Accepted 以外に戻った見積には発行しない（再承認時は遷移で発行される）
            current_app.logger.info(
                "[RECONCILE] quotation_id=%s is %s, closing item without payment", quotation_id, quotation.status
            )
        else:
            # 金額・顧客名は記録時ではなく現在の見積の値を使う
            try:
                ensure_payment_for_accepted_quotation(
                    quotation_id, quotation.client, quotation.total, item.acting_user_id
                )
            except BillingError as e:
                item.attempts += 1
                item.reason = e.message
                db.session.commit()
                current_app.logger.warning(
                    "[RECONCILE] retry failed quotation_id=%s attempts=%s reason=%s",
                    quotation_id, item.attempts, e.message,
                )
                continue

        item.resolved_at = datetime.utcnow()
        db.session.commit()
        resolved += 1
        current_app.logger.info("[RECONCILE] resolved quotation_id=%s", quotation_id)

    return {"resolved": resolved, "remaining": len(items) - resolved}
