from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from billing import db
from billing.errors import ConflictError, StoreError
from billing.models.payment import Payment, PaymentStatus


def _first_payment_for(quotation_id):
    try:
        return (
            Payment.query.filter(Payment.quotation_id == quotation_id)
            .order_by(Payment.created_at.asc(), Payment.id.asc())
            .first()
        )
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("[ISSUE] payment lookup failed quotation_id=%s: %s", quotation_id, e)
        raise StoreError("Could not read payments for quotation")


def ensure_payment_for_accepted_quotation(quotation_id, customer_name, total_amount, acting_user_id):
    """Make sure a payment exists for an accepted quotation.

    Returns the existing payment when the quotation already has one, otherwise
    inserts a Pending payment for ``total_amount``. The insert carries
    ``auto_issue_key`` (unique), so a concurrent or retried call loses the race
    at the database and gets the winner's row back. Safe to call repeatedly.
    """
    existing = _first_payment_for(quotation_id)
    if existing is not None:
        current_app.logger.info(
            "[ISSUE] payment already exists quotation_id=%s payment_id=%s", quotation_id, existing.id
        )
        return existing

    payment = Payment(
        quotation_id=quotation_id,
        customer_name=customer_name,
        amount=total_amount,
        date=datetime.utcnow(),
        status=PaymentStatus.PENDING.value,
        auto_issue_key=str(quotation_id),
        created_by=acting_user_id,
    )
    db.session.add(payment)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        winner = _first_payment_for(quotation_id)
        if winner is None:
            raise ConflictError("Auto-issued payment collided but no payment was found", field="quotationId")
        current_app.logger.info(
            "[ISSUE] concurrent issue absorbed quotation_id=%s payment_id=%s", quotation_id, winner.id
        )
        return winner
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("[ISSUE] payment insert failed quotation_id=%s: %s", quotation_id, e)
        raise StoreError("Could not create payment for accepted quotation")

    current_app.logger.info(
        "[ISSUE] payment created quotation_id=%s payment_id=%s amount=%s customer=%s created_by=%s",
        quotation_id, payment.id, payment.amount, customer_name, acting_user_id,
    )
    return payment
