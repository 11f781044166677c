from flask import current_app
from datetime import datetime

def notify_payment_reconciliation(quotation_id, customer_name, amount, acting_user_id, reason):
    """
    Notify that an accepted quotation has no auto-issued payment yet.
    Args:
        quotation_id: Quotation id
        customer_name: client of the quotation
        amount: payment amount that should have been issued
        acting_user_id: user who accepted the quotation
        reason: failure message
    Behavior:
        - Log a one-line [NOTIFY] event
        - Never break main flow (catch and log all exceptions)
    """
    try:
        payload = {
            'quotation_id': quotation_id,
            'customer_name': customer_name,
            'amount': amount,
            'acting_user_id': acting_user_id,
            'reason': reason,
            'reason_len': len(reason) if reason else 0,
            'timestamp_utc': datetime.utcnow().isoformat(),
        }
        current_app.logger.warning(
            '[NOTIFY] action=reconcile quotation_id=%s customer=%s amount=%s actor_user_id=%s',
            payload['quotation_id'], payload['customer_name'], payload['amount'], payload['acting_user_id']
        )
        return payload
    except Exception as e:
        current_app.logger.exception('[NOTIFY] Notification failed: %s', e)
        return None
