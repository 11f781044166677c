from billing import db
from datetime import datetime


class PaymentReconciliation(db.Model):
    """Auto-payment that could not be written when its quotation was accepted."""

    __tablename__ = "payment_reconciliations"

    id = db.Column(db.Integer, primary_key=True)
    quotation_id = db.Column(db.Integer, nullable=False, index=True)
    customer_name = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    acting_user_id = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.Text, nullable=True)
    attempts = db.Column(db.Integer, nullable=False, default=1)
    resolved_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    @property
    def is_open(self):
        return self.resolved_at is None

    def __repr__(self):
        return f"<PaymentReconciliation quotation_id={self.quotation_id} attempts={self.attempts} open={self.is_open}>"
