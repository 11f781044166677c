from billing import db
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"


class Payment(db.Model):
    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)
    quotation_id = db.Column(db.Integer, db.ForeignKey("quotations.id"), nullable=False, index=True)
    customer_name = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    date = db.Column(db.DateTime, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=PaymentStatus.PENDING.value)
    gateway_order_id = db.Column(db.String(255), nullable=True)
    gateway_payment_id = db.Column(db.String(255), nullable=True)
    # 自動発行分のみ quotation_id を入れる（NULL は重複可なので手動分は制約外）
    auto_issue_key = db.Column(db.String(64), nullable=True, unique=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    quotation = relationship("Quotation")
    creator = relationship("User")

    @property
    def auto_issued(self):
        return self.auto_issue_key is not None

    def to_dict(self):
        # quotation / createdBy は読み出し時に参照先を埋め込む
        return {
            "id": self.id,
            "quotationId": self.quotation_id,
            "quotation": self.quotation.to_summary() if self.quotation else None,
            "customerName": self.customer_name,
            "amount": self.amount,
            "date": self.date.isoformat() if self.date else None,
            "status": self.status,
            "gatewayOrderId": self.gateway_order_id,
            "gatewayPaymentId": self.gateway_payment_id,
            "autoIssued": self.auto_issued,
            "createdBy": self.creator.to_summary() if self.creator else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Payment id={self.id} quotation_id={self.quotation_id} amount={self.amount} status={self.status}>"
