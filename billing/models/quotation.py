from billing import db
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum


class QuotationStatus(str, Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    ACCEPTED = "Accepted"
    DECLINED = "Declined"


class Quotation(db.Model):
    __tablename__ = "quotations"

    id = db.Column(db.Integer, primary_key=True)
    # 採番値（WI0001 ...）。作成後は変更しない
    quotation_no = db.Column(db.String(32), nullable=False, unique=True)
    # 利用者入力の参照番号（重複可）
    number = db.Column(db.String(100), nullable=False)
    client = db.Column(db.String(255), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    expire_date = db.Column(db.Date, nullable=False)
    sub_total = db.Column(db.Float, nullable=False)
    tax = db.Column(db.Float, nullable=False, default=0.0)
    total = db.Column(db.Float, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=QuotationStatus.DRAFT.value)
    year = db.Column(db.String(10), nullable=True)
    currency = db.Column(db.String(10), nullable=True)
    note = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    items = relationship(
        "QuotationItem",
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="QuotationItem.position",
    )

    @property
    def is_accepted(self):
        return self.status == QuotationStatus.ACCEPTED.value

    def to_summary(self):
        return {"id": self.id, "client": self.client, "number": self.number, "total": self.total}

    def to_dict(self):
        return {
            "id": self.id,
            "quotationNo": self.quotation_no,
            "number": self.number,
            "client": self.client,
            "date": self.date.isoformat() if self.date else None,
            "expireDate": self.expire_date.isoformat() if self.expire_date else None,
            "items": [item.to_dict() for item in self.items],
            "subTotal": self.sub_total,
            "tax": self.tax,
            "total": self.total,
            "status": self.status,
            "year": self.year,
            "currency": self.currency,
            "note": self.note,
            "createdBy": self.created_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Quotation id={self.id} quotation_no={self.quotation_no} status={self.status}>"
