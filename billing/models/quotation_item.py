from billing import db
from sqlalchemy.orm import relationship



class QuotationItem(db.Model):
    __tablename__ = "quotation_items"

    id = db.Column(db.Integer, primary_key=True)
    quotation_id = db.Column(db.Integer, db.ForeignKey("quotations.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)  # 明細の並び順
    item = db.Column(db.String(255), nullable=False)  # 品名
    hsn_sac = db.Column(db.String(50), nullable=True)
    quantity = db.Column(db.Float, nullable=False)
    unit_price = db.Column(db.Float, nullable=False)
    sgst = db.Column(db.Float, nullable=False, default=0.0)
    igst = db.Column(db.Float, nullable=False, default=0.0)
    line_total = db.Column(db.Float, nullable=False)

    quotation = relationship("Quotation", back_populates="items")

    def to_dict(self):
        return {
            "item": self.item,
            "hsnSac": self.hsn_sac,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "sgst": self.sgst,
            "igst": self.igst,
            "lineTotal": self.line_total,
        }
