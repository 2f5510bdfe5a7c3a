from backoffice.extensions import db
from sqlalchemy.sql import func
import uuid


def gen_order_id():
    return f"DID-{uuid.uuid4().hex[:10]}"


ORDER_PENDING = "pending"
ORDER_DEBITED = "debited"
ORDER_COMPLETED = "completed"
ORDER_FAILED = "failed"
ORDER_REFUNDED = "refunded"


class DidOrder(db.Model):
    __tablename__ = "did_orders"

    __table_args__ = (
        db.Index("idx_did_orders_account_id", "account_id"),
        db.Index("idx_did_orders_status", "status"),
    )

    id = db.Column(db.String(50), primary_key=True, default=gen_order_id)
    request_id = db.Column(db.String(100), unique=True, nullable=False)

    account_id = db.Column(db.String(50), nullable=False)
    vendor_id = db.Column(db.Integer, db.ForeignKey("did_vendors.id"), nullable=False)
    vendor_order_id = db.Column(db.String(100))

    quantity = db.Column(db.Integer, nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=ORDER_PENDING)

    debit_transaction_id = db.Column(db.String(50), db.ForeignKey("wallet_transactions.id"))
    refund_transaction_id = db.Column(db.String(50), db.ForeignKey("wallet_transactions.id"))
    error = db.Column(db.Text)

    created_by = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now())

    vendor = db.relationship("DidVendor")
    numbers = db.relationship("DidDetail", backref="order", order_by="DidDetail.did")

    def to_dict(self, with_numbers=False):
        data = {
            "id": self.id,
            "request_id": self.request_id,
            "account_id": self.account_id,
            "vendor_id": self.vendor_id,
            "vendor_order_id": self.vendor_order_id,
            "quantity": self.quantity,
            "amount": float(self.amount),
            "status": self.status,
            "debit_transaction_id": self.debit_transaction_id,
            "refund_transaction_id": self.refund_transaction_id,
            "error": self.error,
            "created_at": self.created_at.isoformat() + "Z" if self.created_at else None,
        }
        if with_numbers:
            data["numbers"] = [n.to_dict() for n in self.numbers]
        return data
