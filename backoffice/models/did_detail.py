from backoffice.extensions import db
from sqlalchemy.sql import func
import uuid


def gen_did_id():
    return f"did_{uuid.uuid4().hex[:12]}"


class DidDetail(db.Model):
    __tablename__ = "did_details"

    id = db.Column(db.String(50), primary_key=True, default=gen_did_id)
    account_id = db.Column(db.String(50), nullable=False, index=True)
    did_vendor_id = db.Column(db.Integer, db.ForeignKey("did_vendors.id"), nullable=False)
    order_id = db.Column(db.String(50), db.ForeignKey("did_orders.id"), nullable=False)
    vendor_order_id = db.Column(db.String(100))

    did = db.Column(db.String(32), nullable=False, index=True)
    cnam = db.Column(db.Boolean, default=False)
    sms = db.Column(db.Boolean, default=False)
    e911 = db.Column(db.Boolean, default=False)

    tollfree_prefix = db.Column(db.String(10))
    npanxx = db.Column(db.String(10))
    ratecenter = db.Column(db.String(100))
    tier = db.Column(db.String(20))

    currency = db.Column(db.String(10), default="USD")
    price = db.Column(db.Numeric(10, 2), nullable=False)

    created_by = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, server_default=func.now())

    vendor = db.relationship("DidVendor")

    def to_dict(self):
        return {
            "id": self.id,
            "account_id": self.account_id,
            "did_vendor_id": self.did_vendor_id,
            "order_id": self.order_id,
            "vendor_order_id": self.vendor_order_id,
            "did": self.did,
            "cnam": self.cnam,
            "sms": self.sms,
            "e911": self.e911,
            "tollfree_prefix": self.tollfree_prefix,
            "npanxx": self.npanxx,
            "ratecenter": self.ratecenter,
            "tier": self.tier,
            "currency": self.currency,
            "price": float(self.price),
            "created_at": self.created_at.isoformat() + "Z" if self.created_at else None,
        }
