from backoffice.extensions import db
from sqlalchemy.sql import func


class DidRateChart(db.Model):
    __tablename__ = "did_rate_charts"

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey("did_vendors.id"), nullable=False, index=True)
    rate_type = db.Column(db.String(20), nullable=False)  # random | blocks
    rate = db.Column(db.Numeric(10, 2), nullable=False)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "vendor_id": self.vendor_id,
            "rate_type": self.rate_type,
            "rate": float(self.rate),
        }
