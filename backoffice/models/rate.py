from backoffice.extensions import db
from sqlalchemy.sql import func


class Rate(db.Model):
    """Per-minute call tariff, referenced by destination rates."""
    __tablename__ = "rates"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    connect_fee = db.Column(db.Numeric(10, 4), nullable=False, default=0)
    rate = db.Column(db.Numeric(11, 4), nullable=False)
    rate_unit = db.Column(db.String(20), nullable=False)       # e.g. "60s"
    rate_increment = db.Column(db.String(20), nullable=False)  # billing step, e.g. "6s"
    group_interval_start = db.Column(db.String(20), nullable=False, default="0s")

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "connect_fee": float(self.connect_fee),
            "rate": float(self.rate),
            "rate_unit": self.rate_unit,
            "rate_increment": self.rate_increment,
            "group_interval_start": self.group_interval_start,
        }
