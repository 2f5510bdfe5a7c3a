from backoffice.extensions import db
from sqlalchemy.sql import func


class DidVendor(db.Model):
    __tablename__ = "did_vendors"

    id = db.Column(db.Integer, primary_key=True)
    vendor_name = db.Column(db.String(100), unique=True, nullable=False)
    username = db.Column(db.String(255))
    token = db.Column(db.String(255))
    status = db.Column(db.String(20), nullable=False, default="inactive", index=True)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now())

    rates = db.relationship("DidRateChart", backref="vendor", cascade="all, delete-orphan")

    @property
    def has_credentials(self):
        return bool(self.username) and bool(self.token)

    def to_dict(self, with_rates=False):
        data = {
            "id": self.id,
            "vendor_name": self.vendor_name,
            "username": self.username,
            "has_token": bool(self.token),
            "status": self.status,
            "created_at": self.created_at.isoformat() + "Z" if self.created_at else None,
        }
        if with_rates:
            data["rates"] = [r.to_dict() for r in self.rates]
        return data
