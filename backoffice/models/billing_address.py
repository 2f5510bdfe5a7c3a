from backoffice.extensions import db
from sqlalchemy.sql import func


class BillingAddress(db.Model):
    __tablename__ = "billing_addresses"

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.String(50), nullable=False, index=True)

    fullname = db.Column(db.String(255), nullable=False)
    contact_no = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(255), nullable=False)
    zip = db.Column(db.String(20), nullable=False)
    city = db.Column(db.String(100), nullable=False)
    state = db.Column(db.String(100), nullable=False)
    country = db.Column(db.String(100), nullable=False)
    default = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "account_id": self.account_id,
            "fullname": self.fullname,
            "contact_no": self.contact_no,
            "email": self.email,
            "address": self.address,
            "zip": self.zip,
            "city": self.city,
            "state": self.state,
            "country": self.country,
            "default": self.default,
        }
