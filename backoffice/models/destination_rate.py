from backoffice.extensions import db
from sqlalchemy.sql import func


class DestinationRate(db.Model):
    __tablename__ = "destination_rates"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    destination_id = db.Column(db.Integer, db.ForeignKey("destinations.id"), nullable=False, index=True)
    rate_id = db.Column(db.Integer, db.ForeignKey("rates.id"), nullable=False, index=True)
    rounding_method = db.Column(db.String(20), nullable=False)
    rounding_decimals = db.Column(db.Integer, nullable=False)
    max_cost = db.Column(db.Numeric(10, 2), nullable=False)
    max_cost_strategy = db.Column(db.String(20), nullable=False)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now())

    destination = db.relationship("Destination")
    rate = db.relationship("Rate")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "destination_id": self.destination_id,
            "rate_id": self.rate_id,
            "rounding_method": self.rounding_method,
            "rounding_decimals": self.rounding_decimals,
            "max_cost": float(self.max_cost),
            "max_cost_strategy": self.max_cost_strategy,
            "destination": self.destination.to_dict() if self.destination else None,
        }
