from backoffice.extensions import db
from sqlalchemy.sql import func
import uuid


def gen_balance_id():
    return f"bal_{uuid.uuid4().hex[:12]}"


class AccountBalance(db.Model):
    __tablename__ = "account_balances"

    __table_args__ = (
        db.CheckConstraint("amount >= 0", name="ck_account_balances_non_negative"),
    )

    id = db.Column(db.String(50), primary_key=True, default=gen_balance_id)
    account_id = db.Column(db.String(50), unique=True, nullable=False, index=True)

    amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    currency = db.Column(db.String(10), default="USD")

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            "account_id": self.account_id,
            "amount": float(self.amount),
            "currency": self.currency,
        }
