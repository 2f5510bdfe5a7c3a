from backoffice.extensions import db
from sqlalchemy.sql import func
import uuid


def gen_tx_id():
    return f"tx_{uuid.uuid4().hex[:12]}"


class WalletTransaction(db.Model):
    """Append-only ledger row. One per balance mutation."""

    __tablename__ = "wallet_transactions"

    __table_args__ = (
        db.Index("idx_wallet_transactions_account_id", "account_id"),
        db.Index("idx_wallet_transactions_reference", "reference_type", "reference_id"),
    )

    id = db.Column(db.String(50), primary_key=True, default=gen_tx_id)
    account_id = db.Column(db.String(50), nullable=False)

    amount = db.Column(db.Numeric(10, 2), nullable=False)
    transaction_type = db.Column(db.String(10), nullable=False)  # debit | credit

    payment_gateway = db.Column(db.String(50))
    payment_gateway_session_id = db.Column(db.String(255))
    payment_gateway_transaction_id = db.Column(db.String(255), index=True)
    invoice_url = db.Column(db.String(1024))
    descriptor = db.Column(db.String(255), nullable=False)

    reference_type = db.Column(db.String(50))
    reference_id = db.Column(db.String(50))

    created_by = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, server_default=func.now())

    def to_dict(self):
        return {
            "id": self.id,
            "account_id": self.account_id,
            "amount": float(self.amount),
            "transaction_type": self.transaction_type,
            "payment_gateway": self.payment_gateway,
            "payment_gateway_session_id": self.payment_gateway_session_id,
            "payment_gateway_transaction_id": self.payment_gateway_transaction_id,
            "invoice_url": self.invoice_url,
            "descriptor": self.descriptor,
            "reference_type": self.reference_type,
            "reference_id": self.reference_id,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() + "Z" if self.created_at else None,
        }
