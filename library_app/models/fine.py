from library_app.clock import utcnow
from library_app.extensions import db


class FineStatus:
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"

    ALL = (PENDING, PAID, FAILED)


class PaymentMethod:
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    CASH = "CASH"

    ALL = (CREDIT_CARD, DEBIT_CARD, CASH)


class Fine(db.Model):
    __tablename__ = "fines"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    borrow_id = db.Column(db.Integer, db.ForeignKey("borrows.id"), unique=True, nullable=False, index=True)

    days_overdue = db.Column(db.Integer, nullable=False)
    daily_fee = db.Column(db.Numeric(10, 2), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)

    status = db.Column(db.String(20), nullable=False, default=FineStatus.PENDING, index=True)
    payment_method = db.Column(db.String(20), nullable=True)
    paid_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = db.relationship("User", backref="fines")
    borrow = db.relationship("Borrow", backref=db.backref("fine", uselist=False))
