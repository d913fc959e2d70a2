from sqlalchemy import text

from library_app.clock import utcnow
from library_app.extensions import db


class Borrow(db.Model):
    __tablename__ = "borrows"
    __table_args__ = (
        # one active borrow per (user, book)
        db.Index(
            "uq_borrows_active_user_book",
            "user_id",
            "book_id",
            unique=True,
            sqlite_where=text("returned_at IS NULL"),
            postgresql_where=text("returned_at IS NULL"),
            mssql_where=text("returned_at IS NULL"),
        ),
    )

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False, index=True)

    borrowed_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    due_date = db.Column(db.DateTime, nullable=False, index=True)
    returned_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship("User", backref="borrows")
    book = db.relationship("Book", backref="borrows")

    def status_at(self, now) -> str:
        if self.returned_at is not None:
            return "returned"
        if self.due_date < now:
            return "overdue"
        return "active"
