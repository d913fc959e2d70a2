from datetime import datetime

from sqlalchemy import update
from sqlalchemy.orm import joinedload

from library_app.extensions import db
from library_app.models.borrow import Borrow

HISTORY_STATUSES = ("active", "overdue", "returned")


class BorrowRepo:
    @staticmethod
    def get_active(user_id: int, book_id: int, for_update: bool = False):
        q = Borrow.query.filter(
            Borrow.user_id == user_id,
            Borrow.book_id == book_id,
            Borrow.returned_at.is_(None),
        )
        if for_update:
            q = q.with_for_update().populate_existing()
        return q.first()

    @staticmethod
    def count_active(user_id: int) -> int:
        return Borrow.query.filter(
            Borrow.user_id == user_id,
            Borrow.returned_at.is_(None),
        ).count()

    @staticmethod
    def count_active_for_book(book_id: int) -> int:
        return Borrow.query.filter(
            Borrow.book_id == book_id,
            Borrow.returned_at.is_(None),
        ).count()

    @staticmethod
    def list_by_user(user_id: int, status: str | None, now: datetime, skip: int = 0, take: int | None = None):
        q = Borrow.query.filter(Borrow.user_id == user_id)

        if status == "active":
            q = q.filter(Borrow.returned_at.is_(None))
        elif status == "overdue":
            q = q.filter(Borrow.returned_at.is_(None), Borrow.due_date < now)
        elif status == "returned":
            q = q.filter(Borrow.returned_at.isnot(None))

        total = q.count()

        # id breaks ties so pages never overlap
        q = (
            q.options(joinedload(Borrow.book), joinedload(Borrow.fine))
            .order_by(Borrow.borrowed_at.desc(), Borrow.id.desc())
            .offset(skip)
        )
        if take is not None:
            q = q.limit(take)
        return q.all(), total

    @staticmethod
    def create(borrow: Borrow):
        db.session.add(borrow)
        db.session.flush()
        return borrow

    @staticmethod
    def mark_returned(borrow: Borrow, returned_at: datetime) -> bool:
        """Write-once: only an active row can be closed."""
        result = db.session.execute(
            update(Borrow)
            .where(Borrow.id == borrow.id, Borrow.returned_at.is_(None))
            .values(returned_at=returned_at)
            .execution_options(synchronize_session=False)
        )
        db.session.expire(borrow, ["returned_at"])
        return result.rowcount == 1

    @staticmethod
    def find_due_between(start: datetime, end: datetime):
        return (
            Borrow.query
            .options(joinedload(Borrow.user), joinedload(Borrow.book))
            .filter(
                Borrow.returned_at.is_(None),
                Borrow.due_date >= start,
                Borrow.due_date < end,
            )
            .order_by(Borrow.due_date.asc(), Borrow.id.asc())
            .all()
        )
