from __future__ import annotations

from sqlalchemy import or_, update

from library_app.extensions import db
from library_app.models.book import Book


class BookRepo:
    @staticmethod
    def _listed():
        return Book.query.filter(Book.deleted_at.is_(None))

    @staticmethod
    def search(query: str | None = None, author: str | None = None, available: bool = False,
               skip: int = 0, take: int = 10):
        q = BookRepo._listed()
        if query:
            q = q.filter(or_(Book.title.ilike(f"%{query}%"), Book.isbn.contains(query)))
        if author:
            q = q.filter(Book.author.ilike(f"%{author}%"))
        if available:
            q = q.filter(Book.available_copies > 0)

        total = q.count()
        books = q.order_by(Book.title.asc(), Book.id.asc()).offset(skip).limit(take).all()
        return books, total

    @staticmethod
    def get(book_id: int):
        return BookRepo._listed().filter(Book.id == book_id).first()

    @staticmethod
    def get_for_update(book_id: int):
        # SELECT ... FOR UPDATE (WITH (UPDLOCK, ROWLOCK) on MSSQL)
        return (
            BookRepo._listed()
            .filter(Book.id == book_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    @staticmethod
    def get_by_isbn(isbn: str):
        # deleted books keep their isbn
        return Book.query.filter_by(isbn=isbn).first()

    @staticmethod
    def create(book: Book):
        db.session.add(book)
        db.session.flush()
        return book

    @staticmethod
    def soft_delete(book: Book, when):
        book.deleted_at = when
        db.session.flush()

    @staticmethod
    def decrement_available(book: Book) -> bool:
        """Takes one copy off the shelf; False when none is left at write time."""
        result = db.session.execute(
            update(Book)
            .where(Book.id == book.id, Book.available_copies > 0)
            .values(available_copies=Book.available_copies - 1)
            .execution_options(synchronize_session=False)
        )
        db.session.expire(book, ["available_copies"])
        return result.rowcount == 1

    @staticmethod
    def increment_available(book_id: int) -> bool:
        result = db.session.execute(
            update(Book)
            .where(Book.id == book_id, Book.available_copies < Book.total_copies)
            .values(available_copies=Book.available_copies + 1)
            .execution_options(synchronize_session=False)
        )
        book = db.session.identity_map.get(db.session.identity_key(Book, book_id))
        if book is not None:
            db.session.expire(book, ["available_copies"])
        return result.rowcount == 1

    @staticmethod
    def resize(book: Book, total_copies: int) -> bool:
        """Changes the stock size while keeping the number of copies on loan."""
        delta = total_copies - book.total_copies
        result = db.session.execute(
            update(Book)
            .where(Book.id == book.id, Book.available_copies + delta >= 0)
            .values(
                total_copies=total_copies,
                available_copies=Book.available_copies + delta,
            )
            .execution_options(synchronize_session=False)
        )
        db.session.expire(book, ["total_copies", "available_copies"])
        return result.rowcount == 1
