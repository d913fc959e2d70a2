from flask import current_app

from library_app.clock import get_clock
from library_app.errors import Conflict, NotFound
from library_app.models.book import Book
from library_app.repositories.book_repo import BookRepo
from library_app.repositories.borrow_repo import BorrowRepo
from library_app.transaction import run_in_transaction


def _copies(value) -> int:
    try:
        total = int(value)
    except (TypeError, ValueError):
        raise ValueError("total_copies must be an integer")
    if total < 0:
        raise ValueError("total_copies must not be negative")
    return total


class BookService:
    @staticmethod
    def search_books(query=None, author=None, available=False, page: int = 1, limit: int = 10):
        """Title/isbn text match, author match, in-stock only; (books, total)."""
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be positive")
        return BookRepo.search(
            query=query, author=author, available=available,
            skip=(page - 1) * limit, take=limit,
        )

    @staticmethod
    def get_book(book_id: int):
        book = BookRepo.get(book_id)
        if not book:
            raise NotFound("book not found")
        return book

    @staticmethod
    def create_book(data: dict):
        total = _copies(data.get("total_copies", 1))

        def work():
            if data.get("isbn") and BookRepo.get_by_isbn(data["isbn"]):
                raise Conflict("isbn already exists")
            return BookRepo.create(Book(
                title=data["title"],
                author=data["author"],
                isbn=data.get("isbn"),
                total_copies=total,
                available_copies=total,
            ))

        return run_in_transaction(work, label="create_book")

    @staticmethod
    def update_book(book_id: int, data: dict):
        """
        Metadata edits plus resizing; copies on loan stay on loan,
        so available moves by the same delta as total.
        """
        total = _copies(data["total_copies"]) if "total_copies" in data else None

        def work():
            book = BookRepo.get_for_update(book_id)
            if not book:
                raise NotFound("book not found")

            isbn = data.get("isbn")
            if isbn and isbn != book.isbn and BookRepo.get_by_isbn(isbn):
                raise Conflict("isbn already exists")

            for k in ["title", "author", "isbn"]:
                if k in data:
                    setattr(book, k, data[k])

            if total is not None and total != book.total_copies and not BookRepo.resize(book, total):
                raise Conflict("total_copies below the number of copies on loan")
            return book

        return run_in_transaction(work, label="update_book")

    @staticmethod
    def delete_book(book_id: int):
        """Soft delete: the row stays for borrow history, the catalog stops showing it."""
        def work():
            book = BookRepo.get_for_update(book_id)
            if not book:
                raise NotFound("book not found")
            if BorrowRepo.count_active_for_book(book_id) > 0:
                raise Conflict("book has copies on loan")
            BookRepo.soft_delete(book, get_clock().now())

        run_in_transaction(work, label="delete_book")
        current_app.logger.info(f"[catalog] book={book_id} deleted")
