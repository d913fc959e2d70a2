from __future__ import annotations

from datetime import timedelta

from flask import current_app

from library_app.clock import get_clock
from library_app.errors import Conflict, NotFound, PolicyViolation
from library_app.models.borrow import Borrow
from library_app.models.fine import Fine, FineStatus
from library_app.repositories.book_repo import BookRepo
from library_app.repositories.borrow_repo import HISTORY_STATUSES, BorrowRepo
from library_app.repositories.fine_repo import FineRepo
from library_app.repositories.user_repo import UserRepo
from library_app.services.fines import compute_fine, compute_overdue_days
from library_app.transaction import run_in_transaction


class BorrowService:
    @staticmethod
    def borrow_book(user_id: int, book_id: int) -> Borrow:
        """
        Checks eligibility and takes one copy, in one transaction.
        The user row and the book row stay locked until commit, so no other
        borrow/return for the same user or book lands between check and write.
        """
        cfg = current_app.config

        def work():
            now = get_clock().now()

            user = UserRepo.get_for_update(user_id)
            if not user:
                raise NotFound("user not found")

            book = BookRepo.get_for_update(book_id)
            if not book:
                raise NotFound("book not found")

            if book.available_copies <= 0:
                raise Conflict("no copies available")

            if BorrowRepo.get_active(user_id, book_id):
                raise Conflict("already borrowed")

            max_active = cfg["MAX_ACTIVE_BORROWS"]
            if BorrowRepo.count_active(user_id) >= max_active:
                raise PolicyViolation(f"borrow limit reached ({max_active} active borrows)")

            if FineRepo.has_pending(user_id):
                raise PolicyViolation("unpaid fines")

            if not user.is_active:
                raise PolicyViolation("account deactivated")

            # conditional decrement: the row lock above is not enough on every backend
            if not BookRepo.decrement_available(book):
                raise Conflict("no copies available")

            borrow = Borrow(
                user_id=user_id,
                book_id=book_id,
                borrowed_at=now,
                due_date=now + timedelta(days=cfg["BORROW_DURATION_DAYS"]),
            )
            return BorrowRepo.create(borrow)

        borrow = run_in_transaction(work, label="borrow")
        current_app.logger.info(
            f"[borrow] user={user_id} book={book_id} borrow={borrow.id} due={borrow.due_date}"
        )
        return borrow

    @staticmethod
    def return_book(user_id: int, book_id: int) -> tuple[Borrow, Fine | None]:
        """
        Closes the caller's active borrow of book_id.
        Returns (borrow, fine); fine is None when the copy came back on time.
        """
        rate = current_app.config["FINE_RATE_PER_DAY"]

        def work():
            now = get_clock().now()

            borrow = BorrowRepo.get_active(user_id, book_id, for_update=True)
            if not borrow:
                raise NotFound("no active borrow for this book")

            # a concurrent return may have closed it after our read
            if not BorrowRepo.mark_returned(borrow, now):
                raise NotFound("no active borrow for this book")

            fine = None
            days = compute_overdue_days(borrow.due_date, now)
            if days > 0:
                fine = FineRepo.create(Fine(
                    user_id=user_id,
                    borrow_id=borrow.id,
                    days_overdue=days,
                    daily_fee=rate,
                    amount=compute_fine(borrow.due_date, now, rate),
                    status=FineStatus.PENDING,
                    created_at=now,
                    updated_at=now,
                ))

            if not BookRepo.increment_available(borrow.book_id):
                # stock already full (catalog edited while on loan); keep available <= total
                current_app.logger.warning(
                    f"[borrow] book={borrow.book_id} already at total copies on return of borrow={borrow.id}"
                )

            return borrow, fine

        borrow, fine = run_in_transaction(work, label="return")
        if fine is not None:
            current_app.logger.info(
                f"[borrow] returned borrow={borrow.id} late days={fine.days_overdue} fine={fine.amount}"
            )
        else:
            current_app.logger.info(f"[borrow] returned borrow={borrow.id} on time")
        return borrow, fine

    @staticmethod
    def get_borrowing_history(user_id: int, status: str | None = None, skip: int = 0, take: int | None = None):
        """
        status: None (all), "active", "overdue" (active and past due), "returned".
        Newest first; returns (items, total) where total ignores skip/take.
        """
        if status is not None and status not in HISTORY_STATUSES:
            raise ValueError(f"unknown status: {status}")
        if skip < 0 or (take is not None and take < 0):
            raise ValueError("skip/take must not be negative")

        now = get_clock().now()
        return BorrowRepo.list_by_user(user_id, status, now, skip=skip, take=take)
