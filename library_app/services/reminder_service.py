from __future__ import annotations

from datetime import datetime, time, timedelta

from flask import current_app

from library_app.clock import get_clock, get_notifier
from library_app.extensions import db
from library_app.repositories.borrow_repo import BorrowRepo


def due_tomorrow_window(now: datetime) -> tuple[datetime, datetime]:
    """[start of tomorrow, start of the day after) in the clock's (UTC) calendar."""
    start = datetime.combine(now.date(), time.min) + timedelta(days=1)
    return start, start + timedelta(days=1)


class ReminderService:
    @staticmethod
    def scan_due_tomorrow() -> int:
        """
        Sends one due reminder per active borrow due tomorrow.
        A failing delivery is logged and skipped; the return value is the
        number of borrows processed, not the number delivered.
        """
        start, end = due_tomorrow_window(get_clock().now())
        notifier = get_notifier()

        rows = BorrowRepo.find_due_between(start, end)

        failed = 0
        for b in rows:
            try:
                notifier.notify_due(b.user.email, b.book.title, b.due_date, borrow_id=b.id)
            except Exception as e:
                failed += 1
                current_app.logger.warning(f"[reminder] borrow={b.id} notification failed: {e}")

        # notification log rows written by the sink, one commit for the whole sweep
        try:
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.exception(f"[reminder] could not store notification logs: {e}")

        current_app.logger.info(
            f"[reminder] window=[{start:%Y-%m-%d}, {end:%Y-%m-%d}) processed={len(rows)} failed={failed}"
        )
        return len(rows)
