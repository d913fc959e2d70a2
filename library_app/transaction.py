from __future__ import annotations

import time
from typing import Callable, TypeVar

from flask import current_app
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from library_app.errors import Conflict, LibraryError, StoreFailure
from library_app.extensions import db

T = TypeVar("T")

# serialization_failure, deadlock_detected
TRANSIENT_SQLSTATES = {"40001", "40P01"}

RETRY_BACKOFF_SECONDS = 0.05


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = getattr(exc, "orig", None)
    if orig is None:
        return None
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code
    # pyodbc: args = (sqlstate, message)
    args = getattr(orig, "args", ())
    if args and isinstance(args[0], str):
        return args[0]
    return None


def is_transient(exc: DBAPIError) -> bool:
    if isinstance(exc, OperationalError):
        return True
    return _sqlstate(exc) in TRANSIENT_SQLSTATES


def _is_active_borrow_clash(exc: IntegrityError) -> bool:
    text = str(exc.orig)
    return "uq_borrows_active_user_book" in text or "borrows.user_id, borrows.book_id" in text


def run_in_transaction(work: Callable[[], T], label: str = "tx") -> T:
    """
    Runs work() and commits, as one unit.
    - LibraryError: rollback, surfaced as is, never retried
    - store aborted the transaction: rollback, work() runs again from scratch
    - any other store error: rollback, opaque StoreFailure
    """
    attempts = max(1, int(current_app.config.get("TX_MAX_RETRIES", 3)))

    for attempt in range(1, attempts + 1):
        try:
            result = work()
            db.session.commit()
            return result
        except LibraryError:
            db.session.rollback()
            raise
        except IntegrityError as e:
            db.session.rollback()
            if _is_active_borrow_clash(e):
                raise Conflict("already borrowed") from e
            current_app.logger.exception(f"[tx] {label} integrity error: {e}")
            raise StoreFailure() from e
        except DBAPIError as e:
            db.session.rollback()
            if not is_transient(e):
                current_app.logger.exception(f"[tx] {label} store error: {e}")
                raise StoreFailure() from e
            current_app.logger.warning(
                f"[tx] {label} aborted by store (attempt {attempt}/{attempts}): {e}"
            )
            if attempt < attempts:
                time.sleep(RETRY_BACKOFF_SECONDS * attempt)
        except Exception:
            db.session.rollback()
            raise

    current_app.logger.error(f"[tx] {label} gave up after {attempts} attempts")
    raise StoreFailure()
