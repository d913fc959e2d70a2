from __future__ import annotations

from decimal import Decimal

from flask import current_app

from library_app.clock import get_clock
from library_app.errors import NotFound, PolicyViolation
from library_app.models.fine import Fine, FineStatus, PaymentMethod
from library_app.repositories.fine_repo import FineRepo
from library_app.transaction import run_in_transaction


def _total(fines) -> Decimal:
    return sum((Decimal(f.amount) for f in fines), Decimal("0.00"))


class PaymentService:
    @staticmethod
    def get_fines(user_id: int):
        fines = FineRepo.list_by_user(user_id, FineStatus.PENDING)
        return fines, _total(fines)

    @staticmethod
    def pay_fine(user_id: int, fine_id: int, payment_method: str) -> Fine:
        if payment_method not in PaymentMethod.ALL:
            raise PolicyViolation(f"unsupported payment method: {payment_method}")

        def work():
            fine = FineRepo.get_pending_for_update(user_id, fine_id)
            if not fine:
                raise NotFound("fine not found or already paid")

            fine.status = FineStatus.PAID
            fine.payment_method = payment_method
            fine.paid_at = get_clock().now()
            return fine

        fine = run_in_transaction(work, label="pay_fine")
        current_app.logger.info(f"[payment] user={user_id} fine={fine.id} paid via {payment_method}")
        return fine

    @staticmethod
    def get_payment_history(user_id: int, status: str | None = None):
        if status:
            status = status.upper()
            if status not in FineStatus.ALL:
                raise ValueError(f"unknown status: {status}")
        fines = FineRepo.list_by_user(user_id, status)
        return fines, _total(fines)
