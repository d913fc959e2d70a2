from __future__ import annotations

from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

from library_app.errors import Conflict, NotFound, PolicyViolation
from library_app.models.user import ROLES, User
from library_app.repositories.borrow_repo import BorrowRepo
from library_app.repositories.user_repo import UserRepo
from library_app.services.auth_service import normalize_email
from library_app.transaction import run_in_transaction


class UserService:
    @staticmethod
    def get_profile(user_id: int) -> User:
        user = UserRepo.get_by_id(user_id)
        if not user:
            raise NotFound("user not found")
        return user

    @staticmethod
    def update_profile(user_id: int, data: dict) -> User:
        """
        data: email, new_password (needs current_password).
        Unknown keys are ignored.
        """
        def work():
            user = UserRepo.get_for_update(user_id)
            if not user:
                raise NotFound("user not found")

            if data.get("new_password"):
                current = data.get("current_password")
                if not current:
                    raise ValueError("current_password is required to set a new password")
                if not check_password_hash(user.password_hash, current):
                    raise PolicyViolation("current password is incorrect")
                user.password_hash = generate_password_hash(data["new_password"])

            if data.get("email"):
                email = normalize_email(data["email"])
                if email != user.email:
                    if UserRepo.get_by_email(email):
                        raise Conflict("email already in use")
                    user.email = email
            return user

        return run_in_transaction(work, label="update_profile")

    @staticmethod
    def deactivate_account(user_id: int) -> User:
        # the user row lock serializes this with borrow_book for the same user
        def work():
            user = UserRepo.get_for_update(user_id)
            if not user:
                raise NotFound("user not found")
            if BorrowRepo.count_active(user_id) > 0:
                raise Conflict("cannot deactivate while books are borrowed")
            user.is_active = False
            return user

        user = run_in_transaction(work, label="deactivate")
        current_app.logger.info(f"[user] deactivated user={user_id}")
        return user

    @staticmethod
    def update_user_role(user_id: int, role: str) -> User:
        if role not in ROLES:
            raise ValueError(f"unknown role: {role}")

        def work():
            user = UserRepo.get_for_update(user_id)
            if not user:
                raise NotFound("user not found")
            user.role = role
            return user

        user = run_in_transaction(work, label="update_role")
        current_app.logger.info(f"[user] user={user_id} role={role}")
        return user
