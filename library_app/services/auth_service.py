from flask import current_app
from flask_jwt_extended import create_access_token
from werkzeug.security import check_password_hash, generate_password_hash

from library_app.errors import Conflict
from library_app.models.user import User
from library_app.repositories.user_repo import UserRepo


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class AuthService:
    @staticmethod
    def register(username: str, email: str, password: str) -> User:
        """Self-service sign-up; accounts always start as plain users."""
        email = normalize_email(email)
        if UserRepo.get_by_username(username):
            raise Conflict("username already registered")
        if UserRepo.get_by_email(email):
            raise Conflict("email already registered")

        user = UserRepo.create(User(
            username=username,
            email=email,
            password_hash=generate_password_hash(password),
            role="user",
        ))
        current_app.logger.info(f"[auth] registered user={user.id}")
        return user

    @staticmethod
    def authenticate(username: str, password: str) -> User:
        user = UserRepo.get_by_username(username)
        if not user or not check_password_hash(user.password_hash, password):
            raise ValueError("invalid username or password")
        if not user.is_active:
            raise ValueError("account is deactivated")
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        # role travels in the token; role_required reads it back
        return create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role, "username": user.username},
        )

    @staticmethod
    def login(username: str, password: str):
        user = AuthService.authenticate(username, password)
        return AuthService.issue_token(user), user
