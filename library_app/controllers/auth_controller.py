from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt

from library_app.errors import NotFound
from library_app.repositories.user_repo import UserRepo
from library_app.services.auth_service import AuthService
from library_app.utils.decorators import current_user_id
from library_app.utils.responses import fail

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/register", endpoint="auth_register")
def register():
    data = request.get_json(silent=True) or {}

    username = (data.get("username") or "").strip()
    email = (data.get("email") or "").strip()
    password = (data.get("password") or "").strip()

    if not username or not email or not password:
        return fail("username/email/password are required")

    user = AuthService.register(username=username, email=email, password=password)
    return jsonify({"success": True, "id": user.id, "username": user.username, "role": user.role}), 201


@auth_bp.post("/login", endpoint="auth_login")
def login():
    data = request.get_json(silent=True) or {}
    try:
        token, user = AuthService.login(
            (data.get("username") or "").strip(),
            (data.get("password") or "").strip()
        )
    except ValueError as e:
        return fail(str(e), 401)

    return jsonify({
        "success": True,
        "access_token": token,
        "user": {"id": user.id, "username": user.username, "role": user.role}
    })


@auth_bp.get("/me", endpoint="auth_me")
@jwt_required()
def me():
    user = UserRepo.get_by_id(current_user_id())
    if not user:
        raise NotFound("user not found")

    return jsonify({
        "success": True,
        "user": {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "role": get_jwt().get("role", user.role)
        }
    })
