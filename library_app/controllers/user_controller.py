# library_app/controllers/user_controller.py

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from library_app.services.user_service import UserService
from library_app.utils.decorators import current_user_id, role_required
from library_app.utils.responses import fail
from library_app.utils.serializers import user_json

user_bp = Blueprint("users", __name__)


@user_bp.get("/profile")
@jwt_required()
def get_profile():
    return jsonify({"success": True, "data": user_json(UserService.get_profile(current_user_id()))})


@user_bp.put("/profile")
@jwt_required()
def update_profile():
    data = request.get_json(silent=True) or {}
    try:
        user = UserService.update_profile(current_user_id(), data)
    except ValueError as e:
        return fail(str(e))
    return jsonify({"success": True, "message": "Profile updated", "data": user_json(user)})


@user_bp.post("/deactivate")
@jwt_required()
def deactivate():
    UserService.deactivate_account(current_user_id())
    return jsonify({"success": True, "message": "Account deactivated"})


@user_bp.put("/<int:user_id>/role")
@role_required("admin")
def update_role(user_id: int):
    data = request.get_json(silent=True) or {}
    role = (data.get("role") or "").strip().lower()
    if not role:
        return fail("role is required")
    try:
        user = UserService.update_user_role(user_id, role)
    except ValueError as e:
        return fail(str(e))
    return jsonify({"success": True, "data": user_json(user)})
