# library_app/controllers/fine_controller.py

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from library_app.services.payment_service import PaymentService
from library_app.utils.decorators import current_user_id
from library_app.utils.responses import fail
from library_app.utils.serializers import fine_json

fine_bp = Blueprint("fines", __name__)


@fine_bp.get("/my")
@jwt_required()
def my_fines():
    fines, total = PaymentService.get_fines(current_user_id())
    return jsonify({
        "success": True,
        "data": [fine_json(f) for f in fines],
        "total": float(total),
    })


@fine_bp.post("/<int:fine_id>/pay")
@jwt_required()
def pay_fine(fine_id: int):
    data = request.get_json(silent=True) or {}
    method = (data.get("payment_method") or "").strip().upper()
    if not method:
        return fail("payment_method is required")

    fine = PaymentService.pay_fine(current_user_id(), fine_id, method)
    return jsonify({"success": True, "data": fine_json(fine)})


@fine_bp.get("/history")
@jwt_required()
def payment_history():
    try:
        fines, total = PaymentService.get_payment_history(
            current_user_id(), request.args.get("status") or None
        )
    except ValueError as e:
        return fail(str(e))

    return jsonify({
        "success": True,
        "data": [fine_json(f) for f in fines],
        "total": float(total),
    })
