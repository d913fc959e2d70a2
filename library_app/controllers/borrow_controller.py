from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import jwt_required

from library_app.clock import get_clock
from library_app.services.borrow_service import BorrowService
from library_app.utils.decorators import current_user_id
from library_app.utils.responses import fail
from library_app.utils.serializers import borrow_json, fine_json

borrow_bp = Blueprint("borrow", __name__)


@borrow_bp.post("/")
@jwt_required()
def borrow_book():
    data = request.get_json(silent=True) or {}
    try:
        book_id = int(data["book_id"])
    except (KeyError, TypeError, ValueError):
        return fail("book_id is required")

    b = BorrowService.borrow_book(current_user_id(), book_id)
    return jsonify({
        "success": True,
        "data": {
            "id": b.id,
            "book_id": b.book_id,
            "borrowed_at": b.borrowed_at.isoformat(),
            "due_date": b.due_date.isoformat(),
        }
    }), 201


@borrow_bp.post("/<int:book_id>/return")
@jwt_required()
def return_book(book_id: int):
    b, fine = BorrowService.return_book(current_user_id(), book_id)
    return jsonify({
        "success": True,
        "message": "Book returned",
        "data": {
            "borrowing": borrow_json(b),
            "fine": fine_json(fine) if fine else None,
        }
    })


@borrow_bp.get("/history")
@jwt_required()
def history():
    status = request.args.get("status") or None
    try:
        page = int(request.args.get("page", 1))
        limit = int(request.args.get("limit", current_app.config["HISTORY_PAGE_SIZE"]))
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be positive")
        items, total = BorrowService.get_borrowing_history(
            current_user_id(), status, skip=(page - 1) * limit, take=limit
        )
    except ValueError as e:
        return fail(str(e))

    now = get_clock().now()
    return jsonify({
        "success": True,
        "data": [borrow_json(x, now) for x in items],
        "total": total,
        "page": page,
        "limit": limit,
    })
