# library_app/controllers/book_controller.py

from flask import Blueprint, current_app, request, jsonify

from library_app.services.book_service import BookService
from library_app.utils.decorators import role_required
from library_app.utils.responses import fail
from library_app.utils.serializers import book_json

book_bp = Blueprint("books", __name__)

TRUTHY = {"1", "true", "yes", "on"}


@book_bp.get("/")
def search_books():
    """?q= (title or isbn) &author= &available=true &page= &limit="""
    try:
        page = int(request.args.get("page", 1))
        limit = int(request.args.get("limit", current_app.config["HISTORY_PAGE_SIZE"]))
        books, total = BookService.search_books(
            query=(request.args.get("q") or "").strip() or None,
            author=(request.args.get("author") or "").strip() or None,
            available=(request.args.get("available") or "").lower() in TRUTHY,
            page=page,
            limit=limit,
        )
    except ValueError as e:
        return fail(str(e))

    return jsonify({
        "success": True,
        "data": [book_json(b) for b in books],
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": -(-total // limit),
        },
    })


@book_bp.get("/<int:book_id>")
def get_book(book_id: int):
    return jsonify({"success": True, "data": book_json(BookService.get_book(book_id))})


@book_bp.post("/")
@role_required("admin")
def create_book():
    data = request.get_json(silent=True) or {}
    try:
        b = BookService.create_book(data)
        return jsonify({"success": True, "id": b.id}), 201
    except KeyError:
        return fail("title and author are required")
    except (TypeError, ValueError) as e:
        return fail(str(e))


@book_bp.put("/<int:book_id>")
@role_required("admin")
def update_book(book_id: int):
    data = request.get_json(silent=True) or {}
    try:
        b = BookService.update_book(book_id, data)
        return jsonify({"success": True, "data": book_json(b)})
    except (TypeError, ValueError) as e:
        return fail(str(e))


@book_bp.delete("/<int:book_id>")
@role_required("admin")
def delete_book(book_id: int):
    BookService.delete_book(book_id)
    return jsonify({"success": True})
