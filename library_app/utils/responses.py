from flask import jsonify


def fail(message: str, status_code: int = 400):
    """The error envelope every endpoint answers with."""
    return jsonify({"success": False, "message": message}), status_code
