from functools import wraps

from flask import current_app, request
from flask_jwt_extended import get_jwt, get_jwt_identity, jwt_required

from library_app.utils.responses import fail


def current_user_id() -> int:
    return int(get_jwt_identity())


def role_required(*roles):
    """
    Token check plus role claim check in one decorator.
    This is the only place roles are looked at; services take the caller's
    id and trust that the route already authorized it.
    """
    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            role = get_jwt().get("role")
            if role not in roles:
                current_app.logger.info(
                    f"[auth] user={get_jwt_identity()} role={role} refused at {request.endpoint}"
                )
                return fail("Forbidden", 403)
            return fn(*args, **kwargs)
        return wrapper
    return decorator
