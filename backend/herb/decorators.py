# Overview: Request identity and permission decorators for API routes.

from functools import wraps
from flask import current_app, request, jsonify, g

from .services import permission_service
from .services.permission_service import AuthenticationRequiredError, PermissionDeniedError


USER_ID_HEADER = "X-User-Id"


def _enforcing() -> bool:
    return bool(current_app.config.get("ENFORCE_PERMISSIONS", False))


def acting_user_id():
    """Caller's user id: the resolved user when enforcing, else the raw header (may be None)."""
    user = getattr(g, "current_user", None)
    if user:
        return user.get("id")
    return request.headers.get(USER_ID_HEADER) or None


def _identify():
    """Resolve g.current_user once per request. Returns a 401 response on failure."""
    if getattr(g, "current_user", None):
        return None
    try:
        g.current_user = permission_service.resolve_user(request.headers.get(USER_ID_HEADER))
    except AuthenticationRequiredError as e:
        return jsonify({"message": str(e)}), 401
    return None


def check_permission(permission_code: str):
    """
    Inline form of @require_permission for checks that depend on the payload.

    Returns None when allowed (or not enforcing), else a 401/403 response.
    """
    if not _enforcing():
        return None

    denied = _identify()
    if denied is not None:
        return denied

    try:
        permission_service.require_permission(g.current_user, permission_code, resource=request.path)
    except PermissionDeniedError as e:
        return jsonify({
            "message": str(e),
            "required_permission": permission_code,
        }), 403
    return None


def require_user(f):
    """
    Require an identified, active user when ENFORCE_PERMISSIONS is on.

    SECURITY: Returns 401 if the X-User-Id header is missing, names no user,
    or names an inactive user.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if _enforcing():
            denied = _identify()
            if denied is not None:
                return denied
        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """Require a specific permission (no-op unless ENFORCE_PERMISSIONS)."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            denied = check_permission(permission_code)
            if denied is not None:
                return denied
            return f(*args, **kwargs)

        return decorated_function

    return decorator
