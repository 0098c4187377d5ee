# Overview: Server-side permission resolution for users stored in the document.

"""
Permission Checking and Denial Logging

Users are entities of the "users" collection. A user's capabilities are:

    user["permissions"]                         if it is a list
    DEFAULT_ROLE_PERMISSIONS[user["role_id"]]   otherwise

DESIGN PRINCIPLES:
- Fail closed: unknown or inactive users have no identity, missing codes deny
- Log denials only: granted checks are not written anywhere
- Off by default: the routes only consult this module when
  ENFORCE_PERMISSIONS is set
"""

from __future__ import annotations

from typing import Optional

from flask import current_app

from .collection_service import USERS, find_entity
from .document_store import get_store
from .ledger_service import append_system_log
from ..permissions import DEFAULT_ROLE_PERMISSIONS, validate_permission_code


INACTIVE_USER_STATUSES = frozenset({"inactive", "disabled", "suspended"})


class AuthenticationRequiredError(Exception):
    """Raised when the caller cannot be identified as an active user."""
    pass


class PermissionDeniedError(Exception):
    """Raised when user lacks required permission."""
    pass


def is_active_user(user: dict) -> bool:
    if user.get("is_active") is False:
        return False
    return str(user.get("status") or "active").lower() not in INACTIVE_USER_STATUSES


def resolve_user(user_id: Optional[str]) -> dict:
    """Look up the acting user; 401-level error when missing, unknown or inactive."""
    if not user_id:
        raise AuthenticationRequiredError("Authentication required")
    user = find_entity(get_store().snapshot(), USERS, user_id)
    if user is None:
        raise AuthenticationRequiredError("Unknown user")
    if not is_active_user(user):
        raise AuthenticationRequiredError("User account is inactive")
    return user


def get_user_permissions(user: dict) -> set[str]:
    """
    Get all permission codes for a user.

    An explicit permissions list on the user wins over the role defaults.
    Codes that are not defined anywhere are ignored.
    """
    explicit = user.get("permissions")
    if isinstance(explicit, list):
        return {code for code in explicit if isinstance(code, str) and validate_permission_code(code)}
    return set(DEFAULT_ROLE_PERMISSIONS.get(user.get("role_id"), []))


def user_has_permission(user: dict, permission_code: str) -> bool:
    return permission_code in get_user_permissions(user)


def log_permission_denied(user: dict, permission_code: str, resource: str | None = None) -> None:
    current_app.logger.warning(
        "Permission denied: user %s lacks %s (%s)", user.get("id"), permission_code, resource
    )
    with get_store().transaction() as document:
        append_system_log(
            document,
            action="permission.denied",
            entity_type="user",
            entity_id=user.get("id"),
            actor_user_id=user.get("id"),
            details={"permission": permission_code, "resource": resource},
            level="warning",
        )


def require_permission(user: dict, permission_code: str, resource: str | None = None) -> None:
    """
    Require user to have permission, raise PermissionDeniedError if not.

    Usage:
        require_permission(user, "orders:write", resource="/api/orders")
    """
    if not user_has_permission(user, permission_code):
        log_permission_denied(user, permission_code, resource)
        raise PermissionDeniedError(f"Permission denied: {permission_code}")
