# Overview: Permission system package.
# Re-exports the public APIs used by services and the CLI.

from .categories import PermissionCategory
from .definitions import PERMISSION_DEFINITIONS
from .roles import ADMIN_ROLE_ID, SALES_REP_ROLE_ID, ROLE_NAMES, DEFAULT_ROLE_PERMISSIONS
from .helpers import (
    get_all_permission_codes,
    get_permissions_by_category,
    validate_permission_code,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "ADMIN_ROLE_ID",
    "SALES_REP_ROLE_ID",
    "ROLE_NAMES",
    "DEFAULT_ROLE_PERMISSIONS",
    "get_all_permission_codes",
    "get_permissions_by_category",
    "validate_permission_code",
]
