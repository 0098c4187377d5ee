# Overview: Default permission sets per role id.

from .helpers import get_all_permission_codes


ADMIN_ROLE_ID = "admin-role-id"
SALES_REP_ROLE_ID = "sales-rep-role-id"

ROLE_NAMES = {
    ADMIN_ROLE_ID: "System Administrator",
    SALES_REP_ROLE_ID: "Sales Representative",
}

# Used when a user record carries no explicit "permissions" list
DEFAULT_ROLE_PERMISSIONS = {
    ADMIN_ROLE_ID: get_all_permission_codes(),
    SALES_REP_ROLE_ID: [
        "orders:read", "orders:write",
        "customers:read", "customers:write",
        "products:read",
        "visits:read", "visits:write",
        "reports:read",
    ],
}
