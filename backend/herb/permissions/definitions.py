# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- ORDERS --

ORDER_PERMISSIONS = [
    ("orders:read", "View Orders", "List and open orders", PermissionCategory.ORDERS),
    ("orders:write", "Edit Orders", "Create and edit orders (adjusts stock)", PermissionCategory.ORDERS),
    ("orders:delete", "Delete Orders", "Delete orders (restores stock)", PermissionCategory.ORDERS),
    (
        "orders:approve",
        "Approve Orders",
        "Move orders to approved or rejected",
        PermissionCategory.ORDERS,
    ),
]

# -- CUSTOMERS --

CUSTOMER_PERMISSIONS = [
    ("customers:read", "View Customers", "List customers and customer portals", PermissionCategory.CUSTOMERS),
    ("customers:write", "Edit Customers", "Create and edit customers and portals", PermissionCategory.CUSTOMERS),
    ("customers:delete", "Delete Customers", "Delete customers and portals", PermissionCategory.CUSTOMERS),
]

# -- PRODUCTS --

PRODUCT_PERMISSIONS = [
    ("products:read", "View Products", "List the product catalog", PermissionCategory.PRODUCTS),
    ("products:write", "Edit Products", "Create and edit products", PermissionCategory.PRODUCTS),
    ("products:delete", "Delete Products", "Delete products", PermissionCategory.PRODUCTS),
]

# -- VISITS --

VISIT_PERMISSIONS = [
    ("visits:read", "View Visits", "List customer visits", PermissionCategory.VISITS),
    ("visits:write", "Record Visits", "Create and edit customer visits", PermissionCategory.VISITS),
    ("visits:delete", "Delete Visits", "Delete customer visits", PermissionCategory.VISITS),
]

# -- REPORTS --

REPORT_PERMISSIONS = [
    ("reports:read", "View Reports", "Open sales, stock and customer reports", PermissionCategory.REPORTS),
]

# -- USERS / SETTINGS / AUDIT --

USER_PERMISSIONS = [
    ("users:read", "View Users", "List user accounts", PermissionCategory.USERS),
    ("users:write", "Edit Users", "Create and edit user accounts", PermissionCategory.USERS),
    ("users:delete", "Delete Users", "Delete user accounts", PermissionCategory.USERS),
]

SETTINGS_PERMISSIONS = [
    ("settings:write", "Manage System Logs", "Create, edit and delete system log entries", PermissionCategory.SETTINGS),
]

AUDIT_PERMISSIONS = [
    ("audit:read", "View Audit Log", "Read system and activity logs", PermissionCategory.AUDIT),
]


PERMISSION_DEFINITIONS = (
    ORDER_PERMISSIONS
    + CUSTOMER_PERMISSIONS
    + PRODUCT_PERMISSIONS
    + VISIT_PERMISSIONS
    + REPORT_PERMISSIONS
    + USER_PERMISSIONS
    + SETTINGS_PERMISSIONS
    + AUDIT_PERMISSIONS
)
