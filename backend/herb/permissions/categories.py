# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    ORDERS = "ORDERS"
    CUSTOMERS = "CUSTOMERS"
    PRODUCTS = "PRODUCTS"
    VISITS = "VISITS"
    REPORTS = "REPORTS"
    USERS = "USERS"
    SETTINGS = "SETTINGS"
    AUDIT = "AUDIT"
