# Overview: Lookups over the permission catalog (codes, categories, validity).

from .definitions import PERMISSION_DEFINITIONS


# code -> (code, name, description, category)
PERMISSIONS_BY_CODE = {perm[0]: perm for perm in PERMISSION_DEFINITIONS}


def get_all_permission_codes():
    """Every defined code, in catalog order."""
    return list(PERMISSIONS_BY_CODE)


def get_permissions_by_category(category):
    return [perm for perm in PERMISSIONS_BY_CODE.values() if perm[3] == category]


def validate_permission_code(code):
    """Codes are "<resource>:<action>" strings that appear in the catalog."""
    return isinstance(code, str) and code in PERMISSIONS_BY_CODE
