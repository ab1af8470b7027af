# Overview: Permission system package.
# Re-exports all public APIs.

from .definitions import (
    Role,
    Resource,
    Action,
    ROLE_PERMISSIONS,
    MANAGER_PERMISSIONS,
    CASHIER_PERMISSIONS,
)
from .helpers import can, parse_role, permissions_for

__all__ = [
    "Role",
    "Resource",
    "Action",
    "ROLE_PERMISSIONS",
    "MANAGER_PERMISSIONS",
    "CASHIER_PERMISSIONS",
    "can",
    "parse_role",
    "permissions_for",
]
