# Overview: Utility functions for permission lookups and validation.

from .definitions import ROLE_PERMISSIONS, Role, Resource, Action


def parse_role(value) -> Role | None:
    """Role for a stored role string, or None if unknown."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def can(role, resource: Resource, action: Action) -> bool:
    """Fail closed: unknown roles, resources or actions are denied."""
    role = parse_role(role)
    if role is None:
        return False
    return action in ROLE_PERMISSIONS[role].get(resource, frozenset())


def permissions_for(role) -> list[str]:
    """Flat "resource:action" codes, sorted, for API responses."""
    role = parse_role(role)
    if role is None:
        return []
    return sorted(
        f"{resource.value}:{action.value}"
        for resource, actions in ROLE_PERMISSIONS[role].items()
        for action in actions
    )
