# Overview: Request and permission decorators for API routes.

from functools import wraps

from flask import current_app, g, jsonify, request

from .errors import PermissionDeniedError
from .permissions import Action, Resource, can, parse_role
from .services import session_service


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a live session token.

    Sets:
    - g.current_employee: the authenticated Employee
    - g.current_role: their permissions.Role
    - g.auth_token: the plaintext bearer token (for logout)

    Returns 401 when the header is missing or the token is invalid,
    expired or revoked.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if token is None:
            return jsonify({"error": "Authentication required"}), 401

        employee = session_service.validate_session(token)
        if employee is None:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_employee = employee
        g.current_role = parse_role(employee.role)
        g.auth_token = token

        return f(*args, **kwargs)

    return decorated_function


def require_permission(resource: Resource, action: Action):
    """Require the caller's role to allow action on resource (PermissionDeniedError otherwise)."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not hasattr(g, "current_employee"):
                return jsonify({"error": "Authentication required"}), 401

            if not can(g.current_role, resource, action):
                current_app.logger.warning(
                    "permission denied employee=%s role=%s need=%s:%s path=%s",
                    g.current_employee.id_employee,
                    g.current_employee.role,
                    resource.value,
                    action.value,
                    request.path,
                )
                raise PermissionDeniedError(f"{resource.value}:{action.value}")

            return f(*args, **kwargs)

        return decorated_function
    return decorator
