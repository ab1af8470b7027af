# Overview: Flask API routes for auth operations; login, logout and the current employee.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth
from ..permissions import permissions_for
from ..services import auth_service, session_service

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate with email + password and create a session token.

    The token goes in the Authorization header ("Bearer <token>") of every
    other request.
    """
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return jsonify({"error": "email and password required"}), 400

    employee = auth_service.authenticate(email, password)
    if not employee:
        current_app.logger.info("failed login email=%s ip=%s", email, request.remote_addr)
        return jsonify({"error": "Invalid credentials"}), 401

    session, token = session_service.create_session(
        employee,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )

    return jsonify({
        "employee": employee.to_dict(),
        "permissions": permissions_for(employee.role),
        "token": token,
        "session": session.to_dict(),
    }), 200


@auth_bp.post("/logout")
@require_auth
def logout_route():
    session_service.revoke_session(g.auth_token, reason="Logout")
    return jsonify({"message": "Logged out"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    employee = g.current_employee
    return jsonify({
        "employee": employee.to_dict(),
        "permissions": permissions_for(employee.role),
    }), 200
