# Overview: Service-layer operations for session tokens; issue, validate, revoke.

"""
Session Token Management

Tokens are 32 random bytes (64 hex chars) handed to the client once; only
their SHA-256 hash is stored. A session ends at whichever comes first:
- SESSION_ABSOLUTE_TIMEOUT_HOURS after login
- SESSION_IDLE_TIMEOUT_MINUTES without a request
- logout, or the employee being deactivated
"""

import hashlib
import secrets
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import Employee, SessionToken
from ..time_utils import utcnow


def _absolute_timeout() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_ABSOLUTE_TIMEOUT_HOURS", 24))


def _idle_timeout() -> timedelta:
    return timedelta(minutes=current_app.config.get("SESSION_IDLE_TIMEOUT_MINUTES", 120))


def generate_token() -> str:
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """SHA-256 hex digest. Tokens are high-entropy, so no salt or bcrypt."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_session(
    employee: Employee,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """
    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.
    """
    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        employee_id=employee.id_employee,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + _absolute_timeout(),
        user_agent=(user_agent or "")[:255] or None,
        ip_address=ip_address,
        is_revoked=False,
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def _revoke(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason


def validate_session(token: str) -> Employee | None:
    """
    Employee behind a live token, or None.

    Touches last_used_at on success. Idle sessions and sessions of
    deactivated employees are revoked on sight.
    """
    now = utcnow()

    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return None

    if session.expires_at < now:
        return None

    if now - session.last_used_at > _idle_timeout():
        _revoke(session, "Idle timeout")
        db.session.commit()
        return None

    employee = session.employee
    if not employee or not employee.is_active:
        _revoke(session, "Employee deactivated")
        db.session.commit()
        return None

    session.last_used_at = now
    db.session.commit()
    return employee


def revoke_session(token: str, reason: str = "Logout") -> bool:
    """True if a live session was revoked."""
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return False

    _revoke(session, reason)
    db.session.commit()
    return True


def revoke_all_sessions(id_employee: str, reason: str = "Revoke all sessions") -> int:
    """Used when credentials change or the employee is deactivated. Caller commits."""
    sessions = db.session.query(SessionToken).filter_by(
        employee_id=id_employee,
        is_revoked=False,
    ).all()

    for session in sessions:
        _revoke(session, reason)
    return len(sessions)
