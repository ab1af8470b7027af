# Overview: Transaction scoping and row locking; maps driver lock errors to the error taxonomy.

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import scoped_session

from ..errors import ConflictError, LockTimeoutError, StorageError
from ..extensions import db


# lock_not_available, deadlock_detected, serialization_failure
LOCK_SQLSTATES = {"55P03", "40P01", "40001"}

LOCK_MESSAGES = (
    "database is locked",
    "lock wait timeout",
    "could not obtain lock",
    "deadlock",
)


def lock_for_update(stmt):
    """
    Apply row-level locking to a select() statement.

    populate_existing makes the locked read overwrite whatever the identity
    map already holds, so the caller always compares against the value that
    was current when the lock was granted.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; UnitOfWork takes the
    database write lock up front instead (BEGIN IMMEDIATE).
    """
    return stmt.with_for_update().execution_options(populate_existing=True)


def is_lock_error(exc: BaseException) -> bool:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code in LOCK_SQLSTATES:
        return True
    message = str(orig if orig is not None else exc).lower()
    return any(m in message for m in LOCK_MESSAGES)


def translate_db_error(exc: SQLAlchemyError) -> Exception:
    """Map a SQLAlchemy failure onto ConflictError/LockTimeoutError/StorageError."""
    if isinstance(exc, OperationalError) and is_lock_error(exc):
        return LockTimeoutError("Record is locked by another transaction, retry later")
    if isinstance(exc, IntegrityError):
        return ConflictError("Write conflicts with existing data")
    return StorageError("Database error")


class UnitOfWork:
    """
    One all-or-nothing database transaction.

        with UnitOfWork() as uow:
            store = InventoryStore(uow)
            ...

    Commits on normal exit; rolls back on any exception and re-raises it.
    SQLAlchemy errors escaping the block (including from commit) are
    translated with translate_db_error, so callers only ever see the
    application error taxonomy.

    The unit of work must start a fresh transaction. Entering with pending
    (unflushed) changes on the session raises RuntimeError and leaves them
    untouched; an implicit transaction holding only reads is committed first.
    A scoped_session proxy is resolved to the current thread's Session.

    Dialect setup on entry:
    - sqlite: BEGIN IMMEDIATE takes the database write lock; waiting for
      it is bounded by the connection busy timeout.
    - postgresql: SET LOCAL lock_timeout bounds every row-lock wait.
    - mysql/mariadb: innodb_lock_wait_timeout for this connection.
    """

    def __init__(self, session=None, *, lock_timeout_ms: int | None = None):
        session = session if session is not None else db.session
        if isinstance(session, scoped_session):
            session = session()
        self.session = session
        self.lock_timeout_ms = lock_timeout_ms

    @property
    def dialect(self) -> str:
        return self.session.get_bind().dialect.name

    def __enter__(self) -> "UnitOfWork":
        if self.session.new or self.session.dirty or self.session.deleted:
            raise RuntimeError("unit of work entered with pending changes on the session")
        if self.session.in_transaction():
            self.session.commit()
        try:
            self._begin()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise translate_db_error(exc) from exc
        return self

    def _begin(self) -> None:
        dialect = self.dialect
        if dialect == "sqlite":
            self.session.execute(text("BEGIN IMMEDIATE"))
        elif dialect == "postgresql" and self.lock_timeout_ms:
            self.session.execute(text(f"SET LOCAL lock_timeout = '{int(self.lock_timeout_ms)}ms'"))
        elif dialect in ("mysql", "mariadb") and self.lock_timeout_ms:
            seconds = max(1, int(self.lock_timeout_ms) // 1000)
            self.session.execute(text(f"SET SESSION innodb_lock_wait_timeout = {seconds}"))

    def flush(self) -> None:
        self.session.flush()

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self.session.rollback()
            if isinstance(exc, SQLAlchemyError):
                raise translate_db_error(exc) from exc
            return False

        try:
            self.session.commit()
        except SQLAlchemyError as commit_exc:
            self.session.rollback()
            raise translate_db_error(commit_exc) from commit_exc
        return False
