# Overview: Row locking and commit helpers that turn storage failures into domain errors.

from __future__ import annotations

from typing import Callable

from sqlalchemy.exc import IntegrityError, OperationalError

from ..errors import DomainError, TransientStoreError
from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the IntegrityError came from a unique index or constraint."""
    text = str(exc.orig).lower()
    return "unique constraint" in text or "duplicate key" in text


def commit(on_unique_violation: Callable[[], DomainError] | None = None) -> None:
    """
    Commit the current session.

    The pre-checks in the services only produce friendly errors; the unique
    indexes are what actually hold the invariants. When one of them rejects
    the write, the session is rolled back and the error produced by
    on_unique_violation is raised in its place. Other integrity failures
    propagate unchanged.

    OperationalError (lock timeout, lost connection) becomes
    TransientStoreError, which callers may retry.
    """
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        if on_unique_violation is not None and is_unique_violation(exc):
            raise on_unique_violation() from exc
        raise
    except OperationalError as exc:
        db.session.rollback()
        raise TransientStoreError() from exc
