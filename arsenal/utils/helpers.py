"""Shared helpers for services and blueprints.

get_or_404:     primary-key lookup raising NotFoundError
atomic:         one-transaction unit of work (mutation + audit row)
parse_bool:     lenient boolean parsing for JSON bodies and query strings
require_bool:   strict boolean parsing; unrecognised values are a ValidationError
optional_text:  str-or-None check for free-text body fields
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError

from arsenal.core.exceptions import ConflictError, NotFoundError, ValidationError
from arsenal.models import db

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE for unique_violation
_PG_UNIQUE_VIOLATION = "23505"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def get_or_404(model, pk, label=None):
    """Fetch a model instance by primary key or raise NotFoundError."""
    label = label or model.__name__
    obj = db.session.get(model, pk) if pk else None
    if obj is None:
        raise NotFoundError(resource=label, resource_id=pk)
    return obj


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when *exc* wraps a unique-constraint violation (PG 23505 or SQLite)."""
    orig = getattr(exc, "orig", None)
    pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if pgcode:
        return pgcode == _PG_UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(orig)


@contextmanager
def atomic(conflict: ConflictError | None = None):
    """Run a unit of work in one transaction.

    Commits on success.  Any exception rolls back every pending change, so
    a mutation and its audit row are persisted together or not at all.
    When *conflict* is given, a unique-constraint violation is re-raised as
    that ConflictError.

    Usage::

        with atomic(conflict=ConflictError("Project", "name", name)):
            db.session.add(project)
            write_audit(...)
    """
    try:
        yield db.session
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Integrity error, transaction rolled back: %s", exc.orig)
        if conflict is not None and is_unique_violation(exc):
            raise conflict from exc
        raise
    except Exception:
        db.session.rollback()
        raise


def parse_bool(value, default: bool = False) -> bool:
    """Parse JSON booleans and query-string flags; None yields *default*."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return default


def require_bool(value, field: str, default: bool = False) -> bool:
    """Like parse_bool, but a value that is neither true nor false is rejected."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE - {""}:
            return False
    raise ValidationError(f"{field} must be a boolean", details={field: "must be true or false"})


def optional_text(value, field: str, max_length: int | None = None) -> str | None:
    """Return *value* when it is a string (or None); anything else is a ValidationError."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", details={field: "must be a string"})
    if max_length is not None and len(value) > max_length:
        raise ValidationError(
            f"{field} must be at most {max_length} characters",
            details={field: f"at most {max_length} characters"},
        )
    return value
