from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from financehub.data.base import Base

# SQLSTATE codes shared by psycopg2 (pgcode) and psycopg 3 (sqlstate)
PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"


class StorageError(Exception):
    """Base class for constraint failures raised by the repositories."""

    def __init__(self, constraint: str | None = None):
        self.constraint = constraint
        super().__init__(constraint or self.__class__.__name__)


class UniqueViolation(StorageError):
    pass


class ForeignKeyViolation(StorageError):
    def __init__(self, constraint: str | None = None, field: str | None = None):
        super().__init__(constraint)
        self.field = field


def _foreign_key_fields() -> dict[str, str]:
    fields = {}
    for table in Base.metadata.tables.values():
        for fk in table.foreign_key_constraints:
            if fk.name and fk.column_keys:
                fields[fk.name] = fk.column_keys[0]
    return fields


def classify_integrity_error(error: IntegrityError) -> StorageError | None:
    """
    Turn a driver-level IntegrityError into a typed storage error.

    Returns None for constraint kinds the repositories do not model
    (NOT NULL, CHECK), which callers re-raise unchanged.
    """
    orig = error.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    diag = getattr(orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)

    if code == PG_UNIQUE_VIOLATION:
        return UniqueViolation(constraint)
    if code == PG_FOREIGN_KEY_VIOLATION:
        return ForeignKeyViolation(constraint, _foreign_key_fields().get(constraint))

    # SQLite reports constraint failures only through the message text
    message = str(orig)
    if message.startswith("UNIQUE constraint failed"):
        return UniqueViolation(message.partition(":")[2].strip() or None)
    if message.startswith("FOREIGN KEY constraint failed"):
        return ForeignKeyViolation()
    return None


@contextmanager
def raising_storage_errors(db: Session) -> Iterator[None]:
    """Roll back and re-raise IntegrityError as a typed storage error."""
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        storage_error = classify_integrity_error(e)
        if storage_error is None:
            raise
        raise storage_error from e


def commit_or_raise(db: Session) -> None:
    with raising_storage_errors(db):
        db.commit()
