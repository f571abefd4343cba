"""
Translate storage constraint failures into the same error vocabulary the
validators use, so callers see one taxonomy whether a problem was caught
before the write or by the database at commit time.
"""
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

from financehub.data.errors import ForeignKeyViolation, StorageError, UniqueViolation
from financehub.domain.errors import Conflict, DomainError, InvalidReference

log = structlog.get_logger(__name__)

DEFAULT_CONFLICT_MESSAGE = "A record with this value already exists"


def translate_foreign_key(error: ForeignKeyViolation) -> InvalidReference:
    if error.field == "category_id":
        return InvalidReference(
            "Invalid category_id", "The specified category does not exist"
        )
    if error.field == "user_id":
        return InvalidReference("Invalid user_id", "The specified user does not exist")
    return InvalidReference(
        "Invalid foreign key reference",
        "The specified user_id or category_id does not exist",
    )


def translate_storage_error(
    error: StorageError,
    conflict_message: Optional[str] = None,
) -> DomainError:
    if isinstance(error, UniqueViolation):
        return Conflict(
            "Unique constraint violation", conflict_message or DEFAULT_CONFLICT_MESSAGE
        )
    if isinstance(error, ForeignKeyViolation):
        return translate_foreign_key(error)
    raise TypeError(f"Unsupported storage error: {error!r}")


@contextmanager
def translate_integrity_errors(
    conflict_message: Optional[str] = None,
    referenced_message: Optional[str] = None,
) -> Iterator[None]:
    """
    Wrap a storage call.

    `referenced_message` is for deletes: there a foreign key failure means the
    row is still referenced by others, reported as Conflict instead of
    InvalidReference.
    """
    try:
        yield
    except StorageError as e:
        log.info(
            "integrity_error",
            kind=type(e).__name__,
            constraint=e.constraint,
            field=getattr(e, "field", None),
        )
        if referenced_message and isinstance(e, ForeignKeyViolation):
            raise Conflict("Record is still in use", referenced_message) from e
        raise translate_storage_error(e, conflict_message) from e
