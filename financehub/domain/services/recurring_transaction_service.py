from datetime import date
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from financehub.data.repositories import recurring_transaction_repository
from financehub.domain.errors import NotFound
from financehub.domain.integrity import translate_integrity_errors
from financehub.domain.invariants import (
    check_patch_type_consistency,
    check_type_consistency,
)
from financehub.domain.models import Principal, RecurringTransaction
from financehub.domain.ownership import resolve_owner
from financehub.domain.policy import Action, Resource, authorize, list_scope
from financehub.domain.validators import (
    parse_optional_bool,
    parse_optional_date,
    parse_optional_uuid,
    validate_create_recurring_transaction,
    validate_update_recurring_transaction,
    validate_uuid,
)

log = structlog.get_logger(__name__)

INVALID_ID_MESSAGE = "Invalid recurring transaction ID format"
INVALID_USER_ID_MESSAGE = "Invalid user ID format"


def create_recurring_transaction(
    db: Session, principal: Principal, data: dict
) -> RecurringTransaction:
    new = validate_create_recurring_transaction(data)
    authorize(
        principal, principal.subject_id, Action.CREATE, Resource.RECURRING_TRANSACTION
    )
    check_type_consistency(db, new.category_id, new.type)
    with translate_integrity_errors():
        recurring = recurring_transaction_repository.create_recurring_transaction(
            db,
            RecurringTransaction(
                id=None,
                user_id=principal.subject_id,
                category_id=new.category_id,
                amount=new.amount,
                type=new.type,
                frequency=new.frequency,
                start_date=new.start_date,
                next_occurrence=new.next_occurrence,
                end_date=new.end_date,
                description=new.description,
                is_active=new.is_active,
            ),
        )
    log.info(
        "recurring_transaction_created",
        recurring_transaction_id=recurring.id,
        user_id=recurring.user_id,
        frequency=recurring.frequency.value,
    )
    return recurring


def list_recurring_transactions(
    db: Session,
    principal: Principal,
    user_id: Optional[str] = None,
    is_active: Optional[str] = None,
) -> list[RecurringTransaction]:
    user_id = parse_optional_uuid(user_id, INVALID_USER_ID_MESSAGE)
    active = parse_optional_bool(is_active, "is_active must be 'true' or 'false'")
    scope = list_scope(principal, user_id, Resource.RECURRING_TRANSACTION)
    return recurring_transaction_repository.list_recurring_transactions(
        db, user_id=scope, is_active=active
    )


def list_due_recurring_transactions(
    db: Session, principal: Principal, on_date: Optional[str] = None
) -> list[RecurringTransaction]:
    """
    Active recurring transactions due on or before `on_date` (default today).
    Nothing here advances next_occurrence; callers do that with an update.
    """
    due_date = parse_optional_date(
        on_date, "Invalid date format (expected: YYYY-MM-DD)"
    ) or date.today()
    scope = list_scope(principal, None, Resource.RECURRING_TRANSACTION)
    return recurring_transaction_repository.list_due_recurring_transactions(
        db, due_date, user_id=scope
    )


def list_user_recurring_transactions(
    db: Session, principal: Principal, user_id: str
) -> list[RecurringTransaction]:
    user_id = validate_uuid(user_id, INVALID_USER_ID_MESSAGE)
    authorize(principal, user_id, Action.READ, Resource.RECURRING_TRANSACTION)
    return recurring_transaction_repository.list_recurring_transactions(
        db, user_id=user_id
    )


def get_recurring_transaction(
    db: Session, principal: Principal, recurring_id: str
) -> RecurringTransaction:
    recurring_id = validate_uuid(recurring_id, INVALID_ID_MESSAGE)
    owned = resolve_owner(db, Resource.RECURRING_TRANSACTION, recurring_id)
    authorize(principal, owned.owner_id, Action.READ, Resource.RECURRING_TRANSACTION)
    return owned.record


def update_recurring_transaction(
    db: Session, principal: Principal, recurring_id: str, data: dict
) -> RecurringTransaction:
    recurring_id = validate_uuid(recurring_id, INVALID_ID_MESSAGE)
    patch = validate_update_recurring_transaction(data)
    owned = resolve_owner(db, Resource.RECURRING_TRANSACTION, recurring_id)
    authorize(principal, owned.owner_id, Action.UPDATE, Resource.RECURRING_TRANSACTION)
    existing = owned.record
    check_patch_type_consistency(db, patch, existing.category_id, existing.type)
    with translate_integrity_errors():
        recurring = recurring_transaction_repository.update_recurring_transaction(
            db, recurring_id, patch.changes()
        )
    if recurring is None:
        raise NotFound(Resource.RECURRING_TRANSACTION.label)
    return recurring


def delete_recurring_transaction(
    db: Session, principal: Principal, recurring_id: str
) -> None:
    recurring_id = validate_uuid(recurring_id, INVALID_ID_MESSAGE)
    owned = resolve_owner(db, Resource.RECURRING_TRANSACTION, recurring_id)
    authorize(principal, owned.owner_id, Action.DELETE, Resource.RECURRING_TRANSACTION)
    if not recurring_transaction_repository.delete_recurring_transaction(db, recurring_id):
        raise NotFound(Resource.RECURRING_TRANSACTION.label)
    log.info(
        "recurring_transaction_deleted",
        recurring_transaction_id=recurring_id,
        by=principal.subject_id,
    )
