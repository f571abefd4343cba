from typing import Optional

import structlog
from sqlalchemy.orm import Session

from financehub.data.repositories import transaction_repository
from financehub.domain.errors import NotFound
from financehub.domain.integrity import translate_integrity_errors
from financehub.domain.invariants import (
    check_patch_type_consistency,
    check_type_consistency,
)
from financehub.domain.models import Principal, Transaction, TransactionType
from financehub.domain.ownership import resolve_owner
from financehub.domain.policy import Action, Resource, authorize, list_scope
from financehub.domain.validators import (
    TRANSACTION_TYPE_MESSAGE,
    parse_optional_date,
    parse_optional_enum,
    parse_optional_uuid,
    validate_create_transaction,
    validate_update_transaction,
    validate_uuid,
)

log = structlog.get_logger(__name__)

INVALID_ID_MESSAGE = "Invalid transaction ID format"
INVALID_USER_ID_MESSAGE = "Invalid user ID format"


def create_transaction(db: Session, principal: Principal, data: dict) -> Transaction:
    new = validate_create_transaction(data)
    authorize(principal, principal.subject_id, Action.CREATE, Resource.TRANSACTION)
    check_type_consistency(db, new.category_id, new.type)
    with translate_integrity_errors():
        transaction = transaction_repository.create_transaction(
            db,
            Transaction(
                id=None,
                user_id=principal.subject_id,
                category_id=new.category_id,
                amount=new.amount,
                type=new.type,
                date=new.date,
                description=new.description,
            ),
        )
    log.info("transaction_created", transaction_id=transaction.id, user_id=transaction.user_id)
    return transaction


def list_transactions(
    db: Session,
    principal: Principal,
    user_id: Optional[str] = None,
    transaction_type: Optional[str] = None,
    category_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> list[Transaction]:
    user_id = parse_optional_uuid(user_id, INVALID_USER_ID_MESSAGE)
    parsed_type = parse_optional_enum(
        transaction_type, TransactionType, TRANSACTION_TYPE_MESSAGE
    )
    category_id = parse_optional_uuid(category_id, "Invalid category ID format")
    start = parse_optional_date(
        start_date, "Invalid start_date format (expected: YYYY-MM-DD)"
    )
    end = parse_optional_date(end_date, "Invalid end_date format (expected: YYYY-MM-DD)")
    scope = list_scope(principal, user_id, Resource.TRANSACTION)
    return transaction_repository.list_transactions(
        db,
        user_id=scope,
        transaction_type=parsed_type,
        category_id=category_id,
        start_date=start,
        end_date=end,
    )


def list_user_transactions(
    db: Session, principal: Principal, user_id: str
) -> list[Transaction]:
    user_id = validate_uuid(user_id, INVALID_USER_ID_MESSAGE)
    authorize(principal, user_id, Action.READ, Resource.TRANSACTION)
    return transaction_repository.list_transactions(db, user_id=user_id)


def get_transaction(db: Session, principal: Principal, transaction_id: str) -> Transaction:
    transaction_id = validate_uuid(transaction_id, INVALID_ID_MESSAGE)
    owned = resolve_owner(db, Resource.TRANSACTION, transaction_id)
    authorize(principal, owned.owner_id, Action.READ, Resource.TRANSACTION)
    return owned.record


def update_transaction(
    db: Session, principal: Principal, transaction_id: str, data: dict
) -> Transaction:
    transaction_id = validate_uuid(transaction_id, INVALID_ID_MESSAGE)
    patch = validate_update_transaction(data)
    owned = resolve_owner(db, Resource.TRANSACTION, transaction_id)
    authorize(principal, owned.owner_id, Action.UPDATE, Resource.TRANSACTION)
    check_patch_type_consistency(
        db, patch, owned.record.category_id, owned.record.type
    )
    with translate_integrity_errors():
        transaction = transaction_repository.update_transaction(
            db, transaction_id, patch.changes()
        )
    if transaction is None:
        raise NotFound(Resource.TRANSACTION.label)
    return transaction


def delete_transaction(db: Session, principal: Principal, transaction_id: str) -> None:
    transaction_id = validate_uuid(transaction_id, INVALID_ID_MESSAGE)
    owned = resolve_owner(db, Resource.TRANSACTION, transaction_id)
    authorize(principal, owned.owner_id, Action.DELETE, Resource.TRANSACTION)
    if not transaction_repository.delete_transaction(db, transaction_id):
        raise NotFound(Resource.TRANSACTION.label)
    log.info("transaction_deleted", transaction_id=transaction_id, by=principal.subject_id)
