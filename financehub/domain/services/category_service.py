from typing import Optional

import structlog
from sqlalchemy.orm import Session

from financehub.data.repositories import category_repository
from financehub.domain.errors import NotFound
from financehub.domain.integrity import translate_integrity_errors
from financehub.domain.models import Category, CategoryType, Principal
from financehub.domain.ownership import resolve_owner
from financehub.domain.policy import Action, Resource, authorize
from financehub.domain.validators import (
    CATEGORY_TYPE_MESSAGE,
    parse_optional_enum,
    validate_create_category,
    validate_update_category,
    validate_uuid,
)

log = structlog.get_logger(__name__)

INVALID_ID_MESSAGE = "Invalid category ID format"
INVALID_USER_ID_MESSAGE = "Invalid user ID format"
DUPLICATE_MESSAGE = "A category with this name and type already exists for this user"
IN_USE_MESSAGE = (
    "Category is still used by transactions, budgets or recurring transactions"
)


def create_category(db: Session, principal: Principal, data: dict) -> Category:
    new = validate_create_category(data)
    authorize(principal, principal.subject_id, Action.CREATE, Resource.CATEGORY)
    with translate_integrity_errors(DUPLICATE_MESSAGE):
        category = category_repository.create_category(
            db,
            principal.subject_id,
            new.name,
            new.type,
            color=new.color,
            icon=new.icon,
        )
    log.info("category_created", category_id=category.id, user_id=category.user_id)
    return category


def list_categories(
    db: Session, principal: Principal, category_type: Optional[str] = None
) -> list[Category]:
    """The caller's own categories plus the system ones."""
    parsed_type = parse_optional_enum(category_type, CategoryType, CATEGORY_TYPE_MESSAGE)
    return category_repository.list_categories(
        db, user_id=principal.subject_id, category_type=parsed_type
    )


def list_user_categories(db: Session, principal: Principal, user_id: str) -> list[Category]:
    user_id = validate_uuid(user_id, INVALID_USER_ID_MESSAGE)
    authorize(principal, user_id, Action.READ, Resource.CATEGORY)
    return category_repository.list_categories(db, user_id=user_id)


def get_category(db: Session, principal: Principal, category_id: str) -> Category:
    category_id = validate_uuid(category_id, INVALID_ID_MESSAGE)
    owned = resolve_owner(db, Resource.CATEGORY, category_id)
    authorize(principal, owned.owner_id, Action.READ, Resource.CATEGORY)
    return owned.record


def update_category(
    db: Session, principal: Principal, category_id: str, data: dict
) -> Category:
    category_id = validate_uuid(category_id, INVALID_ID_MESSAGE)
    patch = validate_update_category(data)
    owned = resolve_owner(db, Resource.CATEGORY, category_id)
    authorize(principal, owned.owner_id, Action.UPDATE, Resource.CATEGORY)
    with translate_integrity_errors(DUPLICATE_MESSAGE):
        category = category_repository.update_category(db, category_id, patch.changes())
    if category is None:
        raise NotFound(Resource.CATEGORY.label)
    return category


def delete_category(db: Session, principal: Principal, category_id: str) -> None:
    category_id = validate_uuid(category_id, INVALID_ID_MESSAGE)
    owned = resolve_owner(db, Resource.CATEGORY, category_id)
    authorize(principal, owned.owner_id, Action.DELETE, Resource.CATEGORY)
    with translate_integrity_errors(referenced_message=IN_USE_MESSAGE):
        deleted = category_repository.delete_category(db, category_id)
    if not deleted:
        raise NotFound(Resource.CATEGORY.label)
    log.info("category_deleted", category_id=category_id, by=principal.subject_id)
