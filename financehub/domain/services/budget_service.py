from typing import Optional

import structlog
from sqlalchemy.orm import Session

from financehub.data.repositories import budget_repository
from financehub.domain.errors import NotFound
from financehub.domain.integrity import translate_integrity_errors
from financehub.domain.models import Budget, Principal
from financehub.domain.ownership import resolve_owner
from financehub.domain.policy import Action, Resource, authorize, list_scope
from financehub.domain.validators import (
    MONTH_MESSAGE,
    normalize_month,
    parse_optional_date,
    parse_optional_uuid,
    validate_create_budget,
    validate_date,
    validate_update_budget,
    validate_uuid,
)

log = structlog.get_logger(__name__)

INVALID_ID_MESSAGE = "Invalid budget ID format"
INVALID_USER_ID_MESSAGE = "Invalid user ID format"
DUPLICATE_MESSAGE = "A budget for this user, category, and month already exists"


def create_budget(db: Session, principal: Principal, data: dict) -> Budget:
    new = validate_create_budget(data)
    authorize(principal, principal.subject_id, Action.CREATE, Resource.BUDGET)
    # Uniqueness of (user, category, month) is left to the unique index
    with translate_integrity_errors(DUPLICATE_MESSAGE):
        budget = budget_repository.create_budget(
            db,
            Budget(
                id=None,
                user_id=principal.subject_id,
                category_id=new.category_id,
                amount=new.amount,
                month=new.month,
            ),
        )
    log.info(
        "budget_created",
        budget_id=budget.id,
        user_id=budget.user_id,
        month=budget.month.isoformat(),
    )
    return budget


def list_budgets(
    db: Session,
    principal: Principal,
    user_id: Optional[str] = None,
    category_id: Optional[str] = None,
    month: Optional[str] = None,
) -> list[Budget]:
    user_id = parse_optional_uuid(user_id, INVALID_USER_ID_MESSAGE)
    category_id = parse_optional_uuid(category_id, "Invalid category ID format")
    parsed_month = parse_optional_date(month, "Invalid month format (expected: YYYY-MM-DD)")
    scope = list_scope(principal, user_id, Resource.BUDGET)
    return budget_repository.list_budgets(
        db,
        user_id=scope,
        category_id=category_id,
        month=normalize_month(parsed_month) if parsed_month else None,
    )


def list_user_budgets(
    db: Session, principal: Principal, user_id: str, month: Optional[str] = None
) -> list[Budget]:
    user_id = validate_uuid(user_id, INVALID_USER_ID_MESSAGE)
    parsed_month = None
    if month is not None:
        parsed_month = normalize_month(validate_date(month, MONTH_MESSAGE))
    authorize(principal, user_id, Action.READ, Resource.BUDGET)
    return budget_repository.list_budgets(db, user_id=user_id, month=parsed_month)


def get_budget(db: Session, principal: Principal, budget_id: str) -> Budget:
    budget_id = validate_uuid(budget_id, INVALID_ID_MESSAGE)
    owned = resolve_owner(db, Resource.BUDGET, budget_id)
    authorize(principal, owned.owner_id, Action.READ, Resource.BUDGET)
    return owned.record


def update_budget(db: Session, principal: Principal, budget_id: str, data: dict) -> Budget:
    budget_id = validate_uuid(budget_id, INVALID_ID_MESSAGE)
    patch = validate_update_budget(data)
    owned = resolve_owner(db, Resource.BUDGET, budget_id)
    authorize(principal, owned.owner_id, Action.UPDATE, Resource.BUDGET)
    with translate_integrity_errors(DUPLICATE_MESSAGE):
        budget = budget_repository.update_budget(db, budget_id, patch.changes())
    if budget is None:
        raise NotFound(Resource.BUDGET.label)
    return budget


def delete_budget(db: Session, principal: Principal, budget_id: str) -> None:
    budget_id = validate_uuid(budget_id, INVALID_ID_MESSAGE)
    owned = resolve_owner(db, Resource.BUDGET, budget_id)
    authorize(principal, owned.owner_id, Action.DELETE, Resource.BUDGET)
    if not budget_repository.delete_budget(db, budget_id):
        raise NotFound(Resource.BUDGET.label)
    log.info("budget_deleted", budget_id=budget_id, by=principal.subject_id)
