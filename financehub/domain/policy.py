"""
Authorization policy shared by every resource service.

`decide` is a pure function of the caller, the owner of the target record
and the requested action; it never touches storage. Services load the
record (see ownership.py), call `authorize`, and only then write.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import structlog

from financehub.domain.errors import (
    DomainError,
    Forbidden,
    NotFound,
    Unauthenticated,
    ValidationFailed,
)
from financehub.domain.models import Principal, Role

log = structlog.get_logger(__name__)


class Action(Enum):
    READ = "read"
    LIST_ALL = "list_all"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    CHANGE_ROLE = "change_role"


class Resource(Enum):
    USER = "user"
    CATEGORY = "category"
    TRANSACTION = "transaction"
    BUDGET = "budget"
    RECURRING_TRANSACTION = "recurring_transaction"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()

    @property
    def plural(self) -> str:
        return {
            Resource.USER: "users",
            Resource.CATEGORY: "categories",
            Resource.TRANSACTION: "transactions",
            Resource.BUDGET: "budgets",
            Resource.RECURRING_TRANSACTION: "recurring transactions",
        }[self]


class DenyKind(Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INVALID_OPERATION = "invalid_operation"


@dataclass(frozen=True)
class Allow:
    allowed = True


@dataclass(frozen=True)
class Deny:
    kind: DenyKind
    error: str
    message: Optional[str] = None
    allowed = False


Decision = Union[Allow, Deny]

ALLOW = Allow()

_VERBS = {
    Action.READ: "view",
    Action.UPDATE: "update",
    Action.DELETE: "delete",
}


def _ownership_denied(action: Action, resource: Resource) -> Deny:
    noun = "profile" if resource is Resource.USER else resource.plural
    verb = _VERBS.get(action, "access")
    return Deny(
        DenyKind.FORBIDDEN,
        "Access denied",
        f"You can only {verb} your own {noun}",
    )


def _decide_user(principal: Principal, target_id: Optional[str], action: Action) -> Decision:
    if action is Action.CREATE:
        if principal.is_privileged:
            return ALLOW
        return Deny(
            DenyKind.FORBIDDEN,
            "Insufficient permissions",
            "Only admin and manager can create users",
        )
    if action is Action.DELETE:
        # Checked first, for every role, admin included
        if target_id == principal.subject_id:
            return Deny(DenyKind.INVALID_OPERATION, "Cannot delete your own account")
        if principal.role is Role.ADMIN:
            return ALLOW
        return Deny(
            DenyKind.FORBIDDEN,
            "Insufficient permissions",
            "Only admin can delete users",
        )
    if action is Action.CHANGE_ROLE:
        if principal.role is Role.ADMIN:
            return ALLOW
        return Deny(
            DenyKind.FORBIDDEN,
            "Insufficient permissions",
            "Only admin can change user roles",
        )
    if principal.is_privileged or target_id == principal.subject_id:
        return ALLOW
    return _ownership_denied(action, Resource.USER)


def decide(
    principal: Optional[Principal],
    owner_id: Optional[str],
    action: Action,
    resource: Resource,
) -> Decision:
    """
    Decide whether `principal` may perform `action` on a record of `resource`
    owned by `owner_id`.

    For Resource.USER, `owner_id` is the target user's id. For categories,
    `owner_id=None` marks a system category: readable by all, writable by none.
    For CREATE on owned resources, pass the id the record will be owned by.
    """
    if principal is None:
        return Deny(DenyKind.UNAUTHENTICATED, "Authentication required")

    if action is Action.LIST_ALL:
        if principal.is_privileged:
            return ALLOW
        return Deny(
            DenyKind.FORBIDDEN,
            "Insufficient permissions",
            f"Only admin and manager can list all {resource.plural}",
        )

    if resource is Resource.USER:
        return _decide_user(principal, owner_id, action)

    if resource is Resource.CATEGORY and owner_id is None:
        if action is Action.READ:
            return ALLOW
        if action is Action.DELETE:
            return Deny(DenyKind.FORBIDDEN, "Cannot delete system categories")
        return Deny(DenyKind.FORBIDDEN, "Cannot modify system categories")

    if principal.is_privileged:
        return ALLOW
    if owner_id == principal.subject_id:
        return ALLOW
    return _ownership_denied(action, resource)


def to_error(deny: Deny, resource: Resource) -> DomainError:
    if deny.kind is DenyKind.UNAUTHENTICATED:
        return Unauthenticated(deny.error, deny.message)
    if deny.kind is DenyKind.NOT_FOUND:
        return NotFound(resource.label)
    if deny.kind is DenyKind.INVALID_OPERATION:
        return ValidationFailed(deny.error, deny.message)
    return Forbidden(deny.error, deny.message)


def authorize(
    principal: Optional[Principal],
    owner_id: Optional[str],
    action: Action,
    resource: Resource,
) -> None:
    """Raise the matching DomainError unless `decide` allows the request."""
    decision = decide(principal, owner_id, action, resource)
    if isinstance(decision, Deny):
        log.info(
            "access_denied",
            subject_id=principal.subject_id if principal else None,
            owner_id=owner_id,
            action=action.value,
            resource=resource.value,
            reason=decision.kind.value,
        )
        raise to_error(decision, resource)


def list_scope(
    principal: Optional[Principal],
    user_id: Optional[str],
    resource: Resource,
) -> Optional[str]:
    """
    User id a listing is restricted to, or None for every user's records.

    Without an explicit user_id, admins and managers see everything and
    everybody else sees their own records. An explicit user_id is a `read`
    against that user.
    """
    if user_id is None:
        if principal is None:
            raise Unauthenticated("Authentication required")
        return None if principal.is_privileged else principal.subject_id
    authorize(principal, user_id, Action.READ, resource)
    return user_id
