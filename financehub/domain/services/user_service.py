import structlog
from sqlalchemy.orm import Session

from financehub.config import Settings
from financehub.data.repositories import user_repository
from financehub.domain.errors import Conflict, NotFound
from financehub.domain.integrity import translate_integrity_errors
from financehub.domain.models import Principal, Role, User
from financehub.domain.ownership import resolve_owner
from financehub.domain.policy import Action, Resource, authorize
from financehub.domain.services.auth_service import (
    check_password_strength,
    get_password_hash,
)
from financehub.domain.validators import (
    validate_create_user,
    validate_update_user,
    validate_uuid,
)

log = structlog.get_logger(__name__)

INVALID_ID_MESSAGE = "Invalid user ID"
DUPLICATE_EMAIL_MESSAGE = "Email already exists"
IN_USE_MESSAGE = "Categories owned by this user are still used by other users"


def _ensure_email_free(db: Session, email: str, user_id: str | None = None) -> None:
    existing = user_repository.get_user_by_email(db, email)
    if existing and existing.id != user_id:
        raise Conflict(DUPLICATE_EMAIL_MESSAGE)


def create_user(db: Session, settings: Settings, principal: Principal, data: dict) -> User:
    authorize(principal, None, Action.CREATE, Resource.USER)
    new = validate_create_user(data)
    if new.role is not Role.USER:
        authorize(principal, None, Action.CHANGE_ROLE, Resource.USER)
    check_password_strength(new.password)
    _ensure_email_free(db, new.email)

    password_hash = get_password_hash(new.password, settings.bcrypt_rounds)
    with translate_integrity_errors(DUPLICATE_EMAIL_MESSAGE):
        user = user_repository.create_user(
            db, new.email, password_hash, new.full_name, new.currency, new.role
        )
    log.info("user_created", user_id=user.id, role=user.role.value, by=principal.subject_id)
    return user


def list_users(db: Session, principal: Principal) -> list[User]:
    authorize(principal, None, Action.LIST_ALL, Resource.USER)
    return user_repository.list_users(db)


def get_user(db: Session, principal: Principal, user_id: str) -> User:
    user_id = validate_uuid(user_id, INVALID_ID_MESSAGE)
    owned = resolve_owner(db, Resource.USER, user_id)
    authorize(principal, owned.owner_id, Action.READ, Resource.USER)
    return owned.record


def get_me(db: Session, principal: Principal) -> User:
    user = user_repository.get_user(db, principal.subject_id)
    if user is None:
        raise NotFound(Resource.USER.label)
    return user


def update_user(
    db: Session, settings: Settings, principal: Principal, user_id: str, data: dict
) -> User:
    user_id = validate_uuid(user_id, INVALID_ID_MESSAGE)
    patch = validate_update_user(data)
    owned = resolve_owner(db, Resource.USER, user_id)
    authorize(principal, owned.owner_id, Action.UPDATE, Resource.USER)
    if patch.touches("role") and patch.role is not owned.record.role:
        authorize(principal, owned.owner_id, Action.CHANGE_ROLE, Resource.USER)

    changes = patch.changes()
    if "password" in changes:
        check_password_strength(changes["password"])
        changes["password_hash"] = get_password_hash(
            changes.pop("password"), settings.bcrypt_rounds
        )
    if "email" in changes:
        _ensure_email_free(db, changes["email"], user_id)

    with translate_integrity_errors(DUPLICATE_EMAIL_MESSAGE):
        user = user_repository.update_user(db, user_id, changes)
    if user is None:
        raise NotFound(Resource.USER.label)
    return user


def delete_user(db: Session, principal: Principal, user_id: str) -> None:
    """
    Delete a user and everything they own.

    The self-deletion guard runs before the lookup, so deleting one's own
    account is refused even if the id were somehow unknown.
    """
    user_id = validate_uuid(user_id, INVALID_ID_MESSAGE)
    authorize(principal, user_id, Action.DELETE, Resource.USER)
    resolve_owner(db, Resource.USER, user_id)
    with translate_integrity_errors(referenced_message=IN_USE_MESSAGE):
        deleted = user_repository.delete_user(db, user_id)
    if not deleted:
        raise NotFound(Resource.USER.label)
    log.info("user_deleted", user_id=user_id, by=principal.subject_id)
