from datetime import datetime, timedelta, timezone
from functools import lru_cache

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from financehub.config import Settings
from financehub.data.repositories.user_repository import (
    create_user,
    get_user,
    get_user_by_email,
)
from financehub.data.session import get_db
from financehub.domain.errors import Conflict, Unauthenticated, ValidationFailed
from financehub.domain.helpers.password_strength import validate_password_strength
from financehub.domain.integrity import translate_integrity_errors
from financehub.domain.models import Principal, Role, User
from financehub.domain.validators import (
    is_valid_email,
    validate_currency,
    validate_full_name,
)

log = structlog.get_logger(__name__)

DEFAULT_BCRYPT_ROUNDS = 10

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache()
def _pwd_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _pwd_context(DEFAULT_BCRYPT_ROUNDS).verify(plain_password, hashed_password)


def get_password_hash(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    return _pwd_context(rounds).hash(password)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def create_access_token(
    user: User, settings: Settings, expires_delta: timedelta | None = None
) -> str:
    to_encode = {"sub": user.id, "email": user.email, "role": user.role.value}
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def verify_credential(db: Session, token: str, settings: Settings) -> Principal:
    """
    Turn a bearer token into the request's Principal.

    The token must verify under the shared secret, be unexpired, carry
    sub/email/role, and its subject must still exist.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        subject_id = payload.get("sub")
        email = payload.get("email")
        role = Role(payload.get("role"))
        if not subject_id or not email:
            raise ValueError("incomplete token payload")
    except (JWTError, ValueError) as e:
        log.warning("auth_failed", reason="invalid_token", detail=str(e))
        raise Unauthenticated("Invalid or expired token")

    if get_user(db, subject_id) is None:
        log.warning("auth_failed", reason="unknown_subject", subject_id=subject_id)
        raise Unauthenticated("User not found")
    return Principal(subject_id=subject_id, email=email, role=role)


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Principal:
    if credentials is None:
        raise Unauthenticated("No token provided")
    return verify_credential(db, credentials.credentials, settings)


def _require_password(password) -> str:
    if not isinstance(password, str) or password == "":
        raise ValidationFailed("Password is required")
    return password


def _require_auth_email(email) -> str:
    if not isinstance(email, str) or email.strip() == "":
        raise ValidationFailed("Email is required")
    if not is_valid_email(email):
        raise ValidationFailed("Valid email is required")
    return email.strip().lower()


def check_password_strength(password: str) -> None:
    result = validate_password_strength(password)
    if not result.is_valid:
        raise ValidationFailed(
            "Password does not meet requirements", details=result.errors
        )


def register_user(db: Session, settings: Settings, data: dict) -> tuple[User, str]:
    email = _require_auth_email(data.get("email"))
    password = _require_password(data.get("password"))
    check_password_strength(password)
    full_name = validate_full_name(data.get("full_name"))
    currency = "USD"
    if data.get("currency") is not None:
        currency = validate_currency(data["currency"])

    if get_user_by_email(db, email):
        raise Conflict("Email already registered")

    hashed_password = get_password_hash(password, settings.bcrypt_rounds)
    with translate_integrity_errors("Email already registered"):
        # New accounts always start as plain users
        user = create_user(db, email, hashed_password, full_name, currency, Role.USER)
    log.info("user_registered", user_id=user.id)
    return user, create_access_token(user, settings)


def authenticate_user(db: Session, settings: Settings, data: dict) -> tuple[User, str]:
    email = _require_auth_email(data.get("email"))
    password = _require_password(data.get("password"))
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        log.warning("auth_failed", reason="bad_credentials")
        raise Unauthenticated("Invalid email or password")
    return user, create_access_token(user, settings)


def initialize_admin(db: Session, settings: Settings) -> User | None:
    """
    Create the bootstrap admin from ADMIN_EMAIL / ADMIN_PASSWORD if missing.
    Returns the created user, or None when nothing was created.
    """
    if not settings.admin_email or not settings.admin_password:
        log.warning("admin_bootstrap_skipped", reason="credentials_not_configured")
        return None
    email = settings.admin_email.strip().lower()
    if not is_valid_email(email):
        log.warning("admin_bootstrap_skipped", reason="invalid_email")
        return None
    if get_user_by_email(db, email):
        log.info("admin_bootstrap_skipped", reason="already_exists")
        return None
    hashed_password = get_password_hash(settings.admin_password, settings.bcrypt_rounds)
    user = create_user(
        db, email, hashed_password, settings.admin_full_name, "USD", Role.ADMIN
    )
    log.info("admin_bootstrapped", user_id=user.id)
    return user
