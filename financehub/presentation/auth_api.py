from typing import Any, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from financehub.config import Settings
from financehub.data.session import get_db
from financehub.domain.models import Principal
from financehub.domain.services import user_service
from financehub.domain.services.auth_service import (
    authenticate_user,
    get_current_principal,
    get_settings,
    register_user,
)
from financehub.presentation.user_api import UserResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    email: Optional[Any] = None
    password: Optional[Any] = None
    full_name: Optional[Any] = None
    currency: Optional[Any] = None


class LoginRequest(BaseModel):
    email: Optional[Any] = None
    password: Optional[Any] = None


class AuthResponse(BaseModel):
    user: UserResponse
    token: str


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_endpoint(
    req: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    user, token = register_user(db, settings, req.model_dump(exclude_unset=True))
    return AuthResponse(user=UserResponse.from_domain(user), token=token)


@router.post("/login", response_model=AuthResponse)
def login_endpoint(
    req: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    user, token = authenticate_user(db, settings, req.model_dump(exclude_unset=True))
    return AuthResponse(user=UserResponse.from_domain(user), token=token)


@router.post("/logout")
def logout_endpoint(principal: Principal = Depends(get_current_principal)):
    # Tokens are stateless; the client drops its copy
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
def me_endpoint(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> UserResponse:
    return UserResponse.from_domain(user_service.get_me(db, principal))
