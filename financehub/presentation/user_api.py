from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from financehub.config import Settings
from financehub.data.session import get_db
from financehub.domain.models import Principal, User
from financehub.domain.services import user_service
from financehub.domain.services.auth_service import get_current_principal, get_settings


class UserCreateRequest(BaseModel):
    email: Optional[Any] = None
    password: Optional[Any] = None
    full_name: Optional[Any] = None
    currency: Optional[Any] = None
    role: Optional[Any] = None


class UserUpdateRequest(BaseModel):
    email: Optional[Any] = None
    password: Optional[Any] = None
    full_name: Optional[Any] = None
    currency: Optional[Any] = None
    role: Optional[Any] = None


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: str
    currency: str
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    def from_domain(u: User) -> "UserResponse":
        # never expose password_hash
        return UserResponse(
            id=u.id,
            email=u.email,
            full_name=u.full_name,
            currency=u.currency,
            role=u.role.value,
            created_at=u.created_at,
            updated_at=u.updated_at,
        )


router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user_endpoint(
    req: UserCreateRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(get_current_principal),
) -> UserResponse:
    user = user_service.create_user(
        db, settings, principal, req.model_dump(exclude_unset=True)
    )
    return UserResponse.from_domain(user)


@router.get("", response_model=List[UserResponse])
def list_users_endpoint(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> List[UserResponse]:
    return [UserResponse.from_domain(u) for u in user_service.list_users(db, principal)]


@router.get("/{user_id}", response_model=UserResponse)
def get_user_endpoint(
    user_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> UserResponse:
    return UserResponse.from_domain(user_service.get_user(db, principal, user_id))


@router.put("/{user_id}", response_model=UserResponse)
def update_user_endpoint(
    user_id: str,
    req: UserUpdateRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    principal: Principal = Depends(get_current_principal),
) -> UserResponse:
    user = user_service.update_user(
        db, settings, principal, user_id, req.model_dump(exclude_unset=True)
    )
    return UserResponse.from_domain(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user_endpoint(
    user_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    user_service.delete_user(db, principal, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
