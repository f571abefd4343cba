from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from financehub.data.session import get_db
from financehub.domain.models import Category, Principal
from financehub.domain.services import category_service
from financehub.domain.services.auth_service import get_current_principal


class CategoryRequest(BaseModel):
    name: Optional[Any] = None
    type: Optional[Any] = None
    color: Optional[Any] = None
    icon: Optional[Any] = None


class CategoryResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    name: str
    type: str
    color: str
    icon: Optional[str] = None
    is_system: bool
    created_at: Optional[datetime] = None

    @staticmethod
    def from_domain(c: Category) -> "CategoryResponse":
        return CategoryResponse(
            id=c.id,
            user_id=c.user_id,
            name=c.name,
            type=c.type.value,
            color=c.color,
            icon=c.icon,
            is_system=c.is_system,
            created_at=c.created_at,
        )


router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category_endpoint(
    req: CategoryRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> CategoryResponse:
    category = category_service.create_category(
        db, principal, req.model_dump(exclude_unset=True)
    )
    return CategoryResponse.from_domain(category)


@router.get("", response_model=List[CategoryResponse])
def list_categories_endpoint(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    category_type: Optional[str] = Query(None, alias="type"),
) -> List[CategoryResponse]:
    categories = category_service.list_categories(db, principal, category_type)
    return [CategoryResponse.from_domain(c) for c in categories]


@router.get("/user/{user_id}", response_model=List[CategoryResponse])
def list_user_categories_endpoint(
    user_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> List[CategoryResponse]:
    categories = category_service.list_user_categories(db, principal, user_id)
    return [CategoryResponse.from_domain(c) for c in categories]


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category_endpoint(
    category_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> CategoryResponse:
    return CategoryResponse.from_domain(
        category_service.get_category(db, principal, category_id)
    )


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category_endpoint(
    category_id: str,
    req: CategoryRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> CategoryResponse:
    category = category_service.update_category(
        db, principal, category_id, req.model_dump(exclude_unset=True)
    )
    return CategoryResponse.from_domain(category)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category_endpoint(
    category_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    category_service.delete_category(db, principal, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
