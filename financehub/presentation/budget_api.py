import datetime as dt
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from financehub.data.session import get_db
from financehub.domain.models import Budget, Principal
from financehub.domain.services import budget_service
from financehub.domain.services.auth_service import get_current_principal


class BudgetRequest(BaseModel):
    category_id: Optional[Any] = None
    amount: Optional[Any] = None
    month: Optional[Any] = None


class BudgetResponse(BaseModel):
    id: str
    user_id: str
    category_id: str
    amount: float
    month: dt.date
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @staticmethod
    def from_domain(b: Budget) -> "BudgetResponse":
        return BudgetResponse(
            id=b.id,
            user_id=b.user_id,
            category_id=b.category_id,
            amount=float(b.amount),
            month=b.month,
            created_at=b.created_at,
            updated_at=b.updated_at,
        )


router = APIRouter(prefix="/api/budgets", tags=["budgets"])


@router.post("", response_model=BudgetResponse, status_code=status.HTTP_201_CREATED)
def create_budget_endpoint(
    req: BudgetRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> BudgetResponse:
    budget = budget_service.create_budget(db, principal, req.model_dump(exclude_unset=True))
    return BudgetResponse.from_domain(budget)


@router.get("", response_model=List[BudgetResponse])
def list_budgets_endpoint(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    user_id: Optional[str] = None,
    category_id: Optional[str] = None,
    month: Optional[str] = None,
) -> List[BudgetResponse]:
    budgets = budget_service.list_budgets(
        db, principal, user_id=user_id, category_id=category_id, month=month
    )
    return [BudgetResponse.from_domain(b) for b in budgets]


@router.get("/user/{user_id}", response_model=List[BudgetResponse])
def list_user_budgets_endpoint(
    user_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> List[BudgetResponse]:
    budgets = budget_service.list_user_budgets(db, principal, user_id)
    return [BudgetResponse.from_domain(b) for b in budgets]


@router.get("/user/{user_id}/month/{month}", response_model=List[BudgetResponse])
def list_user_month_budgets_endpoint(
    user_id: str,
    month: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> List[BudgetResponse]:
    budgets = budget_service.list_user_budgets(db, principal, user_id, month=month)
    return [BudgetResponse.from_domain(b) for b in budgets]


@router.get("/{budget_id}", response_model=BudgetResponse)
def get_budget_endpoint(
    budget_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> BudgetResponse:
    return BudgetResponse.from_domain(budget_service.get_budget(db, principal, budget_id))


@router.put("/{budget_id}", response_model=BudgetResponse)
def update_budget_endpoint(
    budget_id: str,
    req: BudgetRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> BudgetResponse:
    budget = budget_service.update_budget(
        db, principal, budget_id, req.model_dump(exclude_unset=True)
    )
    return BudgetResponse.from_domain(budget)


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget_endpoint(
    budget_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    budget_service.delete_budget(db, principal, budget_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
