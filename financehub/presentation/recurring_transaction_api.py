import datetime as dt
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from financehub.data.session import get_db
from financehub.domain.models import Principal, RecurringTransaction
from financehub.domain.services import recurring_transaction_service
from financehub.domain.services.auth_service import get_current_principal


class RecurringTransactionRequest(BaseModel):
    category_id: Optional[Any] = None
    amount: Optional[Any] = None
    type: Optional[Any] = None
    frequency: Optional[Any] = None
    start_date: Optional[Any] = None
    end_date: Optional[Any] = None
    next_occurrence: Optional[Any] = None
    description: Optional[Any] = None
    is_active: Optional[Any] = None


class RecurringTransactionResponse(BaseModel):
    id: str
    user_id: str
    category_id: str
    amount: float
    type: str
    frequency: str
    start_date: dt.date
    end_date: Optional[dt.date] = None
    next_occurrence: dt.date
    description: Optional[str] = None
    is_active: bool
    created_at: Optional[dt.datetime] = None

    @staticmethod
    def from_domain(r: RecurringTransaction) -> "RecurringTransactionResponse":
        return RecurringTransactionResponse(
            id=r.id,
            user_id=r.user_id,
            category_id=r.category_id,
            amount=float(r.amount),
            type=r.type.value,
            frequency=r.frequency.value,
            start_date=r.start_date,
            end_date=r.end_date,
            next_occurrence=r.next_occurrence,
            description=r.description,
            is_active=r.is_active,
            created_at=r.created_at,
        )


router = APIRouter(prefix="/api/recurring-transactions", tags=["recurring-transactions"])


@router.post(
    "",
    response_model=RecurringTransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_recurring_transaction_endpoint(
    req: RecurringTransactionRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> RecurringTransactionResponse:
    recurring = recurring_transaction_service.create_recurring_transaction(
        db, principal, req.model_dump(exclude_unset=True)
    )
    return RecurringTransactionResponse.from_domain(recurring)


@router.get("", response_model=List[RecurringTransactionResponse])
def list_recurring_transactions_endpoint(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    user_id: Optional[str] = None,
    is_active: Optional[str] = None,
) -> List[RecurringTransactionResponse]:
    recurring = recurring_transaction_service.list_recurring_transactions(
        db, principal, user_id=user_id, is_active=is_active
    )
    return [RecurringTransactionResponse.from_domain(r) for r in recurring]


@router.get("/due", response_model=List[RecurringTransactionResponse])
def list_due_recurring_transactions_endpoint(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    on_date: Optional[str] = Query(None, alias="date"),
) -> List[RecurringTransactionResponse]:
    recurring = recurring_transaction_service.list_due_recurring_transactions(
        db, principal, on_date
    )
    return [RecurringTransactionResponse.from_domain(r) for r in recurring]


@router.get("/user/{user_id}", response_model=List[RecurringTransactionResponse])
def list_user_recurring_transactions_endpoint(
    user_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> List[RecurringTransactionResponse]:
    recurring = recurring_transaction_service.list_user_recurring_transactions(
        db, principal, user_id
    )
    return [RecurringTransactionResponse.from_domain(r) for r in recurring]


@router.get("/{recurring_id}", response_model=RecurringTransactionResponse)
def get_recurring_transaction_endpoint(
    recurring_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> RecurringTransactionResponse:
    return RecurringTransactionResponse.from_domain(
        recurring_transaction_service.get_recurring_transaction(db, principal, recurring_id)
    )


@router.put("/{recurring_id}", response_model=RecurringTransactionResponse)
def update_recurring_transaction_endpoint(
    recurring_id: str,
    req: RecurringTransactionRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> RecurringTransactionResponse:
    recurring = recurring_transaction_service.update_recurring_transaction(
        db, principal, recurring_id, req.model_dump(exclude_unset=True)
    )
    return RecurringTransactionResponse.from_domain(recurring)


@router.delete("/{recurring_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recurring_transaction_endpoint(
    recurring_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    recurring_transaction_service.delete_recurring_transaction(db, principal, recurring_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
