import datetime as dt
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from financehub.data.session import get_db
from financehub.domain.models import Principal, Transaction
from financehub.domain.services import transaction_service
from financehub.domain.services.auth_service import get_current_principal


class TransactionRequest(BaseModel):
    category_id: Optional[Any] = None
    amount: Optional[Any] = None
    type: Optional[Any] = None
    date: Optional[Any] = None
    description: Optional[Any] = None


class TransactionResponse(BaseModel):
    id: str
    user_id: str
    category_id: str
    amount: float
    type: str
    date: dt.date
    description: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @staticmethod
    def from_domain(t: Transaction) -> "TransactionResponse":
        return TransactionResponse(
            id=t.id,
            user_id=t.user_id,
            category_id=t.category_id,
            amount=float(t.amount),
            type=t.type.value,
            date=t.date,
            description=t.description,
            created_at=t.created_at,
            updated_at=t.updated_at,
        )


router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction_endpoint(
    req: TransactionRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> TransactionResponse:
    transaction = transaction_service.create_transaction(
        db, principal, req.model_dump(exclude_unset=True)
    )
    return TransactionResponse.from_domain(transaction)


@router.get("", response_model=List[TransactionResponse])
def list_transactions_endpoint(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    user_id: Optional[str] = None,
    transaction_type: Optional[str] = Query(None, alias="type"),
    category_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List[TransactionResponse]:
    transactions = transaction_service.list_transactions(
        db,
        principal,
        user_id=user_id,
        transaction_type=transaction_type,
        category_id=category_id,
        start_date=start_date,
        end_date=end_date,
    )
    return [TransactionResponse.from_domain(t) for t in transactions]


@router.get("/user/{user_id}", response_model=List[TransactionResponse])
def list_user_transactions_endpoint(
    user_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> List[TransactionResponse]:
    transactions = transaction_service.list_user_transactions(db, principal, user_id)
    return [TransactionResponse.from_domain(t) for t in transactions]


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction_endpoint(
    transaction_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> TransactionResponse:
    return TransactionResponse.from_domain(
        transaction_service.get_transaction(db, principal, transaction_id)
    )


@router.put("/{transaction_id}", response_model=TransactionResponse)
def update_transaction_endpoint(
    transaction_id: str,
    req: TransactionRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> TransactionResponse:
    transaction = transaction_service.update_transaction(
        db, principal, transaction_id, req.model_dump(exclude_unset=True)
    )
    return TransactionResponse.from_domain(transaction)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction_endpoint(
    transaction_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    transaction_service.delete_transaction(db, principal, transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
