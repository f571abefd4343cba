import uuid
from datetime import date

from sqlalchemy import Column, Date, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Numeric, String, Text, func

from financehub.data.base import Base
from financehub.data.errors import commit_or_raise
from financehub.domain.models import Transaction, TransactionType


class TransactionORM(Base):
    __tablename__ = "transactions"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(
        String(36),
        ForeignKey("users.id", name="transactions_user_id_fkey", ondelete="CASCADE"),
        nullable=False,
    )
    category_id = Column(
        String(36),
        ForeignKey(
            "categories.id",
            name="transactions_category_id_fkey",
            ondelete="RESTRICT",
        ),
        nullable=False,
    )
    amount = Column(Numeric(12, 2), nullable=False)
    type = Column(
        SAEnum(
            TransactionType,
            name="transaction_type",
            values_callable=lambda types: [t.value for t in types],
        ),
        nullable=False,
    )
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("transactions_user_id_date_idx", "user_id", "date"),
        Index("transactions_user_id_category_id_idx", "user_id", "category_id"),
        Index("transactions_user_id_type_idx", "user_id", "type"),
    )


def transaction_to_domain(transaction_orm: TransactionORM) -> Transaction:
    return Transaction(
        id=transaction_orm.id,
        user_id=transaction_orm.user_id,
        category_id=transaction_orm.category_id,
        amount=transaction_orm.amount,
        type=transaction_orm.type,
        date=transaction_orm.date,
        description=transaction_orm.description,
        created_at=transaction_orm.created_at,
        updated_at=transaction_orm.updated_at,
    )


def get_transaction(db, transaction_id: str) -> Transaction | None:
    transaction = (
        db.query(TransactionORM).filter(TransactionORM.id == transaction_id).first()
    )
    return transaction_to_domain(transaction) if transaction else None


def list_transactions(
    db,
    user_id: str | None = None,
    transaction_type: TransactionType | None = None,
    category_id: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[Transaction]:
    filters = []
    if user_id is not None:
        filters.append(TransactionORM.user_id == user_id)
    if transaction_type is not None:
        filters.append(TransactionORM.type == transaction_type)
    if category_id is not None:
        filters.append(TransactionORM.category_id == category_id)
    if start_date is not None:
        filters.append(TransactionORM.date >= start_date)
    if end_date is not None:
        filters.append(TransactionORM.date <= end_date)
    transactions = (
        db.query(TransactionORM)
        .filter(*filters)
        .order_by(TransactionORM.date.desc(), TransactionORM.created_at.desc())
        .all()
    )
    return [transaction_to_domain(t) for t in transactions]


def create_transaction(db, transaction: Transaction) -> Transaction:
    transaction_orm = TransactionORM(
        user_id=transaction.user_id,
        category_id=transaction.category_id,
        amount=transaction.amount,
        type=transaction.type,
        description=transaction.description,
        date=transaction.date,
    )
    db.add(transaction_orm)
    commit_or_raise(db)
    db.refresh(transaction_orm)
    return transaction_to_domain(transaction_orm)


def update_transaction(db, transaction_id: str, changes: dict) -> Transaction | None:
    transaction = (
        db.query(TransactionORM).filter(TransactionORM.id == transaction_id).first()
    )
    if not transaction:
        return None
    for key, value in changes.items():
        setattr(transaction, key, value)
    commit_or_raise(db)
    db.refresh(transaction)
    return transaction_to_domain(transaction)


def delete_transaction(db, transaction_id: str) -> bool:
    deleted = (
        db.query(TransactionORM)
        .filter(TransactionORM.id == transaction_id)
        .delete(synchronize_session=False)
    )
    commit_or_raise(db)
    return deleted > 0
