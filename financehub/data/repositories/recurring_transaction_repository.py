import uuid
from datetime import date

from sqlalchemy import Boolean, Column, Date, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Numeric, String, Text, func, or_

from financehub.data.base import Base
from financehub.data.errors import commit_or_raise
from financehub.domain.models import Frequency, RecurringTransaction, TransactionType


class RecurringTransactionORM(Base):
    __tablename__ = "recurring_transactions"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(
        String(36),
        ForeignKey(
            "users.id",
            name="recurring_transactions_user_id_fkey",
            ondelete="CASCADE",
        ),
        nullable=False,
    )
    category_id = Column(
        String(36),
        ForeignKey(
            "categories.id",
            name="recurring_transactions_category_id_fkey",
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
    frequency = Column(
        SAEnum(
            Frequency,
            name="frequency_type",
            values_callable=lambda frequencies: [f.value for f in frequencies],
        ),
        nullable=False,
    )
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    next_occurrence = Column(Date, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        Index(
            "recurring_transactions_user_id_next_occurrence_idx",
            "user_id",
            "next_occurrence",
        ),
        Index("recurring_transactions_user_id_is_active_idx", "user_id", "is_active"),
    )


def recurring_transaction_to_domain(
    recurring_orm: RecurringTransactionORM,
) -> RecurringTransaction:
    return RecurringTransaction(
        id=recurring_orm.id,
        user_id=recurring_orm.user_id,
        category_id=recurring_orm.category_id,
        amount=recurring_orm.amount,
        type=recurring_orm.type,
        frequency=recurring_orm.frequency,
        start_date=recurring_orm.start_date,
        end_date=recurring_orm.end_date,
        next_occurrence=recurring_orm.next_occurrence,
        description=recurring_orm.description,
        is_active=recurring_orm.is_active,
        created_at=recurring_orm.created_at,
    )


def get_recurring_transaction(db, recurring_id: str) -> RecurringTransaction | None:
    recurring = (
        db.query(RecurringTransactionORM)
        .filter(RecurringTransactionORM.id == recurring_id)
        .first()
    )
    return recurring_transaction_to_domain(recurring) if recurring else None


def list_recurring_transactions(
    db,
    user_id: str | None = None,
    is_active: bool | None = None,
) -> list[RecurringTransaction]:
    filters = []
    if user_id is not None:
        filters.append(RecurringTransactionORM.user_id == user_id)
    if is_active is not None:
        filters.append(RecurringTransactionORM.is_active == is_active)
    recurring = (
        db.query(RecurringTransactionORM)
        .filter(*filters)
        .order_by(RecurringTransactionORM.next_occurrence.asc())
        .all()
    )
    return [recurring_transaction_to_domain(r) for r in recurring]


def list_due_recurring_transactions(
    db, on_date: date, user_id: str | None = None
) -> list[RecurringTransaction]:
    """
    Active recurring transactions whose next occurrence is on or before
    on_date and whose end date (if any) has not passed.
    """
    filters = [
        RecurringTransactionORM.is_active.is_(True),
        RecurringTransactionORM.next_occurrence <= on_date,
        or_(
            RecurringTransactionORM.end_date.is_(None),
            RecurringTransactionORM.end_date >= on_date,
        ),
    ]
    if user_id is not None:
        filters.append(RecurringTransactionORM.user_id == user_id)
    recurring = (
        db.query(RecurringTransactionORM)
        .filter(*filters)
        .order_by(RecurringTransactionORM.next_occurrence.asc())
        .all()
    )
    return [recurring_transaction_to_domain(r) for r in recurring]


def create_recurring_transaction(
    db, recurring: RecurringTransaction
) -> RecurringTransaction:
    recurring_orm = RecurringTransactionORM(
        user_id=recurring.user_id,
        category_id=recurring.category_id,
        amount=recurring.amount,
        type=recurring.type,
        description=recurring.description,
        frequency=recurring.frequency,
        start_date=recurring.start_date,
        end_date=recurring.end_date,
        next_occurrence=recurring.next_occurrence,
        is_active=recurring.is_active,
    )
    db.add(recurring_orm)
    commit_or_raise(db)
    db.refresh(recurring_orm)
    return recurring_transaction_to_domain(recurring_orm)


def update_recurring_transaction(
    db, recurring_id: str, changes: dict
) -> RecurringTransaction | None:
    recurring = (
        db.query(RecurringTransactionORM)
        .filter(RecurringTransactionORM.id == recurring_id)
        .first()
    )
    if not recurring:
        return None
    for key, value in changes.items():
        setattr(recurring, key, value)
    commit_or_raise(db)
    db.refresh(recurring)
    return recurring_transaction_to_domain(recurring)


def delete_recurring_transaction(db, recurring_id: str) -> bool:
    deleted = (
        db.query(RecurringTransactionORM)
        .filter(RecurringTransactionORM.id == recurring_id)
        .delete(synchronize_session=False)
    )
    commit_or_raise(db)
    return deleted > 0
