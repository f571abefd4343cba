import uuid
from datetime import date

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy import UniqueConstraint, func

from financehub.data.base import Base
from financehub.data.errors import commit_or_raise
from financehub.domain.models import Budget


class BudgetORM(Base):
    __tablename__ = "budgets"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(
        String(36),
        ForeignKey("users.id", name="budgets_user_id_fkey", ondelete="CASCADE"),
        nullable=False,
    )
    category_id = Column(
        String(36),
        ForeignKey(
            "categories.id", name="budgets_category_id_fkey", ondelete="RESTRICT"
        ),
        nullable=False,
    )
    amount = Column(Numeric(12, 2), nullable=False)
    # Always the first day of the month
    month = Column(Date, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "category_id",
            "month",
            name="budgets_user_id_category_id_month_key",
        ),
        Index("budgets_user_id_month_idx", "user_id", "month"),
    )


def budget_to_domain(budget_orm: BudgetORM) -> Budget:
    return Budget(
        id=budget_orm.id,
        user_id=budget_orm.user_id,
        category_id=budget_orm.category_id,
        amount=budget_orm.amount,
        month=budget_orm.month,
        created_at=budget_orm.created_at,
        updated_at=budget_orm.updated_at,
    )


def get_budget(db, budget_id: str) -> Budget | None:
    budget = db.query(BudgetORM).filter(BudgetORM.id == budget_id).first()
    return budget_to_domain(budget) if budget else None


def list_budgets(
    db,
    user_id: str | None = None,
    category_id: str | None = None,
    month: date | None = None,
) -> list[Budget]:
    filters = []
    if user_id is not None:
        filters.append(BudgetORM.user_id == user_id)
    if category_id is not None:
        filters.append(BudgetORM.category_id == category_id)
    if month is not None:
        filters.append(BudgetORM.month == month)
    budgets = (
        db.query(BudgetORM)
        .filter(*filters)
        .order_by(BudgetORM.month.desc(), BudgetORM.created_at.desc())
        .all()
    )
    return [budget_to_domain(b) for b in budgets]


def create_budget(db, budget: Budget) -> Budget:
    budget_orm = BudgetORM(
        user_id=budget.user_id,
        category_id=budget.category_id,
        amount=budget.amount,
        month=budget.month,
    )
    db.add(budget_orm)
    commit_or_raise(db)
    db.refresh(budget_orm)
    return budget_to_domain(budget_orm)


def update_budget(db, budget_id: str, changes: dict) -> Budget | None:
    budget = db.query(BudgetORM).filter(BudgetORM.id == budget_id).first()
    if not budget:
        return None
    for key, value in changes.items():
        setattr(budget, key, value)
    commit_or_raise(db)
    db.refresh(budget)
    return budget_to_domain(budget)


def delete_budget(db, budget_id: str) -> bool:
    deleted = (
        db.query(BudgetORM)
        .filter(BudgetORM.id == budget_id)
        .delete(synchronize_session=False)
    )
    commit_or_raise(db)
    return deleted > 0
