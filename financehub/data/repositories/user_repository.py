import uuid

from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import String, UniqueConstraint, func

from financehub.data.base import Base
from financehub.data.errors import commit_or_raise, raising_storage_errors
from financehub.data.repositories.budget_repository import BudgetORM
from financehub.data.repositories.category_repository import CategoryORM
from financehub.data.repositories.recurring_transaction_repository import (
    RecurringTransactionORM,
)
from financehub.data.repositories.transaction_repository import TransactionORM
from financehub.domain.models import Role, User


class UserORM(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    full_name = Column(String, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    role = Column(
        SAEnum(
            Role,
            name="user_role",
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
        default=Role.USER,
        index=True,
    )
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (UniqueConstraint("email", name="users_email_key"),)


def user_to_domain(user_orm: UserORM) -> User:
    return User(
        id=user_orm.id,
        email=user_orm.email,
        full_name=user_orm.full_name,
        currency=user_orm.currency,
        role=user_orm.role,
        password_hash=user_orm.password_hash,
        created_at=user_orm.created_at,
        updated_at=user_orm.updated_at,
    )


def get_user(db, user_id: str) -> User | None:
    user = db.query(UserORM).filter(UserORM.id == user_id).first()
    return user_to_domain(user) if user else None


def get_user_by_email(db, email: str) -> User | None:
    user = db.query(UserORM).filter(UserORM.email == email).first()
    return user_to_domain(user) if user else None


def list_users(db) -> list[User]:
    users = db.query(UserORM).order_by(UserORM.created_at, UserORM.email).all()
    return [user_to_domain(u) for u in users]


def create_user(
    db,
    email: str,
    password_hash: str,
    full_name: str,
    currency: str = "USD",
    role: Role = Role.USER,
) -> User:
    db_user = UserORM(
        email=email,
        password_hash=password_hash,
        full_name=full_name,
        currency=currency,
        role=role,
    )
    db.add(db_user)
    commit_or_raise(db)
    db.refresh(db_user)
    return user_to_domain(db_user)


def update_user(db, user_id: str, changes: dict) -> User | None:
    user = db.query(UserORM).filter(UserORM.id == user_id).first()
    if not user:
        return None
    for key, value in changes.items():
        setattr(user, key, value)
    commit_or_raise(db)
    db.refresh(user)
    return user_to_domain(user)


def delete_all_user_data(db, user_id: str) -> None:
    # Children before categories: categories are RESTRICT-referenced
    for orm in (TransactionORM, RecurringTransactionORM, BudgetORM, CategoryORM):
        db.query(orm).filter(orm.user_id == user_id).delete(synchronize_session=False)


def delete_user(db, user_id: str) -> bool:
    user = db.query(UserORM).filter(UserORM.id == user_id).first()
    if not user:
        return False
    # Bulk deletes execute immediately, so constraint failures surface here too
    with raising_storage_errors(db):
        delete_all_user_data(db, user_id)
        db.delete(user)
        db.commit()
    return True
