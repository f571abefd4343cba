# financehub/domain/models.py
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class Role(Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class CategoryType(Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionType(Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Frequency(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of the current request."""

    subject_id: str
    email: str
    role: Role

    @property
    def is_privileged(self) -> bool:
        return self.role in (Role.ADMIN, Role.MANAGER)


@dataclass
class User:
    id: str
    email: str
    full_name: str
    currency: str
    role: Role
    password_hash: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Category:
    id: str
    user_id: Optional[str]
    name: str
    type: CategoryType
    color: str
    icon: Optional[str] = None
    is_system: bool = False
    created_at: Optional[datetime] = None


@dataclass
class Transaction:
    id: str
    user_id: str
    category_id: str
    amount: Decimal
    type: TransactionType
    date: date
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Budget:
    id: str
    user_id: str
    category_id: str
    amount: Decimal
    month: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class RecurringTransaction:
    id: str
    user_id: str
    category_id: str
    amount: Decimal
    type: TransactionType
    frequency: Frequency
    start_date: date
    next_occurrence: date
    end_date: Optional[date] = None
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
