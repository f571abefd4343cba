import uuid

from sqlalchemy import Boolean, Column, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, String, UniqueConstraint, func, or_

from financehub.data.base import Base
from financehub.data.errors import commit_or_raise
from financehub.domain.models import Category, CategoryType

DEFAULT_CATEGORY_COLOR = "#6B7280"

SYSTEM_CATEGORIES = [
    ("Salary", CategoryType.INCOME, "#10B981", "briefcase"),
    ("Freelance", CategoryType.INCOME, "#3B82F6", "code"),
    ("Investments", CategoryType.INCOME, "#8B5CF6", "trending-up"),
    ("Gifts", CategoryType.INCOME, "#EC4899", "gift"),
    ("Other Income", CategoryType.INCOME, "#6B7280", "dollar-sign"),
    ("Food", CategoryType.EXPENSE, "#F59E0B", "utensils"),
    ("Transport", CategoryType.EXPENSE, "#EF4444", "car"),
    ("Housing", CategoryType.EXPENSE, "#6366F1", "home"),
    ("Utilities", CategoryType.EXPENSE, "#14B8A6", "zap"),
    ("Entertainment", CategoryType.EXPENSE, "#A855F7", "film"),
    ("Shopping", CategoryType.EXPENSE, "#F97316", "shopping-bag"),
    ("Health", CategoryType.EXPENSE, "#EC4899", "heart"),
    ("Education", CategoryType.EXPENSE, "#06B6D4", "book"),
    ("Other Expense", CategoryType.EXPENSE, "#6B7280", "more-horizontal"),
]


class CategoryORM(Base):
    __tablename__ = "categories"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(
        String(36),
        ForeignKey("users.id", name="categories_user_id_fkey", ondelete="CASCADE"),
        nullable=True,
    )
    name = Column(String, nullable=False)
    type = Column(
        SAEnum(
            CategoryType,
            name="category_type",
            values_callable=lambda types: [t.value for t in types],
        ),
        nullable=False,
    )
    color = Column(String(7), nullable=False, default=DEFAULT_CATEGORY_COLOR)
    icon = Column(String(50), nullable=True)
    is_system = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint(
            "user_id", "name", "type", name="categories_user_id_name_type_key"
        ),
        Index("categories_user_id_type_idx", "user_id", "type"),
    )


def category_to_domain(category_orm: CategoryORM) -> Category:
    return Category(
        id=category_orm.id,
        user_id=category_orm.user_id,
        name=category_orm.name,
        type=category_orm.type,
        color=category_orm.color,
        icon=category_orm.icon,
        is_system=category_orm.is_system,
        created_at=category_orm.created_at,
    )


def get_category(db, category_id: str) -> Category | None:
    category = db.query(CategoryORM).filter(CategoryORM.id == category_id).first()
    return category_to_domain(category) if category else None


def list_categories(
    db,
    user_id: str | None = None,
    category_type: CategoryType | None = None,
) -> list[Category]:
    """List categories visible to a user: their own plus the system ones."""
    query = db.query(CategoryORM)
    if user_id is None:
        query = query.filter(CategoryORM.user_id.is_(None))
    else:
        query = query.filter(
            or_(CategoryORM.user_id == user_id, CategoryORM.user_id.is_(None))
        )
    if category_type is not None:
        query = query.filter(CategoryORM.type == category_type)
    query = query.order_by(CategoryORM.is_system.desc(), CategoryORM.name.asc())
    return [category_to_domain(c) for c in query.all()]


def create_category(
    db,
    user_id: str | None,
    name: str,
    category_type: CategoryType,
    color: str | None = None,
    icon: str | None = None,
    is_system: bool = False,
) -> Category:
    category_orm = CategoryORM(
        user_id=user_id,
        name=name,
        type=category_type,
        color=color or DEFAULT_CATEGORY_COLOR,
        icon=icon,
        is_system=is_system,
    )
    db.add(category_orm)
    commit_or_raise(db)
    db.refresh(category_orm)
    return category_to_domain(category_orm)


def update_category(db, category_id: str, changes: dict) -> Category | None:
    category = db.query(CategoryORM).filter(CategoryORM.id == category_id).first()
    if not category:
        return None
    for key, value in changes.items():
        setattr(category, key, value)
    commit_or_raise(db)
    db.refresh(category)
    return category_to_domain(category)


def delete_category(db, category_id: str) -> bool:
    category = db.query(CategoryORM).filter(CategoryORM.id == category_id).first()
    if not category:
        return False
    db.delete(category)
    commit_or_raise(db)
    return True


def seed_system_categories(db) -> int:
    """
    Insert the built-in owner-less categories that are not present yet.
    Returns the number of newly added categories.
    """
    count = 0
    for name, category_type, color, icon in SYSTEM_CATEGORIES:
        exists = (
            db.query(CategoryORM)
            .filter(
                CategoryORM.user_id.is_(None),
                CategoryORM.name == name,
                CategoryORM.type == category_type,
            )
            .first()
        )
        if not exists:
            db.add(
                CategoryORM(
                    user_id=None,
                    name=name,
                    type=category_type,
                    color=color,
                    icon=icon,
                    is_system=True,
                )
            )
            count += 1
    commit_or_raise(db)
    return count
