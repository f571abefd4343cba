"""
Field validators and per-resource create/patch types.

Every validator checks one field and raises ValidationFailed naming that
field on the first problem. `validate_create_*` enforce all required fields;
`validate_update_*` check only the keys present in the payload and return a
patch whose untouched fields stay UNSET.
"""
import math
import re
from dataclasses import dataclass, fields
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from financehub.domain.errors import ValidationFailed
from financehub.domain.models import CategoryType, Frequency, Role, TransactionType

UUID_REGEX = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\Z", re.IGNORECASE
)
DATE_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}\Z")
HEX_COLOR_REGEX = re.compile(r"^#[0-9A-F]{6}\Z", re.IGNORECASE)
EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MAX_AMOUNT = Decimal("9999999999.99")
CATEGORY_NAME_MAX_LENGTH = 50
ICON_MAX_LENGTH = 50
FULL_NAME_MAX_LENGTH = 100

AMOUNT_MESSAGE = "Amount must be a positive number less than or equal to 9999999999.99"
TRANSACTION_TYPE_MESSAGE = "Transaction type must be 'income' or 'expense'"
CATEGORY_TYPE_MESSAGE = "Category type must be 'income' or 'expense'"
FREQUENCY_MESSAGE = "Frequency must be 'daily', 'weekly', 'monthly', or 'yearly'"
CATEGORY_ID_MESSAGE = "Valid category ID is required"
DATE_MESSAGE = "Valid date is required (format: YYYY-MM-DD)"

E = TypeVar("E", bound=Enum)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def _to_cents(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


# --- predicates ---


def is_valid_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(UUID_REGEX.match(value))


def is_valid_date(value: Any) -> bool:
    if not isinstance(value, str) or not DATE_REGEX.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def is_valid_amount(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if not math.isfinite(value) or not 0 < value <= MAX_AMOUNT:
        return False
    # Must stay positive once rounded to cents
    return _to_cents(value) > 0


def is_valid_hex_color(value: Any) -> bool:
    return isinstance(value, str) and bool(HEX_COLOR_REGEX.match(value))


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_REGEX.match(value.strip()))


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or value.strip() == ""


def normalize_month(value: date) -> date:
    """First calendar day of the month `value` falls in."""
    return value.replace(day=1)


# --- single-field validators ---


def validate_uuid(value: Any, message: str) -> str:
    if not is_valid_uuid(value):
        raise ValidationFailed(message)
    return value.lower()


def validate_date(value: Any, message: str = DATE_MESSAGE) -> date:
    if not is_valid_date(value):
        raise ValidationFailed(message)
    return datetime.strptime(value, "%Y-%m-%d").date()


def validate_amount(value: Any) -> Decimal:
    if not is_valid_amount(value):
        raise ValidationFailed(AMOUNT_MESSAGE)
    return _to_cents(value)


def validate_enum(value: Any, enum_cls: Type[E], message: str) -> E:
    # Exact, case-sensitive membership
    for member in enum_cls:
        if value == member.value:
            return member
    raise ValidationFailed(message)


def validate_description(value: Any) -> Optional[str]:
    if value is not None and not isinstance(value, str):
        raise ValidationFailed("Description must be a string")
    return value


def validate_is_active(value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValidationFailed("is_active must be a boolean")
    return value


def validate_category_name(value: Any, required_message: str) -> str:
    if _is_blank(value):
        raise ValidationFailed(required_message)
    name = value.strip()
    if len(name) > CATEGORY_NAME_MAX_LENGTH:
        raise ValidationFailed(
            f"Category name must be {CATEGORY_NAME_MAX_LENGTH} characters or less"
        )
    return name


def validate_color(value: Any) -> str:
    if not is_valid_hex_color(value):
        raise ValidationFailed("Color must be a valid hex color (e.g., #FF5733)")
    return value


def validate_icon(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationFailed("Icon must be a string")
    if len(value) > ICON_MAX_LENGTH:
        raise ValidationFailed(f"Icon must be {ICON_MAX_LENGTH} characters or less")
    return value


def validate_email(value: Any, required_message: str = "Email is required") -> str:
    if _is_blank(value):
        raise ValidationFailed(required_message)
    if not is_valid_email(value):
        raise ValidationFailed("Invalid email format")
    return value.strip().lower()


def validate_full_name(value: Any, required_message: str = "Full name is required") -> str:
    if _is_blank(value):
        raise ValidationFailed(required_message)
    full_name = value.strip()
    if len(full_name) > FULL_NAME_MAX_LENGTH:
        raise ValidationFailed(
            f"Full name must be {FULL_NAME_MAX_LENGTH} characters or less"
        )
    return full_name


def validate_currency(value: Any) -> str:
    if not isinstance(value, str) or len(value.strip()) != 3:
        raise ValidationFailed("Currency must be a 3-character code (e.g., USD)")
    return value.strip().upper()


def validate_role(value: Any) -> Role:
    return validate_enum(value, Role, "Role must be admin, manager, or user")


# --- patch plumbing ---


class _Patch:
    def changes(self) -> dict[str, Any]:
        """Supplied fields only, keyed by attribute name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def touches(self, *names: str) -> bool:
        return any(getattr(self, name) is not UNSET for name in names)


# --- categories ---


@dataclass
class CategoryCreate:
    name: str
    type: CategoryType
    color: Optional[str] = None
    icon: Optional[str] = None


@dataclass
class CategoryPatch(_Patch):
    name: Any = UNSET
    type: Any = UNSET
    color: Any = UNSET
    icon: Any = UNSET


def validate_create_category(data: dict) -> CategoryCreate:
    name = validate_category_name(data.get("name"), "Category name is required")
    category_type = validate_enum(data.get("type"), CategoryType, CATEGORY_TYPE_MESSAGE)
    color = validate_color(data["color"]) if data.get("color") is not None else None
    icon = validate_icon(data.get("icon"))
    return CategoryCreate(name=name, type=category_type, color=color, icon=icon)


def validate_update_category(data: dict) -> CategoryPatch:
    patch = CategoryPatch()
    if "name" in data:
        patch.name = validate_category_name(data["name"], "Category name cannot be empty")
    if "type" in data:
        patch.type = validate_enum(data["type"], CategoryType, CATEGORY_TYPE_MESSAGE)
    if "color" in data:
        patch.color = validate_color(data["color"])
    if "icon" in data:
        patch.icon = validate_icon(data["icon"])
    return patch


# --- transactions ---


@dataclass
class TransactionCreate:
    category_id: str
    amount: Decimal
    type: TransactionType
    date: date
    description: Optional[str] = None


@dataclass
class TransactionPatch(_Patch):
    category_id: Any = UNSET
    amount: Any = UNSET
    type: Any = UNSET
    date: Any = UNSET
    description: Any = UNSET


def validate_create_transaction(data: dict) -> TransactionCreate:
    category_id = validate_uuid(data.get("category_id"), CATEGORY_ID_MESSAGE)
    amount = validate_amount(data.get("amount"))
    transaction_type = validate_enum(
        data.get("type"), TransactionType, TRANSACTION_TYPE_MESSAGE
    )
    transaction_date = validate_date(data.get("date"))
    description = validate_description(data.get("description"))
    return TransactionCreate(
        category_id=category_id,
        amount=amount,
        type=transaction_type,
        date=transaction_date,
        description=description or None,
    )


def validate_update_transaction(data: dict) -> TransactionPatch:
    patch = TransactionPatch()
    if "category_id" in data:
        patch.category_id = validate_uuid(data["category_id"], CATEGORY_ID_MESSAGE)
    if "amount" in data:
        patch.amount = validate_amount(data["amount"])
    if "type" in data:
        patch.type = validate_enum(data["type"], TransactionType, TRANSACTION_TYPE_MESSAGE)
    if "date" in data:
        patch.date = validate_date(data["date"])
    if "description" in data:
        patch.description = validate_description(data["description"])
    return patch


# --- budgets ---


@dataclass
class BudgetCreate:
    category_id: str
    amount: Decimal
    month: date


@dataclass
class BudgetPatch(_Patch):
    category_id: Any = UNSET
    amount: Any = UNSET
    month: Any = UNSET


MONTH_MESSAGE = "Valid month is required (format: YYYY-MM-DD)"


def validate_create_budget(data: dict) -> BudgetCreate:
    category_id = validate_uuid(data.get("category_id"), CATEGORY_ID_MESSAGE)
    amount = validate_amount(data.get("amount"))
    month = normalize_month(validate_date(data.get("month"), MONTH_MESSAGE))
    return BudgetCreate(category_id=category_id, amount=amount, month=month)


def validate_update_budget(data: dict) -> BudgetPatch:
    patch = BudgetPatch()
    if "category_id" in data:
        patch.category_id = validate_uuid(data["category_id"], CATEGORY_ID_MESSAGE)
    if "amount" in data:
        patch.amount = validate_amount(data["amount"])
    if "month" in data:
        patch.month = normalize_month(validate_date(data["month"], MONTH_MESSAGE))
    return patch


# --- recurring transactions ---


@dataclass
class RecurringTransactionCreate:
    category_id: str
    amount: Decimal
    type: TransactionType
    frequency: Frequency
    start_date: date
    next_occurrence: date
    end_date: Optional[date] = None
    description: Optional[str] = None
    is_active: bool = True


@dataclass
class RecurringTransactionPatch(_Patch):
    category_id: Any = UNSET
    amount: Any = UNSET
    type: Any = UNSET
    frequency: Any = UNSET
    start_date: Any = UNSET
    end_date: Any = UNSET
    next_occurrence: Any = UNSET
    description: Any = UNSET
    is_active: Any = UNSET


def validate_create_recurring_transaction(data: dict) -> RecurringTransactionCreate:
    category_id = validate_uuid(data.get("category_id"), CATEGORY_ID_MESSAGE)
    amount = validate_amount(data.get("amount"))
    transaction_type = validate_enum(
        data.get("type"), TransactionType, TRANSACTION_TYPE_MESSAGE
    )
    frequency = validate_enum(data.get("frequency"), Frequency, FREQUENCY_MESSAGE)
    start_date = validate_date(
        data.get("start_date"), "Valid start_date is required (format: YYYY-MM-DD)"
    )
    next_occurrence = validate_date(
        data.get("next_occurrence"),
        "Valid next_occurrence is required (format: YYYY-MM-DD)",
    )
    end_date = None
    if data.get("end_date") is not None:
        end_date = validate_date(
            data["end_date"], "Invalid end_date format (expected: YYYY-MM-DD)"
        )
    description = validate_description(data.get("description"))
    is_active = True
    if data.get("is_active") is not None:
        is_active = validate_is_active(data["is_active"])
    return RecurringTransactionCreate(
        category_id=category_id,
        amount=amount,
        type=transaction_type,
        frequency=frequency,
        start_date=start_date,
        next_occurrence=next_occurrence,
        end_date=end_date,
        description=description or None,
        is_active=is_active,
    )


def validate_update_recurring_transaction(data: dict) -> RecurringTransactionPatch:
    patch = RecurringTransactionPatch()
    if "category_id" in data:
        patch.category_id = validate_uuid(
            data["category_id"], "Invalid category ID format"
        )
    if "amount" in data:
        patch.amount = validate_amount(data["amount"])
    if "type" in data:
        patch.type = validate_enum(data["type"], TransactionType, TRANSACTION_TYPE_MESSAGE)
    if "frequency" in data:
        patch.frequency = validate_enum(data["frequency"], Frequency, FREQUENCY_MESSAGE)
    if "start_date" in data:
        patch.start_date = validate_date(
            data["start_date"], "Invalid start_date format (expected: YYYY-MM-DD)"
        )
    if "end_date" in data:
        # null clears the end date
        patch.end_date = (
            None
            if data["end_date"] is None
            else validate_date(
                data["end_date"], "Invalid end_date format (expected: YYYY-MM-DD)"
            )
        )
    if "next_occurrence" in data:
        patch.next_occurrence = validate_date(
            data["next_occurrence"],
            "Invalid next_occurrence format (expected: YYYY-MM-DD)",
        )
    if "description" in data:
        patch.description = validate_description(data["description"])
    if "is_active" in data:
        patch.is_active = validate_is_active(data["is_active"])
    return patch


# --- users ---


@dataclass
class UserCreate:
    email: str
    password: str
    full_name: str
    currency: str = "USD"
    role: Role = Role.USER


@dataclass
class UserPatch(_Patch):
    email: Any = UNSET
    password: Any = UNSET
    full_name: Any = UNSET
    currency: Any = UNSET
    role: Any = UNSET


def validate_create_user(data: dict) -> UserCreate:
    email = validate_email(data.get("email"))
    password = data.get("password")
    if not isinstance(password, str) or password == "":
        raise ValidationFailed("Password is required")
    full_name = validate_full_name(data.get("full_name"))
    currency = "USD"
    if data.get("currency") is not None:
        currency = validate_currency(data["currency"])
    role = Role.USER
    if data.get("role") is not None:
        role = validate_role(data["role"])
    return UserCreate(
        email=email, password=password, full_name=full_name, currency=currency, role=role
    )


def validate_update_user(data: dict) -> UserPatch:
    patch = UserPatch()
    if "email" in data:
        patch.email = validate_email(data["email"], "Email must be a non-empty string")
    if "password" in data:
        if not isinstance(data["password"], str) or data["password"] == "":
            raise ValidationFailed("Password must be a non-empty string")
        patch.password = data["password"]
    if "full_name" in data:
        patch.full_name = validate_full_name(
            data["full_name"], "Full name must be a non-empty string"
        )
    if "currency" in data:
        patch.currency = validate_currency(data["currency"])
    if "role" in data:
        patch.role = validate_role(data["role"])
    return patch


# --- query parameters ---


def parse_optional_uuid(value: Optional[str], message: str) -> Optional[str]:
    return None if value is None else validate_uuid(value, message)


def parse_optional_date(value: Optional[str], message: str) -> Optional[date]:
    return None if value is None else validate_date(value, message)


def parse_optional_enum(
    value: Optional[str], enum_cls: Type[E], message: str
) -> Optional[E]:
    return None if value is None else validate_enum(value, enum_cls, message)


def parse_optional_bool(value: Optional[str], message: str) -> Optional[bool]:
    if value is None:
        return None
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValidationFailed(message)
