from financehub.data.repositories.category_repository import get_category
from financehub.domain.errors import InvalidReference, ValidationFailed
from financehub.domain.models import Category, TransactionType


def check_type_consistency(db, category_id: str, transaction_type: TransactionType) -> Category:
    """
    A transaction's type must equal its category's type at write time.
    Storage does not enforce this, so every transaction-like write runs it.
    """
    category = get_category(db, category_id)
    if category is None:
        raise InvalidReference(
            "Invalid category_id", "The specified category does not exist"
        )
    if category.type.value != transaction_type.value:
        raise ValidationFailed(
            "Transaction type mismatch",
            "Transaction type must match category type. "
            f"Category is of type '{category.type.value}', "
            f"but transaction type is '{transaction_type.value}'",
        )
    return category


def check_patch_type_consistency(
    db,
    patch,
    existing_category_id: str,
    existing_type: TransactionType,
) -> None:
    """
    Re-run the type check when an update touches category_id or type,
    filling the untouched side from the stored record.
    """
    if not patch.touches("category_id", "type"):
        return
    category_id = patch.category_id if patch.touches("category_id") else existing_category_id
    transaction_type = patch.type if patch.touches("type") else existing_type
    check_type_consistency(db, category_id, transaction_type)
