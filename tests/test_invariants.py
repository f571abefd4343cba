"""Tests for the transaction/category type consistency check."""
import pytest

from financehub.data.repositories.category_repository import create_category
from financehub.domain.errors import InvalidReference, ValidationFailed
from financehub.domain.invariants import (
    check_patch_type_consistency,
    check_type_consistency,
)
from financehub.domain.models import CategoryType, TransactionType
from financehub.domain.validators import validate_update_transaction

MISSING_ID = "00000000-0000-4000-8000-000000000000"


@pytest.fixture
def groceries(db, alice):
    return create_category(db, alice.id, "Groceries", CategoryType.EXPENSE)


class TestTypeConsistency:
    def test_matching_type(self, db, groceries):
        category = check_type_consistency(db, groceries.id, TransactionType.EXPENSE)
        assert category.id == groceries.id

    def test_mismatch(self, db, groceries):
        with pytest.raises(ValidationFailed) as exc_info:
            check_type_consistency(db, groceries.id, TransactionType.INCOME)
        assert exc_info.value.error == "Transaction type mismatch"
        assert exc_info.value.message == (
            "Transaction type must match category type. Category is of type "
            "'expense', but transaction type is 'income'"
        )

    def test_missing_category(self, db):
        with pytest.raises(InvalidReference) as exc_info:
            check_type_consistency(db, MISSING_ID, TransactionType.INCOME)
        assert exc_info.value.error == "Invalid category_id"


class TestPatchTypeConsistency:
    def test_untouched_patch_skips_lookup(self, db):
        patch = validate_update_transaction({"amount": 10})
        check_patch_type_consistency(db, patch, MISSING_ID, TransactionType.INCOME)

    def test_type_change_checked_against_stored_category(self, db, groceries):
        patch = validate_update_transaction({"type": "income"})
        with pytest.raises(ValidationFailed):
            check_patch_type_consistency(db, patch, groceries.id, TransactionType.EXPENSE)

    def test_category_change_checked_against_stored_type(self, db, groceries):
        patch = validate_update_transaction({"category_id": groceries.id})
        with pytest.raises(ValidationFailed):
            check_patch_type_consistency(db, patch, MISSING_ID, TransactionType.INCOME)
        check_patch_type_consistency(db, patch, MISSING_ID, TransactionType.EXPENSE)
