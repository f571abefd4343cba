"""Storage-level tests for the budget (user, category, month) unique index."""
from datetime import date
from decimal import Decimal

import pytest

from financehub.data.errors import UniqueViolation
from financehub.data.repositories import budget_repository
from financehub.data.repositories.category_repository import create_category
from financehub.domain.errors import Conflict
from financehub.domain.integrity import translate_integrity_errors
from financehub.domain.models import Budget, CategoryType
from financehub.domain.services.budget_service import DUPLICATE_MESSAGE


@pytest.fixture
def groceries(db, alice):
    return create_category(db, alice.id, "Groceries", CategoryType.EXPENSE)


def budget_for(user_id, category_id, month=date(2024, 3, 1)):
    return Budget(
        id=None,
        user_id=user_id,
        category_id=category_id,
        amount=Decimal("250.00"),
        month=month,
    )


class TestBudgetUniqueIndex:
    def test_second_insert_raises_unique_violation(self, db, alice, groceries):
        budget_repository.create_budget(db, budget_for(alice.id, groceries.id))
        with pytest.raises(UniqueViolation):
            budget_repository.create_budget(db, budget_for(alice.id, groceries.id))

    def test_losing_insert_becomes_conflict(self, db, alice, groceries):
        """Two creates for the same month: the one that reaches storage second loses."""
        budget_repository.create_budget(db, budget_for(alice.id, groceries.id))
        with pytest.raises(Conflict) as exc_info:
            with translate_integrity_errors(DUPLICATE_MESSAGE):
                budget_repository.create_budget(db, budget_for(alice.id, groceries.id))
        assert exc_info.value.error == "Unique constraint violation"
        assert exc_info.value.message == DUPLICATE_MESSAGE

        # The failed insert was rolled back and the session is still usable
        budgets = budget_repository.list_budgets(db, user_id=alice.id)
        assert len(budgets) == 1

    def test_other_month_is_stored(self, db, alice, groceries):
        budget_repository.create_budget(db, budget_for(alice.id, groceries.id))
        budget_repository.create_budget(
            db, budget_for(alice.id, groceries.id, month=date(2024, 4, 1))
        )
        assert len(budget_repository.list_budgets(db, user_id=alice.id)) == 2
