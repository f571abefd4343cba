from typing import Any, Callable, NamedTuple, Optional

from financehub.data.repositories.budget_repository import get_budget
from financehub.data.repositories.category_repository import get_category
from financehub.data.repositories.recurring_transaction_repository import (
    get_recurring_transaction,
)
from financehub.data.repositories.transaction_repository import get_transaction
from financehub.data.repositories.user_repository import get_user
from financehub.domain.errors import NotFound
from financehub.domain.policy import Resource

_LOADERS: dict[Resource, Callable[[Any, str], Any]] = {
    Resource.USER: get_user,
    Resource.CATEGORY: get_category,
    Resource.TRANSACTION: get_transaction,
    Resource.BUDGET: get_budget,
    Resource.RECURRING_TRANSACTION: get_recurring_transaction,
}


class Owned(NamedTuple):
    record: Any
    owner_id: Optional[str]


def resolve_owner(db, resource: Resource, resource_id: str) -> Owned:
    """
    Load a record and the id of the user owning it.

    Users own themselves; system categories have no owner (None).
    Raises NotFound when the id does not resolve.
    """
    record = _LOADERS[resource](db, resource_id)
    if record is None:
        raise NotFound(resource.label)
    if resource is Resource.USER:
        return Owned(record, record.id)
    return Owned(record, record.user_id)
