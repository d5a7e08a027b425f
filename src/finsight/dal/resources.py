"""
Per-resource configuration for the generic owned-resource DAL.

Adding a resource means adding a table, its models and one definition here.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Type

from pydantic import BaseModel

from finsight.handlers.models.env_vars import FinsightEnvVars
from finsight.models.account import Account
from finsight.models.budget import Budget
from finsight.models.category import Category
from finsight.models.input import (
    CreateAccountRequest,
    CreateBudgetRequest,
    CreateCategoryRequest,
    CreateRequest,
    CreateTransactionRequest,
    PartialUpdateRequest,
    UpdateAccountRequest,
    UpdateBudgetRequest,
    UpdateCategoryRequest,
    UpdateTransactionRequest,
)
from finsight.models.transaction import Transaction


def _no_defaults(settings: FinsightEnvVars) -> Dict[str, Any]:
    return {}


@dataclass(frozen=True)
class ResourceDefinition:
    """Everything the generic DAL and controller need to serve one table."""

    name: str                     # singular display name, used in messages
    table: str
    path: str                     # collection path, e.g. /accounts
    model: Type[BaseModel]
    create_request: Type[CreateRequest]
    update_request: Type[PartialUpdateRequest]
    create_defaults: Callable[[FinsightEnvVars], Dict[str, Any]] = field(default=_no_defaults)

    @property
    def columns(self) -> str:
        """Selected column list, taken from the model's fields."""
        return ', '.join(self.model.model_fields)


ACCOUNTS = ResourceDefinition(
    name='Account',
    table='accounts',
    path='/accounts',
    model=Account,
    create_request=CreateAccountRequest,
    update_request=UpdateAccountRequest,
    create_defaults=lambda settings: {'currency': settings.DEFAULT_CURRENCY},
)

CATEGORIES = ResourceDefinition(
    name='Category',
    table='categories',
    path='/categories',
    model=Category,
    create_request=CreateCategoryRequest,
    update_request=UpdateCategoryRequest,
)

TRANSACTIONS = ResourceDefinition(
    name='Transaction',
    table='transactions',
    path='/transactions',
    model=Transaction,
    create_request=CreateTransactionRequest,
    update_request=UpdateTransactionRequest,
)

BUDGETS = ResourceDefinition(
    name='Budget',
    table='budgets',
    path='/budgets',
    model=Budget,
    create_request=CreateBudgetRequest,
    update_request=UpdateBudgetRequest,
)
