"""
FinSight Models Package

This package contains the Pydantic models used throughout the service:
domain models mapped from database rows, request models validating incoming
payloads, and output models for the remaining response shapes.
"""

from .account import Account
from .budget import Budget
from .category import Category
from .input import (
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
    UpdateUserRequest,
)
from .output import ErrorOutput, HealthCheckOutput, MessageOutput
from .transaction import Transaction
from .user import User

__all__ = [
    # Domain models
    "User",
    "Account",
    "Category",
    "Transaction",
    "Budget",

    # Input models
    "CreateRequest",
    "PartialUpdateRequest",
    "CreateAccountRequest",
    "UpdateAccountRequest",
    "UpdateUserRequest",
    "CreateCategoryRequest",
    "UpdateCategoryRequest",
    "CreateTransactionRequest",
    "UpdateTransactionRequest",
    "CreateBudgetRequest",
    "UpdateBudgetRequest",

    # Output models
    "MessageOutput",
    "HealthCheckOutput",
    "ErrorOutput",
]
