"""
Input models for request validation using Pydantic.

Create requests declare the insertable columns of a resource. ``user_id`` is
never part of a request: unknown payload keys are ignored and the owner is
always the resolved caller. Update requests are partial; only the fields
present in the payload are written.
"""

import re
import datetime as dt
from typing import Annotated, Any, ClassVar, Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

UUID_PATTERN = r'^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$'
EMAIL_PATTERN = r'^[a-zA-Z0-9._%+|-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
CURRENCY_PATTERN = r'^[A-Z]{3}$'


class CreateRequest(BaseModel):
    """Base model for resource creation payloads."""

    model_config = ConfigDict(allow_inf_nan=False)

    def values(self) -> Dict[str, Any]:
        """Column values to insert, before resource defaults are applied."""
        return self.model_dump()


class PartialUpdateRequest(BaseModel):
    """Base model for partial updates of mutable columns."""

    model_config = ConfigDict(allow_inf_nan=False)

    # Columns that may be cleared with an explicit null
    NULLABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode='after')
    def reject_null_for_required_columns(self) -> 'PartialUpdateRequest':
        """Explicit null is only accepted for nullable columns."""
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.NULLABLE_FIELDS:
                raise ValueError(f'{name} cannot be null')
        return self

    def changes(self) -> Dict[str, Any]:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class CreateAccountRequest(CreateRequest):
    """Request model for creating an account."""

    name: Annotated[str, Field(
        min_length=1,
        max_length=100,
        description='Account name',
        examples=['Checking']
    )]

    type: Annotated[str, Field(
        min_length=1,
        max_length=50,
        description='Account type',
        examples=['checking']
    )]

    balance: Annotated[float, Field(
        default=0.0,
        description='Opening balance',
        examples=[100.0]
    )] = 0.0

    currency: Annotated[Optional[str], Field(
        default=None,
        description='ISO 4217 currency code; the configured default applies when omitted',
        examples=['JPY']
    )] = None

    @field_validator('currency', mode='before')
    @classmethod
    def normalize_currency(cls, v: Any) -> Any:
        """Blank currency counts as omitted; codes are upper-cased."""
        if isinstance(v, str):
            v = v.strip().upper()
            if not v:
                return None
            if not re.match(CURRENCY_PATTERN, v):
                raise ValueError('currency must be a 3-letter ISO 4217 code')
        return v


class UpdateAccountRequest(PartialUpdateRequest):
    """Request model for updating an account. Only name and balance are mutable."""

    name: Annotated[Optional[str], Field(
        default=None,
        min_length=1,
        max_length=100,
        description='New account name'
    )] = None

    balance: Annotated[Optional[float], Field(
        default=None,
        description='New balance'
    )] = None


class UpdateUserRequest(PartialUpdateRequest):
    """Request model for updating the caller's own profile."""

    name: Annotated[Optional[str], Field(
        default=None,
        min_length=1,
        max_length=100,
        description='New display name',
        examples=['Jane Doe']
    )] = None

    email: Annotated[Optional[str], Field(
        default=None,
        description='New contact email',
        examples=['jane.doe@example.com']
    )] = None

    @field_validator('email')
    @classmethod
    def validate_email_format(cls, v: Optional[str]) -> Optional[str]:
        """Validate email format."""
        if v is not None and not re.match(EMAIL_PATTERN, v):
            raise ValueError('Invalid email format')
        return v


class CreateCategoryRequest(CreateRequest):
    """Request model for creating a category."""

    name: Annotated[str, Field(
        min_length=1,
        max_length=100,
        description='Category name',
        examples=['Groceries']
    )]

    type: Annotated[str, Field(
        min_length=1,
        max_length=50,
        description='Category type',
        examples=['expense']
    )]

    icon: Annotated[Optional[str], Field(
        default=None,
        max_length=50,
        description='Optional icon identifier'
    )] = None

    color: Annotated[Optional[str], Field(
        default=None,
        max_length=20,
        description='Optional display color'
    )] = None


class UpdateCategoryRequest(PartialUpdateRequest):
    """Request model for updating a category."""

    NULLABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({'icon', 'color'})

    name: Annotated[Optional[str], Field(default=None, min_length=1, max_length=100)] = None
    type: Annotated[Optional[str], Field(default=None, min_length=1, max_length=50)] = None
    icon: Annotated[Optional[str], Field(default=None, max_length=50)] = None
    color: Annotated[Optional[str], Field(default=None, max_length=20)] = None


class CreateTransactionRequest(CreateRequest):
    """Request model for creating a transaction."""

    account_id: Annotated[str, Field(
        pattern=UUID_PATTERN,
        description='Account the transaction is booked against'
    )]

    category_id: Annotated[Optional[str], Field(
        default=None,
        pattern=UUID_PATTERN,
        description='Optional category id'
    )] = None

    type: Annotated[str, Field(
        min_length=1,
        max_length=50,
        description='Transaction type',
        examples=['expense']
    )]

    amount: Annotated[float, Field(
        description='Transaction amount',
        examples=[1200.0]
    )]

    description: Annotated[Optional[str], Field(
        default=None,
        max_length=500,
        description='Optional free-text description'
    )] = None

    date: Annotated[dt.date, Field(
        description='Booking date (YYYY-MM-DD)',
        examples=['2024-03-01']
    )]


class UpdateTransactionRequest(PartialUpdateRequest):
    """Request model for updating a transaction."""

    NULLABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({'category_id', 'description'})

    account_id: Annotated[Optional[str], Field(default=None, pattern=UUID_PATTERN)] = None
    category_id: Annotated[Optional[str], Field(default=None, pattern=UUID_PATTERN)] = None
    type: Annotated[Optional[str], Field(default=None, min_length=1, max_length=50)] = None
    amount: Annotated[Optional[float], Field(default=None)] = None
    description: Annotated[Optional[str], Field(default=None, max_length=500)] = None
    date: Annotated[Optional[dt.date], Field(default=None)] = None


class CreateBudgetRequest(CreateRequest):
    """Request model for creating a budget."""

    category_id: Annotated[Optional[str], Field(
        default=None,
        pattern=UUID_PATTERN,
        description='Optional category the budget applies to'
    )] = None

    name: Annotated[str, Field(
        min_length=1,
        max_length=100,
        description='Budget name',
        examples=['Food']
    )]

    amount: Annotated[float, Field(
        description='Budgeted amount per period',
        examples=[50000.0]
    )]

    period: Annotated[str, Field(
        min_length=1,
        max_length=20,
        description='Budget period',
        examples=['monthly']
    )]

    start_date: Annotated[dt.date, Field(
        description='First day the budget applies (YYYY-MM-DD)'
    )]

    end_date: Annotated[Optional[dt.date], Field(
        default=None,
        description='Optional last day the budget applies (YYYY-MM-DD)'
    )] = None

    @model_validator(mode='after')
    def validate_date_range(self) -> 'CreateBudgetRequest':
        """End date may not precede start date."""
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError('end_date cannot be before start_date')
        return self


class UpdateBudgetRequest(PartialUpdateRequest):
    """Request model for updating a budget."""

    NULLABLE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({'category_id', 'end_date'})

    category_id: Annotated[Optional[str], Field(default=None, pattern=UUID_PATTERN)] = None
    name: Annotated[Optional[str], Field(default=None, min_length=1, max_length=100)] = None
    amount: Annotated[Optional[float], Field(default=None)] = None
    period: Annotated[Optional[str], Field(default=None, min_length=1, max_length=20)] = None
    start_date: Annotated[Optional[dt.date], Field(default=None)] = None
    end_date: Annotated[Optional[dt.date], Field(default=None)] = None
