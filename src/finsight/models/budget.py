"""Budget domain model."""

from datetime import date, datetime
from typing import Annotated, Optional

from pydantic import BaseModel, Field


class Budget(BaseModel):
    """A spending budget, optionally scoped to a category."""

    id: Annotated[str, Field(
        description='Unique identifier for the budget'
    )]

    user_id: Annotated[str, Field(
        description='Internal id of the owning user'
    )]

    category_id: Annotated[Optional[str], Field(
        default=None,
        description='Category the budget applies to; all spending when absent'
    )] = None

    name: Annotated[str, Field(
        description='Budget name',
        examples=['Food']
    )]

    amount: Annotated[float, Field(
        description='Budgeted amount for one period',
        examples=[50000.0]
    )]

    period: Annotated[str, Field(
        description='Budget period',
        examples=['monthly', 'weekly', 'yearly']
    )]

    start_date: Annotated[date, Field(
        description='First day the budget applies',
        examples=['2024-01-01']
    )]

    end_date: Annotated[Optional[date], Field(
        default=None,
        description='Last day the budget applies; open-ended when absent'
    )] = None

    created_at: Annotated[datetime, Field(
        description='Timestamp when the budget was created'
    )]

    updated_at: Annotated[datetime, Field(
        description='Timestamp when the budget was last updated'
    )]
