"""
Transaction domain model.

Account and category are referenced by id only; this layer does not check
that the referenced rows exist or belong to the same user.
"""

import datetime as dt
from typing import Annotated, Optional

from pydantic import BaseModel, Field


class Transaction(BaseModel):
    """A single income or expense entry."""

    id: Annotated[str, Field(
        description='Unique identifier for the transaction'
    )]

    user_id: Annotated[str, Field(
        description='Internal id of the owning user'
    )]

    account_id: Annotated[str, Field(
        description='Account the transaction was booked against'
    )]

    category_id: Annotated[Optional[str], Field(
        default=None,
        description='Optional category of the transaction'
    )] = None

    type: Annotated[str, Field(
        description='Transaction type',
        examples=['income', 'expense', 'transfer']
    )]

    amount: Annotated[float, Field(
        description='Transaction amount',
        examples=[1200.0]
    )]

    description: Annotated[Optional[str], Field(
        default=None,
        description='Optional free-text description',
        examples=['Weekly groceries']
    )] = None

    date: Annotated[dt.date, Field(
        description='Booking date',
        examples=['2024-03-01']
    )]

    created_at: Annotated[dt.datetime, Field(
        description='Timestamp when the transaction was created'
    )]

    updated_at: Annotated[dt.datetime, Field(
        description='Timestamp when the transaction was last updated'
    )]
