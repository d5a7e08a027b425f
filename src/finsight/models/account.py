"""Account domain model."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field


class Account(BaseModel):
    """A financial account owned by one user."""

    id: Annotated[str, Field(
        description='Unique identifier for the account',
        examples=['7c9e6679-7425-40de-944b-e07fc1f90ae7']
    )]

    user_id: Annotated[str, Field(
        description='Internal id of the owning user'
    )]

    name: Annotated[str, Field(
        description='Account name',
        examples=['Checking']
    )]

    type: Annotated[str, Field(
        description='Account type',
        examples=['checking', 'savings', 'credit']
    )]

    # Plain signed number, no ledger enforcement
    balance: Annotated[float, Field(
        description='Current balance',
        examples=[100.0, -42.5]
    )]

    currency: Annotated[str, Field(
        description='ISO 4217 currency code',
        examples=['JPY', 'USD']
    )]

    created_at: Annotated[datetime, Field(
        description='Timestamp when the account was created'
    )]

    updated_at: Annotated[datetime, Field(
        description='Timestamp when the account was last updated'
    )]
