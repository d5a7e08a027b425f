"""Category domain model."""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, Field


class Category(BaseModel):
    """A transaction category owned by one user."""

    id: Annotated[str, Field(
        description='Unique identifier for the category'
    )]

    user_id: Annotated[str, Field(
        description='Internal id of the owning user'
    )]

    name: Annotated[str, Field(
        description='Category name',
        examples=['Groceries']
    )]

    type: Annotated[str, Field(
        description='Category type',
        examples=['income', 'expense']
    )]

    icon: Annotated[Optional[str], Field(
        default=None,
        description='Optional icon identifier',
        examples=['shopping-cart']
    )] = None

    color: Annotated[Optional[str], Field(
        default=None,
        description='Optional display color',
        examples=['#4CAF50']
    )] = None

    created_at: Annotated[datetime, Field(
        description='Timestamp when the category was created'
    )]

    updated_at: Annotated[datetime, Field(
        description='Timestamp when the category was last updated'
    )]
