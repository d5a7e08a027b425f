"""
User domain model.

A user row maps the external identity asserted by the authorizer to the
internal id that every other entity references as ``user_id``.
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field

PLACEHOLDER_NAME = 'New User'
PLACEHOLDER_EMAIL_DOMAIN = 'example.com'


def placeholder_email(identity: str) -> str:
    """Email given to a user provisioned on first sight."""
    return f'{identity}@{PLACEHOLDER_EMAIL_DOMAIN}'


class User(BaseModel):
    """Core User domain model."""

    id: Annotated[str, Field(
        description='Internal user id, the join key for owned entities',
        examples=['0f8fad5b-d9cb-469f-a165-70867728950e']
    )]

    auth0_user_id: Annotated[str, Field(
        description='External identity id, unique per user',
        examples=['auth0|64f1c2e9a1b2c3d4e5f60718']
    )]

    email: Annotated[str, Field(
        description='Contact email address',
        examples=['jane.doe@example.com']
    )]

    name: Annotated[str, Field(
        description='Display name',
        examples=['Jane Doe']
    )]

    created_at: Annotated[datetime, Field(
        description='Timestamp when the user was created'
    )]

    updated_at: Annotated[datetime, Field(
        description='Timestamp when the user was last updated'
    )]
