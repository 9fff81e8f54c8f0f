"""Account and session schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from ruleadmin.core.constants import PASSWORD_MAX_LENGTH, PASSWORD_MIN_LENGTH
from ruleadmin.schemas.common import CamelModel


class CredentialsRequest(BaseModel):
    """Request body for POST /auth/signup and POST /auth/login."""

    email: EmailStr
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH
    )

    @field_validator("email")
    @classmethod
    def normalise_email(cls, value: str) -> str:
        return value.lower()


class CurrentUserOut(CamelModel):
    """The authenticated user behind the current session."""

    user_id: UUID
    email: str
    expires_at: datetime
