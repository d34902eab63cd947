"""
Pydantic schemas for registration, login and PIN setup.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, model_validator


class UserRegister(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    username: str | None = Field(default=None, min_length=3, max_length=50)
    email: str | None = Field(default=None, min_length=5, max_length=255)
    phone: str | None = Field(default=None, min_length=7, max_length=20)
    password: str = Field(min_length=8, max_length=72)

    @model_validator(mode="after")
    def needs_an_identifier(self):
        if not (self.username or self.email or self.phone):
            raise ValueError("one of username, email or phone is required")
        return self


class UserLogin(BaseModel):
    """Log in with a username, email or phone number."""
    identifier: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=72)


class PinSet(BaseModel):
    """New PIN, confirmed with the account password."""
    password: str = Field(min_length=1, max_length=72)
    pin: str = Field(pattern=r"^\d{4,6}$")


class UserResponse(BaseModel):
    id: uuid.UUID
    name: str
    username: str | None
    email: str | None
    phone: str | None
    has_pin: bool
    created_at: datetime


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
