"""Pydantic schemas for users.

Learn: Read schemas are the ONLY way a User leaves the API, and none of
them has a password field — so the hash can't be serialized by accident.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from inkwell.auth.roles import Role

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 72  # bcrypt only looks at the first 72 bytes


class UserCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    role: Optional[Role] = None


class UserRead(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: Optional[str] = None
    email: str
    role: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AuthorRead(BaseModel):
    """Public author info embedded in blogs and comments (no email)."""
    id: uuid.UUID
    first_name: str
    last_name: Optional[str] = None
    role: str

    model_config = {"from_attributes": True}
