"""Pydantic schemas for registration and login.

The 64-character limits on username and password match the accounts
table. The password hash never appears in any response schema.
"""

from pydantic import BaseModel, Field

from taskgate.db.models import USERNAME_MAX_LENGTH

PASSWORD_MAX_LENGTH = 64


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LENGTH)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LENGTH)


class LoginRequest(BaseModel):
    username: str = Field(..., max_length=USERNAME_MAX_LENGTH)
    password: str = Field(..., max_length=PASSWORD_MAX_LENGTH)
    remember_me: bool = Field(False, alias="rememberMe")

    model_config = {"populate_by_name": True}


class AccountRead(BaseModel):
    id: int
    username: str

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    token: str
