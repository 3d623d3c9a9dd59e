from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator


# bcrypt only ever looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72

Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=50)]
DisplayName = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: Username
    email: EmailStr
    # passwords are hashed exactly as typed, never stripped
    password: str = Field(..., min_length=6)
    first_name: Optional[DisplayName] = Field(default=None, alias="firstName")
    last_name: Optional[DisplayName] = Field(default=None, alias="lastName")

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    # username or email
    username: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    password: str = Field(..., min_length=1)


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    username: str
    email: str
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class RegisterResponse(BaseModel):
    message: str
    user: UserRead


class AuthResponse(BaseModel):
    token: str
    user: UserRead


class ProfileResponse(BaseModel):
    user_id: int
    username: str
