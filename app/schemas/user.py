"""Pydantic schemas for user endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    """Public view of a user. Never carries the password or refresh token."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    username: str
    email: str
    full_name: str = Field(serialization_alias="fullName")
    avatar: str
    cover_image: str | None = Field(default="", serialization_alias="coverImage")
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")
    updated_at: datetime | None = Field(default=None, serialization_alias="updatedAt")

    def to_public(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class LoginRequest(BaseModel):
    username: str | None = None
    email: str | None = None
    password: str | None = None


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    old_password: str | None = Field(default=None, alias="oldPassword")
    new_password: str | None = Field(default=None, alias="newPassword")


class UpdateAccountRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: str | None = Field(default=None, alias="fullName")
    email: str | None = None
