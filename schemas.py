import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models import User


class UserRequest(BaseModel):
    """Body of registration and profile update requests."""

    username: str = ""
    name: str = ""
    password: str = ""
    role: str = ""


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(alias="accessToken")


class UserResponse(BaseModel):
    """
    Public view of a user. Optional fields are left out of the JSON when
    unset (routes use ``response_model_exclude_none``).
    """

    model_config = ConfigDict(populate_by_name=True)

    id: uuid.UUID
    username: str
    name: str
    role: str
    access_token: str = Field(default="", alias="accessToken")
    created_at: datetime = Field(alias="createdAt")
    created_by: uuid.UUID = Field(alias="createdBy")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    updated_by: Optional[uuid.UUID] = Field(default=None, alias="updatedBy")
    deleted_at: Optional[datetime] = Field(default=None, alias="deletedAt")
    deleted_by: Optional[uuid.UUID] = Field(default=None, alias="deletedBy")

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            name=user.name,
            role=user.role,
            access_token=user.access_token,
            created_at=user.created_at,
            created_by=user.created_by,
            updated_at=user.updated_at,
            updated_by=user.updated_by,
            deleted_at=user.deleted_at,
            deleted_by=user.deleted_by,
        )


class ClaimsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: uuid.UUID = Field(alias="userId")
    username: str
    role: str
    iat: int
    exp: int
    iss: str
