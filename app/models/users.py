"""
User Data Models

This module contains models related to users and their roles.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.shared import FirestoreBaseModel


class UserRole(str, Enum):
    """User role enumeration."""

    USER = "user"
    RIDER = "rider"
    ADMIN = "admin"


class UserCreateRequest(BaseModel):
    """Request body for registering a user after sign-up."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=3, description="User email address")
    display_name: Optional[str] = Field(None, alias="displayName")
    photo_url: Optional[str] = Field(None, alias="photoURL")


class User(FirestoreBaseModel):
    """User document model for the users collection."""

    email: str = Field(..., description="User email address")
    display_name: Optional[str] = Field(None, alias="displayName")
    photo_url: Optional[str] = Field(None, alias="photoURL")
    role: UserRole = Field(UserRole.USER, description="Authorization role")
    created_at: datetime = Field(..., alias="createdAt")


class RoleUpdateRequest(BaseModel):
    role: UserRole


class RoleResponse(BaseModel):
    role: UserRole


class AuthenticatedUser(BaseModel):
    """Principal decoded from a verified identity token."""

    uid: str
    email: Optional[str] = None
    name: Optional[str] = None
