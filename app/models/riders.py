"""
Rider Data Models

This module contains models related to rider onboarding applications.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.shared import FirestoreBaseModel


class RiderStatus(str, Enum):
    """Rider application status enumeration."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class BaseRiderApplication(BaseModel):
    """Base rider application model shared between Firestore and API."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, description="Rider full name")
    email: str = Field(..., description="Rider email address")
    age: Optional[int] = Field(None, ge=18, description="Rider age")
    region: Optional[str] = None
    district: Optional[str] = None
    phone: Optional[str] = None
    nid: Optional[str] = Field(None, description="National ID number")
    bike_brand: Optional[str] = Field(None, alias="bikeBrand")
    bike_registration: Optional[str] = Field(None, alias="bikeRegistration")


class RiderCreateRequest(BaseRiderApplication):
    """Request body for submitting a rider application."""

    pass


class RiderApplication(BaseRiderApplication, FirestoreBaseModel):
    """Rider application document model for the riders collection."""

    status: RiderStatus = Field(RiderStatus.PENDING)
    created_at: datetime = Field(..., alias="createdAt")


class RiderStatusUpdateRequest(BaseModel):
    """Request body for approving or rejecting a rider application."""

    status: RiderStatus
    email: str
