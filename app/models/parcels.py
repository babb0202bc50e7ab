"""
Parcel Data Models

This module contains models related to parcels and their delivery state.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.shared import FirestoreBaseModel


class DeliveryStatus(str, Enum):
    """Parcel delivery status enumeration."""

    CREATED = "Created"
    PAID = "Paid"


class BaseParcel(BaseModel):
    """Base parcel model shared between Firestore and API."""

    model_config = ConfigDict(populate_by_name=True)

    sender_email: str = Field(..., alias="sendarEmail", description="Sender email")
    parcel_name: str = Field(
        ..., alias="parcelName", min_length=1, description="Parcel name"
    )
    cost: float = Field(..., gt=0, description="Declared delivery cost")
    parcel_type: Optional[str] = Field(None, alias="parcelType")
    parcel_weight: Optional[float] = Field(None, alias="parcelWeight", ge=0)
    sender_name: Optional[str] = Field(None, alias="senderName")
    sender_region: Optional[str] = Field(None, alias="senderRegion")
    sender_district: Optional[str] = Field(None, alias="senderDistrict")
    sender_address: Optional[str] = Field(None, alias="senderAddress")
    receiver_name: Optional[str] = Field(None, alias="receiverName")
    receiver_email: Optional[str] = Field(None, alias="receiverEmail")
    receiver_region: Optional[str] = Field(None, alias="receiverRegion")
    receiver_district: Optional[str] = Field(None, alias="receiverDistrict")
    receiver_address: Optional[str] = Field(None, alias="receiverAddress")


class ParcelCreateRequest(BaseParcel):
    """Request body for creating a parcel."""

    pass


class Parcel(BaseParcel, FirestoreBaseModel):
    """Parcel document model for the parcels collection."""

    delivery_status: DeliveryStatus = Field(
        DeliveryStatus.CREATED, alias="deliveryStatus"
    )
    tracking_id: Optional[str] = Field(None, alias="trackingId")
    created_at: datetime = Field(..., alias="createdAt")
