"""
Payment Data Models

This module contains models related to payments, checkout sessions and
settlement results.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.shared import FirestoreBaseModel, InsertResult, UpdateResult


class BasePaymentRecord(BaseModel):
    """Base payment record model shared between Firestore and API."""

    model_config = ConfigDict(populate_by_name=True)

    amount: float = Field(..., ge=0, description="Amount in major currency units")
    currency: str = Field(..., description="Payment currency code")
    customer_email: Optional[str] = Field(None, alias="customerEmail")
    parcel_id: str = Field(..., alias="parcelId")
    parcel_name: Optional[str] = Field(None, alias="parcelName")
    transaction_id: str = Field(
        ..., alias="transactionId", description="Stripe payment intent ID"
    )
    payment_status: str = Field(..., alias="paymentStatus")
    paid_at: datetime = Field(..., alias="paidAt")
    tracking_id: str = Field(..., alias="trackingId")


class PaymentRecord(BasePaymentRecord, FirestoreBaseModel):
    """Payment record document model for the payments collection."""

    pass


class CheckoutSession(BaseModel):
    """The subset of a Stripe Checkout Session read during settlement."""

    id: str
    url: Optional[str] = None
    payment_status: Optional[str] = None
    payment_intent: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    amount_total: Optional[int] = None
    currency: Optional[str] = None
    customer_email: Optional[str] = None


class CheckoutSessionRequest(BaseModel):
    """Request body for creating a checkout session for a parcel."""

    model_config = ConfigDict(populate_by_name=True)

    cost: float = Field(..., gt=0)
    parcel_name: str = Field(..., alias="parcelName", min_length=1)
    parcel_id: str = Field(..., alias="parcelId", min_length=1)
    sender_email: str = Field(..., alias="sendarEmail")


class CheckoutSessionResponse(BaseModel):
    url: str


class SettlementResult(BaseModel):
    """Outcome of confirming a checkout session."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    tracking_id: Optional[str] = Field(None, alias="trackingId")
    transaction_id: Optional[str] = Field(None, alias="transactionId")
    modify_parcel: Optional[UpdateResult] = Field(None, alias="modifyParcel")
    payment_info: Optional[InsertResult] = Field(None, alias="paymentInfo")
    payment_status: Optional[str] = Field(None, alias="paymentStatus")
    message: Optional[str] = None
    replayed: bool = Field(False, exclude=True)
