"""
Models Package

This package contains database schema models organized by domain:
- parcels.py: Parcel and delivery status models
- payments.py: Payment record, checkout session and settlement models
- riders.py: Rider onboarding application models
- users.py: User, role and authenticated principal models
- shared.py: Common base model and write result descriptors
"""

# Import all models for easy access
from app.models.parcels import (
    BaseParcel,
    DeliveryStatus,
    Parcel,
    ParcelCreateRequest,
)
from app.models.payments import (
    BasePaymentRecord,
    CheckoutSession,
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    PaymentRecord,
    SettlementResult,
)
from app.models.riders import (
    BaseRiderApplication,
    RiderApplication,
    RiderCreateRequest,
    RiderStatus,
    RiderStatusUpdateRequest,
)
from app.models.shared import (
    DeleteResult,
    FirestoreBaseModel,
    InsertResult,
    UpdateResult,
)
from app.models.users import (
    AuthenticatedUser,
    RoleResponse,
    RoleUpdateRequest,
    User,
    UserCreateRequest,
    UserRole,
)

__all__ = [
    # Base models
    "FirestoreBaseModel",
    "InsertResult",
    "UpdateResult",
    "DeleteResult",
    # Parcel models
    "BaseParcel",
    "DeliveryStatus",
    "Parcel",
    "ParcelCreateRequest",
    # Payment models
    "BasePaymentRecord",
    "CheckoutSession",
    "CheckoutSessionRequest",
    "CheckoutSessionResponse",
    "PaymentRecord",
    "SettlementResult",
    # Rider models
    "BaseRiderApplication",
    "RiderApplication",
    "RiderCreateRequest",
    "RiderStatus",
    "RiderStatusUpdateRequest",
    # User models
    "AuthenticatedUser",
    "RoleResponse",
    "RoleUpdateRequest",
    "User",
    "UserCreateRequest",
    "UserRole",
]
