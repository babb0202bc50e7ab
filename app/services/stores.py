"""
Parcel and Payment Stores

Narrow repository interfaces used by the settlement workflow, with Firestore
backed implementations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from app.models.parcels import DeliveryStatus, Parcel
from app.models.payments import PaymentRecord
from app.models.shared import InsertResult, UpdateResult
from app.services.firestore_service import PARCELS, PAYMENTS, FirestoreService


class ParcelStore(ABC):
    """Parcel operations needed by settlement."""

    @abstractmethod
    async def get(self, parcel_id: str) -> Optional[Parcel]:
        pass

    @abstractmethod
    async def mark_paid(self, parcel_id: str, tracking_id: str) -> UpdateResult:
        """Set the parcel's delivery status to Paid and attach its tracking ID."""
        pass


class PaymentStore(ABC):
    """Payment operations needed by settlement and payment history."""

    @abstractmethod
    async def find_by_transaction(self, transaction_id: str) -> Optional[PaymentRecord]:
        pass

    @abstractmethod
    async def insert(self, payment: PaymentRecord) -> InsertResult:
        """
        Insert a payment record.

        Raises:
            google.api_core.exceptions.AlreadyExists: a payment for the same
                transaction ID was inserted first
        """
        pass

    @abstractmethod
    async def list_by_email(self, email: Optional[str] = None) -> List[PaymentRecord]:
        """Payments for a customer (all payments when email is None), newest first."""
        pass


class FirestoreParcelStore(ParcelStore):
    def __init__(self, firestore_service: FirestoreService):
        self.firestore_service = firestore_service

    async def get(self, parcel_id: str) -> Optional[Parcel]:
        return await self.firestore_service.get_document(
            collection_name=PARCELS, document_id=parcel_id, model_class=Parcel
        )

    async def mark_paid(self, parcel_id: str, tracking_id: str) -> UpdateResult:
        return await self.firestore_service.update_document(
            collection_name=PARCELS,
            document_id=parcel_id,
            update_data={
                "deliveryStatus": DeliveryStatus.PAID.value,
                "trackingId": tracking_id,
            },
        )


class FirestorePaymentStore(PaymentStore):
    """Payments keyed by transaction ID so Firestore enforces one record per transaction."""

    def __init__(self, firestore_service: FirestoreService):
        self.firestore_service = firestore_service

    async def find_by_transaction(self, transaction_id: str) -> Optional[PaymentRecord]:
        return await self.firestore_service.get_document(
            collection_name=PAYMENTS,
            document_id=transaction_id,
            model_class=PaymentRecord,
        )

    async def insert(self, payment: PaymentRecord) -> InsertResult:
        return await self.firestore_service.create_document(
            collection_name=PAYMENTS,
            document_data=payment.to_document(),
            document_id=payment.transaction_id,
            exclusive=True,
        )

    async def list_by_email(self, email: Optional[str] = None) -> List[PaymentRecord]:
        filters = [("customerEmail", "==", email)] if email else None
        payments = await self.firestore_service.query_collection(
            collection_name=PAYMENTS,
            filters=filters,
            model_class=PaymentRecord,
        )

        # Sort by paidAt in Python to avoid a composite index on customerEmail
        payments.sort(key=lambda p: p.paid_at, reverse=True)
        return payments
