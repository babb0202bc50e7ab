"""
Payment Settlement

Turns a completed Stripe Checkout Session into a Payment record and a paid
Parcel, issuing the parcel's tracking ID exactly once per payment intent.
Settlement runs when the client is redirected back from checkout. Re-polling
the same session replays the stored result, re-applying the parcel update only
if it never landed.
"""

import logging
import secrets
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import Depends
from google.api_core.exceptions import AlreadyExists

from app.models.payments import CheckoutSession, PaymentRecord, SettlementResult
from app.services.errors import UpstreamError
from app.services.firestore_service import FirestoreService, get_firestore_service
from app.services.payments.stripe import (
    CheckoutProvider,
    get_checkout_provider,
    to_minor_units,
)
from app.services.stores import (
    FirestoreParcelStore,
    FirestorePaymentStore,
    ParcelStore,
    PaymentStore,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PAID = "paid"


def generate_tracking_id(now: Optional[datetime] = None) -> str:
    """
    Generate a parcel tracking ID of the form PRCL-YYYYMMDD-XXXXXX.

    Args:
        now: Issue time, defaults to the current UTC time

    Returns:
        Tracking ID with the UTC date and six uppercase hex digits
    """
    now = now or datetime.now(timezone.utc)
    return f"PRCL-{now.astimezone(timezone.utc):%Y%m%d}-{secrets.token_hex(3).upper()}"


class SettlementService:
    """Creates checkout sessions for parcels and settles them after redirect."""

    def __init__(
        self,
        parcel_store: ParcelStore,
        payment_store: PaymentStore,
        checkout_provider: CheckoutProvider,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.parcel_store = parcel_store
        self.payment_store = payment_store
        self.checkout_provider = checkout_provider
        self.clock = clock

    async def create_checkout_session(
        self, parcel_id: str, parcel_name: str, cost: float, sender_email: str
    ) -> str:
        """
        Start a hosted checkout for a parcel.

        Returns:
            The URL to redirect the client to
        """
        session = await self.checkout_provider.create_session(
            amount_minor=to_minor_units(cost),
            product_name=parcel_name,
            customer_email=sender_email,
            metadata={"parcelId": parcel_id, "parcelName": parcel_name},
        )
        if not session.url:
            raise UpstreamError(f"Checkout session {session.id} has no redirect URL")
        return session.url

    async def confirm_payment(self, session_id: str) -> SettlementResult:
        """
        Settle a checkout session.

        Raises:
            UpstreamError: The session could not be retrieved or is malformed
        """
        session = await self.checkout_provider.retrieve_session(session_id)
        transaction_id = session.payment_intent

        if transaction_id:
            existing = await self.payment_store.find_by_transaction(transaction_id)
            if existing:
                logger.info(f"Payment {transaction_id} already settled, replaying")
                await self._repair_parcel(existing)
                return self._replay(existing)

        if session.payment_status != PAID:
            logger.info(
                f"Checkout session {session_id} not paid (status: {session.payment_status})"
            )
            return SettlementResult(
                success=False,
                transaction_id=transaction_id,
                payment_status=session.payment_status,
                message="Payment not completed",
            )

        if not transaction_id:
            raise UpstreamError(f"Paid checkout session {session_id} has no payment intent")

        return await self._settle(session, transaction_id)

    async def _settle(self, session: CheckoutSession, transaction_id: str) -> SettlementResult:
        parcel_id = session.metadata.get("parcelId")
        if not parcel_id:
            raise UpstreamError(f"Checkout session {session.id} carries no parcelId")

        now = self.clock()
        tracking_id = generate_tracking_id(now)
        payment = PaymentRecord(
            amount=(session.amount_total or 0) / 100,
            currency=session.currency or "",
            customer_email=session.customer_email,
            parcel_id=parcel_id,
            parcel_name=session.metadata.get("parcelName"),
            transaction_id=transaction_id,
            payment_status=session.payment_status,
            paid_at=now,
            tracking_id=tracking_id,
        )

        # The payment is claimed first so only one confirmation touches the parcel
        try:
            payment_info = await self.payment_store.insert(payment)
        except AlreadyExists:
            logger.info(f"Payment {transaction_id} settled concurrently, replaying")
            existing = await self.payment_store.find_by_transaction(transaction_id)
            return self._replay(existing)

        modify_parcel = await self.parcel_store.mark_paid(parcel_id, tracking_id)
        if modify_parcel.matched_count == 0:
            logger.warning(
                f"Parcel {parcel_id} not found while settling payment {transaction_id}"
            )

        logger.info(
            f"Settled payment {transaction_id} for parcel {parcel_id} with tracking ID {tracking_id}"
        )
        return SettlementResult(
            success=True,
            tracking_id=tracking_id,
            transaction_id=transaction_id,
            modify_parcel=modify_parcel,
            payment_info=payment_info,
        )

    async def _repair_parcel(self, payment: PaymentRecord) -> None:
        """Re-apply the paid state when an earlier parcel write did not land."""
        parcel = await self.parcel_store.get(payment.parcel_id)
        if parcel is None or parcel.tracking_id == payment.tracking_id:
            return
        logger.warning(
            f"Parcel {payment.parcel_id} out of sync with payment {payment.transaction_id}, re-applying"
        )
        await self.parcel_store.mark_paid(payment.parcel_id, payment.tracking_id)

    @staticmethod
    def _replay(payment: PaymentRecord) -> SettlementResult:
        return SettlementResult(
            success=True,
            replayed=True,
            tracking_id=payment.tracking_id,
            transaction_id=payment.transaction_id,
            message="Payment already exists",
        )


def get_settlement_service(
    firestore_service: FirestoreService = Depends(get_firestore_service),
    checkout_provider: CheckoutProvider = Depends(get_checkout_provider),
) -> SettlementService:
    """Build the settlement service on the shared Firestore service and Stripe provider."""
    return SettlementService(
        parcel_store=FirestoreParcelStore(firestore_service),
        payment_store=FirestorePaymentStore(firestore_service),
        checkout_provider=checkout_provider,
    )
