import logging
from traceback import format_exc
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from app.models.payments import (
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    PaymentRecord,
)
from app.models.users import AuthenticatedUser
from app.server.routers.auth_routes import ensure_email_access, get_current_user
from app.services.errors import ZapShiftError
from app.services.firestore_service import FirestoreService, get_firestore_service
from app.services.payments.settlement import SettlementService, get_settlement_service

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create payment router
payment_router = APIRouter()


@payment_router.post("/payment-checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    request: CheckoutSessionRequest,
    settlement_service: Annotated[SettlementService, Depends(get_settlement_service)],
) -> CheckoutSessionResponse:
    """Create a Stripe Checkout session for a parcel's delivery cost."""
    try:
        url = await settlement_service.create_checkout_session(
            parcel_id=request.parcel_id,
            parcel_name=request.parcel_name,
            cost=request.cost,
            sender_email=request.sender_email,
        )
        return CheckoutSessionResponse(url=url)

    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to create checkout session: {str(e)}\n{format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create checkout session",
        )


@payment_router.patch("/payment-success")
async def confirm_payment(
    session_id: Annotated[str, Query(min_length=1)],
    settlement_service: Annotated[SettlementService, Depends(get_settlement_service)],
):
    """Settle a checkout session after Stripe redirects the client back."""
    try:
        result = await settlement_service.confirm_payment(session_id)
    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to confirm payment {session_id}: {str(e)}\n{format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to confirm payment",
        )

    if result.replayed:
        return result.model_dump(
            by_alias=True, include={"message", "transaction_id", "tracking_id"}
        )

    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content=result.model_dump(
                by_alias=True,
                include={"success", "payment_status", "transaction_id", "message"},
            ),
        )

    return result.model_dump(
        by_alias=True,
        include={
            "success",
            "tracking_id",
            "transaction_id",
            "modify_parcel",
            "payment_info",
        },
    )


@payment_router.get("/payments", response_model=List[PaymentRecord])
async def get_payments(
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
    settlement_service: Annotated[SettlementService, Depends(get_settlement_service)],
    email: Optional[str] = None,
) -> List[PaymentRecord]:
    """Get payment history for a customer, newest first."""
    await ensure_email_access(current_user, email, firestore_service)

    try:
        return await settlement_service.payment_store.list_by_email(email)
    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to get payment history: {str(e)}\n{format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve payment history",
        )
