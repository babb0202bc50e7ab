import logging
from datetime import datetime, timezone
from traceback import format_exc
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.models.riders import (
    RiderApplication,
    RiderCreateRequest,
    RiderStatus,
    RiderStatusUpdateRequest,
)
from app.models.shared import InsertResult, UpdateResult
from app.models.users import AuthenticatedUser, User, UserRole
from app.server.routers.auth_routes import (
    get_current_user,
    get_user_record,
    verify_admin,
    verify_rider,
)
from app.services.errors import ZapShiftError
from app.services.firestore_service import (
    RIDERS,
    USERS,
    FirestoreService,
    get_firestore_service,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create a router for rider onboarding operations
rider_router = APIRouter()


@rider_router.post("", response_model=InsertResult)
async def apply_as_rider(
    request: RiderCreateRequest,
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
) -> InsertResult:
    """Submit a rider application for admin review."""
    rider = RiderApplication(
        **request.model_dump(),
        status=RiderStatus.PENDING,
        created_at=datetime.now(timezone.utc),
    )

    try:
        result = await firestore_service.create_document(
            collection_name=RIDERS, document_data=rider.to_document()
        )
    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to store rider application: {str(e)}\n{format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit rider application",
        )

    logger.info(f"Rider application {result.inserted_id} submitted by {request.email}")
    return result


@rider_router.get("", response_model=List[RiderApplication])
async def get_riders(
    admin: Annotated[User, Depends(verify_admin)],
    firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
    rider_status: Annotated[Optional[RiderStatus], Query(alias="status")] = None,
) -> List[RiderApplication]:
    """List rider applications, optionally by status (admin only)."""
    filters = [("status", "==", rider_status.value)] if rider_status else None
    try:
        riders = await firestore_service.query_collection(
            collection_name=RIDERS, filters=filters, model_class=RiderApplication
        )
    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    riders.sort(key=lambda r: r.created_at, reverse=True)
    return riders


@rider_router.get("/me", response_model=RiderApplication)
async def get_my_application(
    rider: Annotated[User, Depends(verify_rider)],
    firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
) -> RiderApplication:
    """Get the approved application of the calling rider."""
    try:
        application = await firestore_service.find_one(
            collection_name=RIDERS,
            filters=[("email", "==", rider.email), ("status", "==", RiderStatus.APPROVED.value)],
            model_class=RiderApplication,
        )
    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if application is None:
        raise HTTPException(status_code=404, detail="Rider application not found")
    return application


@rider_router.patch("/{rider_id}", response_model=UpdateResult)
async def update_rider_status(
    rider_id: str,
    request: RiderStatusUpdateRequest,
    admin: Annotated[User, Depends(verify_admin)],
    firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
) -> UpdateResult:
    """Approve or reject a rider application. Approval promotes the user to rider."""
    try:
        result = await firestore_service.update_document(
            collection_name=RIDERS,
            document_id=rider_id,
            update_data={"status": request.status.value},
        )

        if request.status == RiderStatus.APPROVED and result.matched_count:
            user = await get_user_record(firestore_service, request.email)
            if user is None:
                logger.warning(f"Approved rider {rider_id} has no user account {request.email}")
            else:
                await firestore_service.update_document(
                    collection_name=USERS,
                    document_id=user.id,
                    update_data={"role": UserRole.RIDER.value},
                )
                logger.info(f"Promoted {request.email} to rider")
    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return result
