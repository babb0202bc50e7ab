import logging
from datetime import datetime, timezone
from traceback import format_exc
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.models.parcels import DeliveryStatus, Parcel, ParcelCreateRequest
from app.models.shared import DeleteResult, InsertResult
from app.models.users import AuthenticatedUser
from app.server.routers.auth_routes import (
    ensure_email_access,
    ensure_owner_or_admin,
    get_current_user,
)
from app.services.errors import ZapShiftError
from app.services.firestore_service import (
    PARCELS,
    FirestoreService,
    get_firestore_service,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create a router for parcel operations
parcel_router = APIRouter()


@parcel_router.get("", response_model=List[Parcel])
async def get_parcels(
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
    email: Optional[str] = None,
    delivery_status: Annotated[
        Optional[DeliveryStatus], Query(alias="deliveryStatus")
    ] = None,
) -> List[Parcel]:
    """Get parcels sent by a user, newest first."""
    await ensure_email_access(current_user, email, firestore_service)

    filters = []
    if email:
        filters.append(("sendarEmail", "==", email))
    if delivery_status:
        filters.append(("deliveryStatus", "==", delivery_status.value))

    try:
        parcels = await firestore_service.query_collection(
            collection_name=PARCELS,
            filters=filters or None,
            model_class=Parcel,
        )
    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to fetch parcels: {str(e)}\n{format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch parcels",
        )

    # Sort by createdAt in Python (no composite index on sendarEmail)
    parcels.sort(key=lambda p: p.created_at, reverse=True)
    return parcels


@parcel_router.get("/{parcel_id}", response_model=Parcel)
async def get_parcel(
    parcel_id: str,
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
) -> Parcel:
    """Get a single parcel by ID. Only its sender or an admin may read it."""
    try:
        parcel = await firestore_service.get_document(
            collection_name=PARCELS, document_id=parcel_id, model_class=Parcel
        )
    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if parcel is None:
        raise HTTPException(status_code=404, detail="Parcel not found")
    await ensure_owner_or_admin(current_user, parcel.sender_email, firestore_service)
    return parcel


@parcel_router.post("", response_model=InsertResult)
async def create_parcel(
    request: ParcelCreateRequest,
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
) -> InsertResult:
    """Book a new parcel. It stays unpaid until its checkout session settles."""
    parcel = Parcel(
        **request.model_dump(),
        delivery_status=DeliveryStatus.CREATED,
        tracking_id=None,
        created_at=datetime.now(timezone.utc),
    )

    try:
        result = await firestore_service.create_document(
            collection_name=PARCELS, document_data=parcel.to_document()
        )
    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to create parcel: {str(e)}\n{format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create parcel",
        )

    logger.info(f"Created parcel {result.inserted_id} for {request.sender_email}")
    return result


@parcel_router.delete("/{parcel_id}", response_model=DeleteResult)
async def delete_parcel(
    parcel_id: str,
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
) -> DeleteResult:
    """Delete a parcel. Only its sender or an admin may delete it."""
    try:
        parcel = await firestore_service.get_document(
            collection_name=PARCELS, document_id=parcel_id, model_class=Parcel
        )
        if parcel is None:
            return DeleteResult(deleted_count=0)
        await ensure_owner_or_admin(current_user, parcel.sender_email, firestore_service)

        return await firestore_service.delete_document(
            collection_name=PARCELS, document_id=parcel_id
        )
    except HTTPException:
        raise
    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to delete parcel {parcel_id}: {str(e)}\n{format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete parcel",
        )
