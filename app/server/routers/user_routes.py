import logging
from datetime import datetime, timezone
from traceback import format_exc
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from app.models.shared import UpdateResult
from app.models.users import (
    AuthenticatedUser,
    RoleResponse,
    RoleUpdateRequest,
    User,
    UserCreateRequest,
    UserRole,
)
from app.server.routers.auth_routes import (
    get_current_user,
    get_user_record,
    verify_admin,
)
from app.services.errors import ZapShiftError
from app.services.firestore_service import USERS, FirestoreService, get_firestore_service

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create a router for user and role operations
user_router = APIRouter()


class UserCreateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    inserted_id: Optional[str] = Field(None, alias="insertedId")


@user_router.post("", response_model=UserCreateResponse)
async def create_user(
    request: UserCreateRequest,
    firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
) -> UserCreateResponse:
    """Register a user after sign-up. Existing emails are left untouched."""
    try:
        existing = await get_user_record(firestore_service, request.email)
        if existing:
            return UserCreateResponse(message="user exists")

        user = User(
            **request.model_dump(),
            role=UserRole.USER,
            created_at=datetime.now(timezone.utc),
        )
        result = await firestore_service.create_document(
            collection_name=USERS, document_data=user.to_document()
        )
        return UserCreateResponse(inserted_id=result.inserted_id)

    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to create user {request.email}: {str(e)}\n{format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create user",
        )


@user_router.get("", response_model=List[User])
async def get_users(
    admin: Annotated[User, Depends(verify_admin)],
    firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
    search_text: Annotated[Optional[str], Query(alias="searchText")] = None,
    limit: int = 50,
) -> List[User]:
    """Search users by email or display name (admin only)."""
    try:
        users = await firestore_service.query_collection(
            collection_name=USERS, model_class=User
        )
    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    # Firestore has no substring queries, so match in Python
    if search_text:
        needle = search_text.lower()
        users = [
            user
            for user in users
            if needle in user.email.lower()
            or needle in (user.display_name or "").lower()
        ]

    users.sort(key=lambda u: u.created_at, reverse=True)
    return users[:limit]


@user_router.get("/{email}/role", response_model=RoleResponse)
async def get_user_role(
    email: str,
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
) -> RoleResponse:
    """Get the stored role for an email, defaulting to a plain user."""
    try:
        user = await get_user_record(firestore_service, email)
    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return RoleResponse(role=user.role if user else UserRole.USER)


@user_router.patch("/{user_id}/role", response_model=UpdateResult)
async def update_user_role(
    user_id: str,
    request: RoleUpdateRequest,
    admin: Annotated[User, Depends(verify_admin)],
    firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
) -> UpdateResult:
    """Change a user's role (admin only)."""
    try:
        result = await firestore_service.update_document(
            collection_name=USERS,
            document_id=user_id,
            update_data={"role": request.role.value},
        )
    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    logger.info(f"Admin {admin.email} set role of user {user_id} to {request.role.value}")
    return result
