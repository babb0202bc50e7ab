import logging
from traceback import format_exc
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from app.models.users import AuthenticatedUser, User, UserRole
from app.services.errors import AuthError, ZapShiftError
from app.services.firestore_service import USERS, FirestoreService, get_firestore_service
from app.services.identity import TokenVerifier, get_token_verifier

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create a router for authentication operations
auth_router = APIRouter()

bearer_scheme = HTTPBearer(auto_error=False)


class MeResponse(BaseModel):
    uid: str
    email: Optional[str] = None
    role: UserRole


def _to_http_exception(error: ZapShiftError) -> HTTPException:
    headers = {"WWW-Authenticate": "Bearer"} if error.status_code == 401 else None
    return HTTPException(
        status_code=error.status_code, detail=error.message, headers=headers
    )


async def get_current_user(
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)
    ],
    token_verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
) -> AuthenticatedUser:
    """Verify the bearer identity token and return its subject."""
    if credentials is None or not credentials.credentials:
        raise _to_http_exception(AuthError())
    try:
        return await token_verifier.verify(credentials.credentials)
    except ZapShiftError as e:
        raise _to_http_exception(e)


async def get_user_record(
    firestore_service: FirestoreService, email: Optional[str]
) -> Optional[User]:
    """Look up the users document for an email address."""
    if not email:
        return None
    return await firestore_service.find_one(
        collection_name=USERS, filters=[("email", "==", email)], model_class=User
    )


def require_role(*allowed_roles: UserRole):
    """Factory for a dependency that requires the caller's stored role to be one of allowed_roles."""

    async def role_checker(
        current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
        firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
    ) -> User:
        try:
            user = await get_user_record(firestore_service, current_user.email)
        except ZapShiftError as e:
            raise _to_http_exception(e)
        if user is None or user.role not in [role.value for role in allowed_roles]:
            logger.warning(
                f"Forbidden access for {current_user.email}: requires {[r.value for r in allowed_roles]}"
            )
            raise _to_http_exception(AuthError("forbidden access", forbidden=True))
        return user

    return role_checker


verify_admin = require_role(UserRole.ADMIN)
verify_rider = require_role(UserRole.RIDER)


async def ensure_email_access(
    current_user: AuthenticatedUser,
    email: Optional[str],
    firestore_service: FirestoreService,
) -> None:
    """
    Allow a caller to read records filtered by email.

    The token's email must match the requested email. Omitting the email
    (reading every record) is reserved for admins.
    """
    if email:
        if email != current_user.email:
            raise _to_http_exception(AuthError("forbidden access", forbidden=True))
        return

    try:
        user = await get_user_record(firestore_service, current_user.email)
    except ZapShiftError as e:
        raise _to_http_exception(e)
    if user is None or user.role != UserRole.ADMIN.value:
        raise _to_http_exception(AuthError("forbidden access", forbidden=True))


async def ensure_owner_or_admin(
    current_user: AuthenticatedUser,
    owner_email: Optional[str],
    firestore_service: FirestoreService,
) -> None:
    """Allow a caller to act on a record they own, or on any record as an admin."""
    if owner_email and owner_email == current_user.email:
        return

    try:
        user = await get_user_record(firestore_service, current_user.email)
    except ZapShiftError as e:
        raise _to_http_exception(e)
    if user is None or user.role != UserRole.ADMIN.value:
        logger.warning(f"Forbidden access for {current_user.email} to a record of {owner_email}")
        raise _to_http_exception(AuthError("forbidden access", forbidden=True))


@auth_router.get("/me", response_model=MeResponse)
async def get_me(
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    firestore_service: Annotated[FirestoreService, Depends(get_firestore_service)],
) -> MeResponse:
    """Get the verified identity and stored role of the caller."""
    try:
        user = await get_user_record(firestore_service, current_user.email)
    except ZapShiftError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to look up user {current_user.email}: {str(e)}\n{format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve user",
        )

    return MeResponse(
        uid=current_user.uid,
        email=current_user.email,
        role=user.role if user else UserRole.USER,
    )
