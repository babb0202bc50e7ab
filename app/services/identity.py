import logging
from abc import ABC, abstractmethod

from firebase_admin import auth

from app.models.users import AuthenticatedUser
from app.services.errors import AuthError, UpstreamError
from app.services.firebase import get_firebase_app

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class TokenVerifier(ABC):
    """Verifies identity tokens issued by the external identity provider."""

    @abstractmethod
    async def verify(self, token: str) -> AuthenticatedUser:
        """
        Decode and verify an identity token.

        Raises:
            AuthError: The token is malformed, expired, revoked or forged
            UpstreamError: The provider's signing keys could not be fetched
        """
        pass


class FirebaseTokenVerifier(TokenVerifier):
    async def verify(self, token: str) -> AuthenticatedUser:
        try:
            decoded = auth.verify_id_token(token, app=get_firebase_app())
        except auth.CertificateFetchError as e:
            logger.error(f"Failed to fetch Firebase signing certificates: {str(e)}")
            raise UpstreamError("Identity provider unavailable")
        except (auth.InvalidIdTokenError, ValueError) as e:
            logger.warning(f"Rejected identity token: {str(e)}")
            raise AuthError()

        return AuthenticatedUser(
            uid=decoded["uid"],
            email=decoded.get("email"),
            name=decoded.get("name"),
        )


# Global verifier instance
_token_verifier = None


def get_token_verifier() -> TokenVerifier:
    """Get a singleton Firebase token verifier."""
    global _token_verifier
    if _token_verifier is None:
        _token_verifier = FirebaseTokenVerifier()
    return _token_verifier
