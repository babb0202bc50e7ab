import logging
from abc import ABC, abstractmethod
from traceback import format_exc
from typing import Dict

import stripe

from app.models.payments import CheckoutSession
from app.services.errors import UpstreamError
from config import CURRENCY, SITE_DOMAIN, STRIPE_SECRET_KEY

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Configure Stripe
stripe.api_key = STRIPE_SECRET_KEY

# Metadata keys carried on every checkout session
METADATA_KEYS = ("parcelId", "parcelName")


class CheckoutProvider(ABC):
    """Hosted checkout capability used by the settlement workflow."""

    @abstractmethod
    async def create_session(
        self,
        amount_minor: int,
        product_name: str,
        customer_email: str,
        metadata: Dict[str, str],
    ) -> CheckoutSession:
        pass

    @abstractmethod
    async def retrieve_session(self, session_id: str) -> CheckoutSession:
        pass


def to_minor_units(cost: float) -> int:
    """
    Convert a cost in major currency units to integer minor units.

    Args:
        cost: Amount such as 15.5 dollars

    Returns:
        Amount in cents, e.g. 1550
    """
    return int(round(cost * 100))


def _to_checkout_session(session) -> CheckoutSession:
    metadata = getattr(session, "metadata", None)
    return CheckoutSession(
        id=session.id,
        url=getattr(session, "url", None),
        payment_status=getattr(session, "payment_status", None),
        payment_intent=getattr(session, "payment_intent", None),
        metadata={
            key: getattr(metadata, key)
            for key in METADATA_KEYS
            if metadata is not None and getattr(metadata, key, None) is not None
        },
        amount_total=getattr(session, "amount_total", None),
        currency=getattr(session, "currency", None),
        customer_email=getattr(session, "customer_email", None),
    )


class StripeCheckoutProvider(CheckoutProvider):
    """Stripe Checkout in one-time payment mode, redirecting back to the client site."""

    def __init__(self, site_domain: str = SITE_DOMAIN, currency: str = CURRENCY):
        self.site_domain = site_domain
        self.currency = currency

    async def create_session(
        self,
        amount_minor: int,
        product_name: str,
        customer_email: str,
        metadata: Dict[str, str],
    ) -> CheckoutSession:
        try:
            session = stripe.checkout.Session.create(
                line_items=[
                    {
                        "price_data": {
                            "currency": self.currency,
                            "unit_amount": amount_minor,
                            "product_data": {"name": product_name},
                        },
                        "quantity": 1,
                    }
                ],
                mode="payment",
                customer_email=customer_email,
                metadata=metadata,
                success_url=f"{self.site_domain}/dashboard/payment-success"
                "?session_id={CHECKOUT_SESSION_ID}",
                cancel_url=f"{self.site_domain}/dashboard/payment-cancelled",
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe error creating checkout session: {str(e)}\n{format_exc()}")
            raise UpstreamError(f"Payment processing error: {str(e)}")

        logger.info(f"Created checkout session {session.id} for {customer_email}")
        return _to_checkout_session(session)

    async def retrieve_session(self, session_id: str) -> CheckoutSession:
        try:
            session = stripe.checkout.Session.retrieve(session_id)
        except stripe.StripeError as e:
            logger.error(
                f"Stripe error retrieving checkout session {session_id}: {str(e)}\n{format_exc()}"
            )
            raise UpstreamError(f"Unable to retrieve checkout session: {str(e)}")

        return _to_checkout_session(session)


# Global provider instance
_checkout_provider = None


def get_checkout_provider() -> CheckoutProvider:
    """Get a singleton Stripe checkout provider."""
    global _checkout_provider
    if _checkout_provider is None:
        _checkout_provider = StripeCheckoutProvider()
    return _checkout_provider
