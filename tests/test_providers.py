"""
Stripe provider and Firestore service tests with the SDKs mocked out.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import stripe
from google.api_core.exceptions import AlreadyExists, NotFound, ServiceUnavailable

from app.services.errors import UpstreamError
from app.services.firestore_service import FirestoreService
from app.services.payments.stripe import StripeCheckoutProvider, to_minor_units


class TestMinorUnits:

    @pytest.mark.parametrize(
        "cost, expected", [(15, 1500), (15.5, 1550), (0.29, 29), (19.99, 1999)]
    )
    def test_conversion(self, cost, expected):
        assert to_minor_units(cost) == expected


class TestStripeCheckoutProvider:

    def test_create_session_parameters(self, monkeypatch):
        create = MagicMock(
            return_value=SimpleNamespace(id="cs_1", url="https://checkout.stripe.com/c/pay/cs_1")
        )
        monkeypatch.setattr(stripe.checkout.Session, "create", create)
        provider = StripeCheckoutProvider(site_domain="https://zapshift.app", currency="usd")

        session = asyncio.run(
            provider.create_session(
                amount_minor=2000,
                product_name="Box",
                customer_email="a@b.com",
                metadata={"parcelId": "P1", "parcelName": "Box"},
            )
        )

        assert session.url == "https://checkout.stripe.com/c/pay/cs_1"
        kwargs = create.call_args.kwargs
        assert kwargs["mode"] == "payment"
        assert kwargs["customer_email"] == "a@b.com"
        assert kwargs["metadata"] == {"parcelId": "P1", "parcelName": "Box"}
        assert kwargs["line_items"][0]["price_data"]["unit_amount"] == 2000
        assert kwargs["line_items"][0]["price_data"]["currency"] == "usd"
        assert kwargs["success_url"] == (
            "https://zapshift.app/dashboard/payment-success?session_id={CHECKOUT_SESSION_ID}"
        )
        assert kwargs["cancel_url"] == "https://zapshift.app/dashboard/payment-cancelled"

    def test_retrieve_session_reads_metadata(self, monkeypatch):
        stripe_session = SimpleNamespace(
            id="cs_1",
            url=None,
            payment_status="paid",
            payment_intent="pi_1",
            metadata=SimpleNamespace(parcelId="P1", parcelName="Box"),
            amount_total=1500,
            currency="usd",
            customer_email="a@b.com",
        )
        monkeypatch.setattr(
            stripe.checkout.Session, "retrieve", MagicMock(return_value=stripe_session)
        )

        session = asyncio.run(StripeCheckoutProvider().retrieve_session("cs_1"))

        assert session.payment_intent == "pi_1"
        assert session.metadata == {"parcelId": "P1", "parcelName": "Box"}
        assert session.amount_total == 1500

    def test_stripe_errors_become_upstream_errors(self, monkeypatch):
        monkeypatch.setattr(
            stripe.checkout.Session,
            "retrieve",
            MagicMock(side_effect=stripe.InvalidRequestError("No such checkout.session", "id")),
        )

        with pytest.raises(UpstreamError):
            asyncio.run(StripeCheckoutProvider().retrieve_session("cs_missing"))


class TestFirestoreService:

    @pytest.fixture
    def service(self):
        service = FirestoreService()
        service._client = MagicMock()
        return service

    def test_exclusive_create_uses_create(self, service):
        doc_ref = service._client.collection.return_value.document.return_value

        result = asyncio.run(
            service.create_document("payments", {"amount": 1}, document_id="pi_1", exclusive=True)
        )

        assert result.inserted_id == "pi_1"
        doc_ref.create.assert_called_once_with({"amount": 1})
        doc_ref.set.assert_not_called()

    def test_update_of_missing_document_matches_nothing(self, service):
        doc_ref = service._client.collection.return_value.document.return_value
        doc_ref.update.side_effect = NotFound("no document")

        result = asyncio.run(service.update_document("parcels", "gone", {"trackingId": "x"}))

        assert result.matched_count == 0
        assert result.modified_count == 0

    def test_get_document_adds_id(self, service):
        doc = service._client.collection.return_value.document.return_value.get.return_value
        doc.exists = True
        doc.id = "P1"
        doc.to_dict.return_value = {"parcelName": "Box"}

        assert asyncio.run(service.get_document("parcels", "P1")) == {
            "parcelName": "Box",
            "_id": "P1",
        }

    def test_unavailable_store_raises_upstream_error(self, service):
        doc_ref = service._client.collection.return_value.document.return_value
        doc_ref.get.side_effect = ServiceUnavailable("firestore unavailable")
        doc_ref.update.side_effect = ServiceUnavailable("firestore unavailable")

        with pytest.raises(UpstreamError):
            asyncio.run(service.get_document("parcels", "P1"))
        with pytest.raises(UpstreamError):
            asyncio.run(service.update_document("parcels", "P1", {"trackingId": "x"}))

    def test_exclusive_create_conflict_is_not_translated(self, service):
        doc_ref = service._client.collection.return_value.document.return_value
        doc_ref.create.side_effect = AlreadyExists("document exists")

        with pytest.raises(AlreadyExists):
            asyncio.run(
                service.create_document("payments", {"amount": 1}, document_id="pi_1", exclusive=True)
            )
