"""
In-memory doubles for the Firestore service, Stripe checkout and Firebase
token verification.
"""

import asyncio
import copy
import itertools
import uuid
from typing import Any, Dict, List, Optional

from google.api_core.exceptions import AlreadyExists

from app.models.payments import CheckoutSession
from app.models.shared import DeleteResult, InsertResult, UpdateResult
from app.models.users import AuthenticatedUser
from app.services.errors import AuthError, UpstreamError
from app.services.identity import TokenVerifier
from app.services.payments.stripe import CheckoutProvider


class InMemoryFirestoreService:
    """Dictionary backed stand-in for FirestoreService supporting equality filters."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.update_calls: List[tuple] = []

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self.collections.setdefault(name, {})

    @staticmethod
    def _to_result(document_id, data, model_class=None):
        result = copy.deepcopy(data)
        result["_id"] = document_id
        return model_class(**result) if model_class else result

    def seed(self, collection_name: str, data: Dict[str, Any], document_id: Optional[str] = None) -> str:
        document_id = document_id or str(uuid.uuid4())
        self._collection(collection_name)[document_id] = copy.deepcopy(data)
        return document_id

    def documents(self, collection_name: str) -> Dict[str, Dict[str, Any]]:
        return self._collection(collection_name)

    async def create_document(self, collection_name, document_data, document_id=None, exclusive=False):
        await asyncio.sleep(0)
        document_id = document_id or str(uuid.uuid4())
        collection = self._collection(collection_name)
        if exclusive and document_id in collection:
            raise AlreadyExists(f"Document already exists: {collection_name}/{document_id}")
        collection[document_id] = copy.deepcopy(document_data)
        return InsertResult(inserted_id=document_id)

    async def get_document(self, collection_name, document_id, model_class=None):
        await asyncio.sleep(0)
        data = self._collection(collection_name).get(document_id)
        if data is None:
            return None
        return self._to_result(document_id, data, model_class)

    async def update_document(self, collection_name, document_id, update_data):
        await asyncio.sleep(0)
        self.update_calls.append((collection_name, document_id, dict(update_data)))
        data = self._collection(collection_name).get(document_id)
        if data is None:
            return UpdateResult(matched_count=0, modified_count=0)
        data.update(copy.deepcopy(update_data))
        return UpdateResult(matched_count=1, modified_count=1)

    async def delete_document(self, collection_name, document_id):
        await asyncio.sleep(0)
        removed = self._collection(collection_name).pop(document_id, None)
        return DeleteResult(deleted_count=0 if removed is None else 1)

    async def query_collection(
        self,
        collection_name,
        filters=None,
        order_by=None,
        descending=False,
        limit=None,
        offset=None,
        model_class=None,
    ):
        await asyncio.sleep(0)
        rows = list(self._collection(collection_name).items())
        for field, operator, value in filters or []:
            assert operator == "==", f"unsupported operator {operator}"
            rows = [(doc_id, data) for doc_id, data in rows if data.get(field) == value]
        if order_by:
            rows.sort(key=lambda row: row[1].get(order_by), reverse=descending)
        if offset:
            rows = rows[offset:]
        if limit:
            rows = rows[:limit]
        return [self._to_result(doc_id, data, model_class) for doc_id, data in rows]

    async def find_one(self, collection_name, filters, model_class=None):
        results = await self.query_collection(
            collection_name=collection_name, filters=filters, limit=1, model_class=model_class
        )
        return results[0] if results else None


class FakeCheckoutProvider(CheckoutProvider):
    """Checkout sessions held in memory, keyed by session ID."""

    def __init__(self):
        self.sessions: Dict[str, CheckoutSession] = {}
        self.created: List[Dict[str, Any]] = []
        self.retrieve_calls = 0
        self.fail_with: Optional[Exception] = None
        self._ids = itertools.count(1)

    def add_session(self, **fields) -> CheckoutSession:
        session = CheckoutSession(**fields)
        self.sessions[session.id] = session
        return session

    async def create_session(self, amount_minor, product_name, customer_email, metadata):
        await asyncio.sleep(0)
        if self.fail_with:
            raise self.fail_with
        session_id = f"cs_test_{next(self._ids)}"
        self.created.append(
            {
                "amount_minor": amount_minor,
                "product_name": product_name,
                "customer_email": customer_email,
                "metadata": metadata,
            }
        )
        return self.add_session(
            id=session_id,
            url=f"https://checkout.stripe.com/c/pay/{session_id}",
            payment_status="unpaid",
            metadata=metadata,
            amount_total=amount_minor,
            currency="usd",
            customer_email=customer_email,
        )

    async def retrieve_session(self, session_id):
        self.retrieve_calls += 1
        await asyncio.sleep(0)
        if self.fail_with:
            raise self.fail_with
        if session_id not in self.sessions:
            raise UpstreamError(f"Unable to retrieve checkout session: No such checkout.session: {session_id}")
        return self.sessions[session_id]


class FakeTokenVerifier(TokenVerifier):
    def __init__(self, tokens: Dict[str, AuthenticatedUser]):
        self.tokens = tokens

    async def verify(self, token):
        if token not in self.tokens:
            raise AuthError()
        return self.tokens[token]
