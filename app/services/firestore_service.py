"""
Firestore Service Layer

This module provides a service layer for interacting with Firestore.
It uses the Firebase Admin SDK and returns write result descriptors
(inserted ID, matched/modified counts, deleted count) that the routers pass
through to clients, so every collection is accessed the same way.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Type, TypeVar

from firebase_admin import firestore
from google.api_core.exceptions import (
    AlreadyExists,
    GoogleAPICallError,
    NotFound,
    RetryError,
)
from google.cloud.firestore import Client, DocumentReference, Query

from app.models.shared import (
    DeleteResult,
    FirestoreBaseModel,
    InsertResult,
    UpdateResult,
)
from app.services.errors import UpstreamError
from app.services.firebase import get_firebase_app
from config import FIRESTORE_DATABASE

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Type variable for generic model operations
T = TypeVar("T", bound=FirestoreBaseModel)

# Collections used by the application
PARCELS = "parcels"
PAYMENTS = "payments"
USERS = "users"
RIDERS = "riders"

# Firestore call failures surfaced to callers as UpstreamError
STORE_ERRORS = (GoogleAPICallError, RetryError)


class FirestoreService:
    """
    Service class for Firestore operations with Pydantic integration.

    Documents are returned as dictionaries carrying their ID under ``_id``,
    or as instances of ``model_class`` when one is given.
    Failed Firestore calls raise UpstreamError.
    """

    def __init__(self, database_name: str = "(default)"):
        """
        Initialize the Firestore service.

        Args:
            database_name: Name of the Firestore database to connect to
        """
        self.database_name = database_name
        self._client: Optional[Client] = None

    @property
    def client(self) -> Client:
        """Get or create the Firestore client."""
        if self._client is None:
            self._client = firestore.client(
                get_firebase_app(), database_id=self.database_name
            )
        return self._client

    def get_collection_ref(self, collection_name: str):
        """Get a reference to a Firestore collection."""
        return self.client.collection(collection_name)

    def get_document_ref(
        self, collection_name: str, document_id: str
    ) -> DocumentReference:
        """Get a reference to a specific document."""
        return self.client.collection(collection_name).document(document_id)

    @staticmethod
    def _to_result(doc, model_class: Optional[Type[T]] = None):
        data = doc.to_dict()
        data["_id"] = doc.id
        if model_class:
            return model_class(**data)
        return data

    async def create_document(
        self,
        collection_name: str,
        document_data: Dict[str, Any],
        document_id: Optional[str] = None,
        exclusive: bool = False,
    ) -> InsertResult:
        """
        Create a new document in the specified collection.

        Args:
            collection_name: Name of the collection
            document_data: Data to store in the document
            document_id: Optional document ID, will generate UUID if not provided
            exclusive: Fail with ``google.api_core.exceptions.AlreadyExists``
                instead of overwriting when the document ID is taken

        Returns:
            InsertResult carrying the ID of the created document
        """
        try:
            if document_id is None:
                document_id = str(uuid.uuid4())

            doc_ref = self.get_document_ref(collection_name, document_id)
            if exclusive:
                doc_ref.create(document_data)
            else:
                doc_ref.set(document_data)

            logger.info(f"Created document {document_id} in {collection_name}")
            return InsertResult(inserted_id=document_id)

        except AlreadyExists:
            raise
        except STORE_ERRORS as e:
            logger.error(f"Failed to create document in {collection_name}: {str(e)}")
            raise UpstreamError(f"Document store error: {str(e)}")

    async def get_document(
        self,
        collection_name: str,
        document_id: str,
        model_class: Optional[Type[T]] = None,
    ) -> Optional[T]:
        """
        Get a document by ID.

        Returns:
            Document data as dictionary or model instance, None if not found
        """
        try:
            doc = self.get_document_ref(collection_name, document_id).get()
            if not doc.exists:
                return None
            return self._to_result(doc, model_class)

        except STORE_ERRORS as e:
            logger.error(
                f"Failed to get document {document_id} from {collection_name}: {str(e)}"
            )
            raise UpstreamError(f"Document store error: {str(e)}")

    async def update_document(
        self, collection_name: str, document_id: str, update_data: Dict[str, Any]
    ) -> UpdateResult:
        """
        Set the given fields on a document.

        A missing document is not an error: the result reports zero matches.
        """
        try:
            doc_ref = self.get_document_ref(collection_name, document_id)
            doc_ref.update(update_data)

            logger.info(f"Updated document {document_id} in {collection_name}")
            return UpdateResult(matched_count=1, modified_count=1)

        except NotFound:
            logger.warning(
                f"No document {document_id} in {collection_name} to update"
            )
            return UpdateResult(matched_count=0, modified_count=0)
        except STORE_ERRORS as e:
            logger.error(
                f"Failed to update document {document_id} in {collection_name}: {str(e)}"
            )
            raise UpstreamError(f"Document store error: {str(e)}")

    async def delete_document(
        self, collection_name: str, document_id: str
    ) -> DeleteResult:
        """Delete a document, reporting whether it existed."""
        try:
            doc_ref = self.get_document_ref(collection_name, document_id)
            if not doc_ref.get().exists:
                return DeleteResult(deleted_count=0)
            doc_ref.delete()

            logger.info(f"Deleted document {document_id} from {collection_name}")
            return DeleteResult(deleted_count=1)

        except STORE_ERRORS as e:
            logger.error(
                f"Failed to delete document {document_id} from {collection_name}: {str(e)}"
            )
            raise UpstreamError(f"Document store error: {str(e)}")

    async def query_collection(
        self,
        collection_name: str,
        filters: Optional[List[tuple]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        model_class: Optional[Type[T]] = None,
    ) -> List[T]:
        """
        Query a collection with filters, ordering, and pagination.

        Args:
            collection_name: Name of the collection to query
            filters: List of filter tuples (field, operator, value)
            order_by: Field to order by
            descending: Order from highest to lowest
            limit: Maximum number of results
            offset: Number of results to skip
            model_class: Optional Pydantic model class

        Returns:
            List of documents as dictionaries or model instances
        """
        try:
            query = self.get_collection_ref(collection_name)

            # Apply filters
            if filters:
                for field, operator, value in filters:
                    query = query.where(field, operator, value)

            # Apply ordering
            if order_by:
                direction = Query.DESCENDING if descending else Query.ASCENDING
                query = query.order_by(order_by, direction=direction)

            # Apply pagination
            if offset:
                query = query.offset(offset)
            if limit:
                query = query.limit(limit)

            return [self._to_result(doc, model_class) for doc in query.stream()]

        except STORE_ERRORS as e:
            logger.error(f"Failed to query collection {collection_name}: {str(e)}")
            raise UpstreamError(f"Document store error: {str(e)}")

    async def find_one(
        self,
        collection_name: str,
        filters: List[tuple],
        model_class: Optional[Type[T]] = None,
    ) -> Optional[T]:
        """Get the first document matching all filters, or None."""
        results = await self.query_collection(
            collection_name=collection_name,
            filters=filters,
            limit=1,
            model_class=model_class,
        )
        return results[0] if results else None


# Global service instance
_firestore_service = None


def get_firestore_service() -> FirestoreService:
    """
    Get a singleton Firestore service instance for the configured database.

    Returns:
        FirestoreService instance
    """
    global _firestore_service
    if _firestore_service is None:
        _firestore_service = FirestoreService(FIRESTORE_DATABASE)
    return _firestore_service
