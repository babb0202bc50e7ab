"""
Shared Data Models

This module contains the common Firestore base model and the write result
descriptors returned by the document store and passed through to clients.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FirestoreBaseModel(BaseModel):
    """Base model for all Firestore documents with common configuration."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Validate assignments
        validate_assignment=True,
        # Use enum values instead of names
        use_enum_values=True,
    )

    id: Optional[str] = Field(None, alias="_id", description="Document ID")

    def to_document(self) -> dict:
        """Serialize to the camelCase shape stored in Firestore, without the ID."""
        return self.model_dump(by_alias=True, exclude={"id"})


# Write result descriptors
class InsertResult(BaseModel):
    """Outcome of a single document insertion."""

    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = True
    inserted_id: Optional[str] = Field(None, alias="insertedId")


class UpdateResult(BaseModel):
    """Outcome of a single document update."""

    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = True
    matched_count: int = Field(0, alias="matchedCount")
    modified_count: int = Field(0, alias="modifiedCount")


class DeleteResult(BaseModel):
    """Outcome of a single document deletion."""

    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = True
    deleted_count: int = Field(0, alias="deletedCount")
