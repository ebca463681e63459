"""
Pydantic models for book records stored in MongoDB.
Models the soft-delete convention as an explicit lifecycle state.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

# Field whose presence marks a stored document as deleted
DELETED_ON_FIELD = "deleted_on"

# Selects documents that have not been soft-deleted
ACTIVE_FILTER: Dict[str, Any] = {DELETED_ON_FIELD: {"$exists": False}}

# Selects tombstoned documents
DELETED_FILTER: Dict[str, Any] = {DELETED_ON_FIELD: {"$exists": True}}


class ActiveState(BaseModel):
    """Book is visible to reads, lists and mutations."""
    state: Literal["active"] = "active"


class DeletedState(BaseModel):
    """Book has been tombstoned; the transition is one-way."""
    state: Literal["deleted"] = "deleted"
    at: Optional[datetime] = Field(..., description="When the book was deleted, if recorded")


BookState = Annotated[Union[ActiveState, DeletedState], Field(discriminator="state")]


class BookRecord(BaseModel):
    """
    A book as stored in the collection.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: ObjectId = Field(..., description="Unique book identifier")
    title: str = Field(..., min_length=1, description="Book title")
    comments: List[str] = Field(default_factory=list, description="Comments in insertion order")
    lifecycle: BookState = Field(default_factory=ActiveState, description="Soft-delete state")

    @classmethod
    def new(cls, title: str) -> "BookRecord":
        """Create a fresh active book with a generated id and no comments."""
        return cls(id=ObjectId(), title=title)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "BookRecord":
        """
        Build a record from a raw MongoDB document.

        Args:
            document: Document as returned by the driver

        Returns:
            BookRecord with its lifecycle derived from ``deleted_on``
        """
        # Presence of the field, not its value, marks a tombstone, as in ACTIVE_FILTER
        if DELETED_ON_FIELD in document:
            lifecycle = DeletedState(at=document[DELETED_ON_FIELD])
        else:
            lifecycle = ActiveState()

        return cls(
            id=document["_id"],
            title=document["title"],
            comments=list(document.get("comments", [])),
            lifecycle=lifecycle,
        )

    def to_document(self) -> Dict[str, Any]:
        """Convert to the stored document shape."""
        document = {
            "_id": self.id,
            "title": self.title,
            "comments": list(self.comments),
        }
        if isinstance(self.lifecycle, DeletedState):
            document[DELETED_ON_FIELD] = self.lifecycle.at
        return document


def active_filter(book_id: Optional[ObjectId] = None) -> Dict[str, Any]:
    """
    Build a filter that matches active books, optionally a single one.

    Args:
        book_id: Restrict the filter to this id

    Returns:
        MongoDB filter document
    """
    filter_query = dict(ACTIVE_FILTER)
    if book_id is not None:
        filter_query["_id"] = book_id
    return filter_query


def tombstone_update(at: Optional[datetime] = None) -> Dict[str, Any]:
    """Build the update that moves books from active to deleted."""
    if at is None:
        at = datetime.now(timezone.utc)
    return {"$set": {DELETED_ON_FIELD: at}}
