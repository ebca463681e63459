"""
API models and schemas for the FastAPI application.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from catalog.models import BookRecord


class BookCreatedResponse(BaseModel):
    """Response for a newly created book."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Unique book identifier")
    title: str = Field(..., description="Book title")

    @classmethod
    def from_record(cls, record: BookRecord) -> "BookCreatedResponse":
        return cls(id=str(record.id), title=record.title)


class BookSummaryResponse(BaseModel):
    """Book entry in the list response."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Unique book identifier")
    title: str = Field(..., description="Book title")
    comment_count: int = Field(..., ge=0, alias="commentcount", description="Number of comments")


class BookDetailResponse(BaseModel):
    """Single book with all of its comments."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Unique book identifier")
    title: str = Field(..., description="Book title")
    comments: List[str] = Field(default_factory=list, description="Comments in insertion order")

    @classmethod
    def from_record(cls, record: BookRecord) -> "BookDetailResponse":
        return cls(id=str(record.id), title=record.title, comments=record.comments)


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
    active_books: Optional[int] = Field(None, description="Number of active books")
    deleted_books: Optional[int] = Field(None, description="Number of soft-deleted books")
    total_books: Optional[int] = Field(None, description="Number of stored books")
