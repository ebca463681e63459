"""
Unit tests for book record models.
Tests lifecycle derivation, document conversion and filters.
"""

from datetime import datetime, timezone

import pytest
from bson import ObjectId
from pydantic import ValidationError

from catalog.models import (
    ACTIVE_FILTER, ActiveState, BookRecord, DeletedState, active_filter, tombstone_update
)


class TestBookRecord:
    """Test cases for BookRecord model."""

    def test_new_book_is_active_without_comments(self):
        """Test that a new book gets an id, no comments and the active state."""
        record = BookRecord.new("El Aleph")

        assert isinstance(record.id, ObjectId)
        assert record.title == "El Aleph"
        assert record.comments == []
        assert isinstance(record.lifecycle, ActiveState)

    def test_new_books_get_distinct_ids(self):
        """Test that generated ids are unique."""
        ids = {BookRecord.new("Book").id for _ in range(50)}
        assert len(ids) == 50

    def test_empty_title_rejected(self):
        """Test validation of empty title."""
        with pytest.raises(ValidationError):
            BookRecord.new("")

    def test_to_document_omits_deleted_on_when_active(self):
        """Test the stored shape of an active book."""
        record = BookRecord.new("Ficciones")
        document = record.to_document()

        assert document == {"_id": record.id, "title": "Ficciones", "comments": []}
        assert "deleted_on" not in document

    def test_from_document_active(self, sample_book_document):
        """Test building an active record from a stored document."""
        record = BookRecord.from_document(sample_book_document)

        assert record.id == sample_book_document["_id"]
        assert record.comments == ["First comment", "Second comment"]
        assert isinstance(record.lifecycle, ActiveState)

    def test_from_document_deleted(self, sample_book_document):
        """Test that deleted_on becomes the deleted state."""
        deleted_at = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        sample_book_document["deleted_on"] = deleted_at

        record = BookRecord.from_document(sample_book_document)

        assert isinstance(record.lifecycle, DeletedState)
        assert record.lifecycle.at == deleted_at
        assert record.to_document()["deleted_on"] == deleted_at

    def test_from_document_null_deleted_on_is_deleted(self, sample_book_document):
        """Test that a present but null deleted_on still marks a tombstone."""
        sample_book_document["deleted_on"] = None

        record = BookRecord.from_document(sample_book_document)

        assert isinstance(record.lifecycle, DeletedState)
        assert record.lifecycle.at is None
        assert "deleted_on" in record.to_document()

    def test_from_document_without_comments(self):
        """Test that a missing comments field reads as empty."""
        record = BookRecord.from_document({"_id": ObjectId(), "title": "Labyrinths"})
        assert record.comments == []


class TestFilters:
    """Test cases for store filters and updates."""

    def test_active_filter_without_id(self):
        assert active_filter() == ACTIVE_FILTER

    def test_active_filter_with_id(self):
        book_id = ObjectId()
        assert active_filter(book_id) == {"deleted_on": {"$exists": False}, "_id": book_id}

    def test_active_filter_does_not_mutate_shared_filter(self):
        active_filter(ObjectId())
        assert ACTIVE_FILTER == {"deleted_on": {"$exists": False}}

    def test_tombstone_update_uses_given_time(self):
        at = datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert tombstone_update(at) == {"$set": {"deleted_on": at}}

    def test_tombstone_update_defaults_to_now(self):
        before = datetime.now(timezone.utc)
        update = tombstone_update()
        after = datetime.now(timezone.utc)

        assert before <= update["$set"]["deleted_on"] <= after
