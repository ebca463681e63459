"""
Pytest configuration and shared fixtures.
"""

import copy
from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.results import InsertOneResult, UpdateResult

from api.database import BookCatalogService


def _matches(document: Dict[str, Any], filter_query: Dict[str, Any]) -> bool:
    for key, condition in filter_query.items():
        if isinstance(condition, dict) and "$exists" in condition:
            if (key in document) != condition["$exists"]:
                return False
        elif document.get(key) != condition:
            return False
    return True


class _ListCursor:
    def __init__(self, documents: List[Dict[str, Any]]):
        self.documents = documents

    async def to_list(self, length=None):
        return self.documents


class InMemoryBooksCollection:
    """
    Minimal stand-in for a Motor collection.
    Supports the filters, updates and pipeline used by the catalog service.
    """

    def __init__(self):
        self.documents: List[Dict[str, Any]] = []
        self.database = MagicMock()
        self.database.command = AsyncMock(return_value={"ok": 1})

    async def insert_one(self, document):
        self.documents.append(copy.deepcopy(document))
        return InsertOneResult(document["_id"], acknowledged=True)

    async def find_one(self, filter_query):
        for document in self.documents:
            if _matches(document, filter_query):
                return copy.deepcopy(document)
        return None

    async def update_one(self, filter_query, update):
        for document in self.documents:
            if _matches(document, filter_query):
                self._apply(document, update)
                return self._result(1)
        return self._result(0)

    async def update_many(self, filter_query, update):
        matched = [d for d in self.documents if _matches(d, filter_query)]
        for document in matched:
            self._apply(document, update)
        return self._result(len(matched))

    async def count_documents(self, filter_query):
        return sum(1 for d in self.documents if _matches(d, filter_query))

    def aggregate(self, pipeline):
        results = copy.deepcopy(self.documents)
        for stage in pipeline:
            if "$match" in stage:
                results = [d for d in results if _matches(d, stage["$match"])]
            elif "$project" in stage:
                projected = []
                for document in results:
                    row = {}
                    for field, spec in stage["$project"].items():
                        if spec is True:
                            row[field] = document[field]
                        else:
                            row[field] = len(document[spec["$size"].lstrip("$")])
                    projected.append(row)
                results = projected
        return _ListCursor(results)

    @staticmethod
    def _apply(document, update):
        for field, value in update.get("$set", {}).items():
            document[field] = value
        for field, value in update.get("$push", {}).items():
            document.setdefault(field, []).append(value)

    @staticmethod
    def _result(modified: int) -> UpdateResult:
        raw = {"n": modified, "nModified": modified, "ok": 1}
        return UpdateResult(raw, acknowledged=True)


@pytest.fixture
def books_collection():
    """Create an in-memory books collection."""
    return InMemoryBooksCollection()


@pytest.fixture
def catalog_service(books_collection):
    """Create a catalog service over the in-memory collection."""
    return BookCatalogService(books_collection)


@pytest.fixture
def mock_collection():
    """Create a mock Motor collection for failure scenarios."""
    collection = MagicMock()
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.update_one = AsyncMock()
    collection.update_many = AsyncMock()
    collection.count_documents = AsyncMock(return_value=0)
    collection.database.command = AsyncMock(return_value={"ok": 1})
    return collection


@pytest.fixture
def sample_book_document():
    """Create a stored book document for testing."""
    return {
        "_id": ObjectId("5f43a1b2c3d4e5f6a7b8c9d0"),
        "title": "El Aleph",
        "comments": ["First comment", "Second comment"],
    }
