"""
Database service layer for the FastAPI application.
Implements the book catalog operations on top of a Motor collection.
"""

from typing import Any, Dict, List, Optional

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from api.models import BookCreatedResponse, BookDetailResponse, BookSummaryResponse
from catalog.errors import InvalidInput, NotFound, StorageError
from catalog.models import ACTIVE_FILTER, DELETED_FILTER, BookRecord, active_filter, tombstone_update

logger = structlog.get_logger(__name__)

# Projection used by the book list
LIST_PIPELINE: List[Dict[str, Any]] = [
    {"$match": ACTIVE_FILTER},
    {"$project": {
        "_id": True,
        "title": True,
        "commentcount": {"$size": "$comments"},
    }},
]

# Stands in for a body field the client did not send
MISSING = object()


def parse_book_id(book_id: str) -> ObjectId:
    """
    Parse a path identifier into an ObjectId.

    Raises:
        InvalidInput: If the identifier is not a valid ObjectId
    """
    if not isinstance(book_id, str) or not ObjectId.is_valid(book_id):
        raise InvalidInput("_id error")
    return ObjectId(book_id)


def require_text(value: Any, field_name: str) -> str:
    """
    Validate a required text field from a request body.

    Args:
        value: Raw value, ``MISSING`` when the field was not sent
        field_name: Name used in the error message

    Returns:
        The value, unchanged

    Raises:
        InvalidInput: "no <field> sent" if missing or empty,
            "bad <field> sent" if not a string
    """
    if value is MISSING or value == "":
        raise InvalidInput(f"no {field_name} sent")
    if not isinstance(value, str):
        raise InvalidInput(f"bad {field_name} sent")
    return value


class BookCatalogService:
    """Book catalog operations over a single collection."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def create_book(self, title: Any) -> BookCreatedResponse:
        """
        Create a book with no comments.

        Args:
            title: Title as sent by the client

        Returns:
            BookCreatedResponse with the generated id
        """
        title = require_text(title, "title")
        record = BookRecord.new(title)

        try:
            await self.collection.insert_one(record.to_document())
        except PyMongoError as e:
            logger.error("Failed to insert book", title=title, error=str(e))
            raise StorageError("error saving data") from e

        logger.info("Book created", book_id=str(record.id))
        return BookCreatedResponse.from_record(record)

    async def list_books(self) -> List[BookSummaryResponse]:
        """
        List active books with their comment counts.

        Returns:
            One summary per active book
        """
        try:
            cursor = self.collection.aggregate(LIST_PIPELINE)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error("Failed to list books", error=str(e))
            raise StorageError("error fetching data") from e

        return [
            BookSummaryResponse(id=str(doc["_id"]), title=doc["title"], comment_count=doc["commentcount"])
            for doc in docs
        ]

    async def delete_all_books(self) -> str:
        """
        Soft-delete every active book.

        Raises:
            NotFound: If there was no active book to delete
        """
        try:
            result = await self.collection.update_many(ACTIVE_FILTER, tombstone_update())
        except PyMongoError as e:
            logger.error("Failed to delete books", error=str(e))
            raise StorageError("error deleting data") from e

        if result.modified_count == 0:
            raise NotFound("no book deleted")

        logger.info("Books deleted", count=result.modified_count)
        return "complete delete successful"

    async def get_book(self, book_id: str) -> BookDetailResponse:
        """
        Get a single active book with its comments.

        Args:
            book_id: Book identifier from the request path

        Raises:
            InvalidInput: If the identifier is malformed
            NotFound: If no active book has that id
        """
        object_id = parse_book_id(book_id)
        document = await self._find_active(object_id)
        if document is None:
            raise NotFound("no book with that _id")
        return BookDetailResponse.from_record(BookRecord.from_document(document))

    async def delete_book(self, book_id: str) -> str:
        """
        Soft-delete a single active book.

        Deleting an already deleted book matches nothing and raises NotFound.
        """
        object_id = parse_book_id(book_id)

        try:
            result = await self.collection.update_one(active_filter(object_id), tombstone_update())
        except PyMongoError as e:
            logger.error("Failed to delete book", book_id=book_id, error=str(e))
            raise StorageError("error deleting data") from e

        if result.modified_count == 0:
            raise NotFound("no book deleted")

        logger.info("Book deleted", book_id=book_id)
        return "delete successful"

    async def add_comment(self, book_id: str, comment: Any) -> BookDetailResponse:
        """
        Append a comment to an active book and return the updated book.

        Args:
            book_id: Book identifier from the request path
            comment: Comment as sent by the client

        Raises:
            InvalidInput: If the identifier or the comment is invalid
            NotFound: If no active book has that id
        """
        object_id = parse_book_id(book_id)
        comment = require_text(comment, "comment")

        try:
            result = await self.collection.update_one(
                active_filter(object_id),
                {"$push": {"comments": comment}},
            )
        except PyMongoError as e:
            logger.error("Failed to save comment", book_id=book_id, error=str(e))
            raise StorageError("error saving comment") from e

        if result.modified_count == 0:
            raise NotFound("comment not saved")

        # The book may have been deleted between the update and this read
        document = await self._find_active(object_id)
        if document is None:
            logger.warning("Book deleted after comment was saved", book_id=book_id)
            raise NotFound("no book with that _id")
        return BookDetailResponse.from_record(BookRecord.from_document(document))

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.collection.database.command("ping")
            active_books = await self.collection.count_documents(ACTIVE_FILTER)
            deleted_books = await self.collection.count_documents(DELETED_FILTER)

            return {
                "status": "healthy",
                "active_books": active_books,
                "deleted_books": deleted_books,
                "total_books": active_books + deleted_books,
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }

    async def _find_active(self, object_id: ObjectId) -> Optional[Dict[str, Any]]:
        try:
            return await self.collection.find_one(active_filter(object_id))
        except PyMongoError as e:
            logger.error("Failed to fetch book", book_id=str(object_id), error=str(e))
            raise StorageError("error fetching data") from e
