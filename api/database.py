"""
Book repository gateway.

Handlers talk to storage only through ``BookRepository``; the MongoDB
implementation below is built on motor and injected at startup.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from api.models import BookPayload, BookRecord

logger = structlog.get_logger(__name__)

# Case-insensitive name equality for duplicate lookups and the unique index
NAME_COLLATION = {"locale": "en", "strength": 2}


def is_valid_book_id(book_id: str) -> bool:
    """Check that a book id is a well-formed ObjectId (24 hex characters)."""
    return isinstance(book_id, str) and ObjectId.is_valid(book_id)


class BookRepository(ABC):
    """Storage contract used by the book handlers."""

    @abstractmethod
    async def list_all(self) -> List[BookRecord]:
        """All books, newest ``created_at`` first."""

    @abstractmethod
    async def find_by_id(self, book_id: str) -> Optional[BookRecord]:
        """The book with this id, or None."""

    @abstractmethod
    async def find_by_name_excluding(
        self, name: str, exclude_id: Optional[str] = None
    ) -> Optional[BookRecord]:
        """A book whose name equals ``name`` ignoring case, other than ``exclude_id``."""

    @abstractmethod
    async def insert(self, payload: BookPayload, formatted_price: str) -> BookRecord:
        """Persist a new book and return the stored record."""

    @abstractmethod
    async def update_by_id(
        self, book_id: str, payload: BookPayload, formatted_price: str
    ) -> Optional[BookRecord]:
        """Replace the mutable fields of a book and return the updated record."""

    @abstractmethod
    async def delete_by_id(self, book_id: str) -> None:
        """Remove a book; removing a missing id is a no-op."""

    async def health_check(self) -> Dict:
        return {"status": "healthy"}


class MongoBookRepository(BookRepository):
    """MongoDB-backed book repository."""

    def __init__(self, database: AsyncIOMotorDatabase, collection_name: str = "books"):
        self.database = database
        self.books_collection = database[collection_name]

    @staticmethod
    def _to_record(book_doc: Dict) -> BookRecord:
        book_doc = dict(book_doc)
        book_doc["id"] = str(book_doc.pop("_id"))
        return BookRecord(**book_doc)

    @staticmethod
    def _document_fields(payload: BookPayload, formatted_price: str) -> Dict:
        return {
            "name": payload.name,
            "author": payload.author,
            "description": payload.description,
            "price": payload.price,
            "formatted_price": formatted_price,
        }

    async def ensure_indexes(self, unique_names: bool = False) -> None:
        """
        Create the indexes the API relies on.

        Args:
            unique_names: Also add a case-insensitive unique index on ``name``
        """
        try:
            await self.books_collection.create_index([("created_at", DESCENDING)])
            if unique_names:
                await self.books_collection.create_index(
                    "name", unique=True, collation=NAME_COLLATION
                )
            logger.info("Book indexes ensured", unique_names=unique_names)
        except Exception as e:
            logger.error("Failed to create indexes", error=str(e))
            raise

    async def list_all(self) -> List[BookRecord]:
        cursor = self.books_collection.find({}).sort("created_at", DESCENDING)
        books_docs = await cursor.to_list(length=None)
        return [self._to_record(book_doc) for book_doc in books_docs]

    async def find_by_id(self, book_id: str) -> Optional[BookRecord]:
        if not is_valid_book_id(book_id):
            return None
        book_doc = await self.books_collection.find_one({"_id": ObjectId(book_id)})
        if book_doc:
            return self._to_record(book_doc)
        return None

    async def find_by_name_excluding(
        self, name: str, exclude_id: Optional[str] = None
    ) -> Optional[BookRecord]:
        filter_query = {"name": name}
        if exclude_id is not None:
            filter_query["_id"] = {"$ne": ObjectId(exclude_id)}

        # Same collation as the unique name index, so both agree on equality
        book_doc = await self.books_collection.find_one(filter_query, collation=NAME_COLLATION)
        if book_doc:
            return self._to_record(book_doc)
        return None

    async def find_name_collisions(self) -> List[List[BookRecord]]:
        """
        Group books whose names are equal under the name collation.

        Returns:
            One list per colliding name, oldest book first
        """
        pipeline = [
            {"$sort": {"created_at": 1}},
            {"$group": {"_id": "$name", "books": {"$push": "$$ROOT"}, "count": {"$sum": 1}}},
            {"$match": {"count": {"$gt": 1}}},
        ]
        cursor = self.books_collection.aggregate(pipeline, collation=NAME_COLLATION)
        groups = await cursor.to_list(length=None)
        return [[self._to_record(book_doc) for book_doc in group["books"]] for group in groups]

    async def insert(self, payload: BookPayload, formatted_price: str) -> BookRecord:
        now = datetime.utcnow()
        book_doc = self._document_fields(payload, formatted_price)
        book_doc["created_at"] = now
        book_doc["updated_at"] = now

        result = await self.books_collection.insert_one(book_doc)
        book_doc["_id"] = result.inserted_id
        logger.debug("Book inserted", book_id=str(result.inserted_id))
        return self._to_record(book_doc)

    async def update_by_id(
        self, book_id: str, payload: BookPayload, formatted_price: str
    ) -> Optional[BookRecord]:
        update_data = self._document_fields(payload, formatted_price)
        update_data["updated_at"] = datetime.utcnow()

        book_doc = await self.books_collection.find_one_and_update(
            {"_id": ObjectId(book_id)},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER
        )
        if book_doc:
            return self._to_record(book_doc)
        return None

    async def delete_by_id(self, book_id: str) -> None:
        result = await self.books_collection.delete_one({"_id": ObjectId(book_id)})
        logger.debug("Book deleted", book_id=book_id, deleted_count=result.deleted_count)

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.database.command("ping")
            books_count = await self.books_collection.count_documents({})
            return {
                "status": "healthy",
                "books_collection": "accessible",
                "books_count": books_count
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }
