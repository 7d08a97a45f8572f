"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from api.database import BookRepository
from api.handlers import BookHandlers
from api.models import BookPayload, BookRecord


class InMemoryBookRepository(BookRepository):
    """Dictionary-backed repository used in place of MongoDB."""

    def __init__(self):
        self.books: Dict[str, BookRecord] = {}
        self.calls: List[str] = []
        self._clock = datetime(2024, 1, 1)

    def _tick(self) -> datetime:
        # Strictly increasing so newest-first ordering is deterministic
        self._clock += timedelta(seconds=1)
        return self._clock

    async def list_all(self) -> List[BookRecord]:
        self.calls.append("list_all")
        return sorted(self.books.values(), key=lambda b: b.created_at, reverse=True)

    async def find_by_id(self, book_id: str) -> Optional[BookRecord]:
        self.calls.append("find_by_id")
        return self.books.get(book_id)

    async def find_by_name_excluding(
        self, name: str, exclude_id: Optional[str] = None
    ) -> Optional[BookRecord]:
        self.calls.append("find_by_name_excluding")
        for book in self.books.values():
            if book.name.casefold() == name.casefold() and book.id != exclude_id:
                return book
        return None

    async def insert(self, payload: BookPayload, formatted_price: str) -> BookRecord:
        self.calls.append("insert")
        now = self._tick()
        book = BookRecord(
            id=str(ObjectId()),
            formatted_price=formatted_price,
            created_at=now,
            updated_at=now,
            **payload.model_dump()
        )
        self.books[book.id] = book
        return book

    async def update_by_id(
        self, book_id: str, payload: BookPayload, formatted_price: str
    ) -> Optional[BookRecord]:
        self.calls.append("update_by_id")
        current = self.books.get(book_id)
        if current is None:
            return None
        book = current.model_copy(update={
            **payload.model_dump(),
            "formatted_price": formatted_price,
            "updated_at": self._tick(),
        })
        self.books[book_id] = book
        return book

    async def delete_by_id(self, book_id: str) -> None:
        self.calls.append("delete_by_id")
        self.books.pop(book_id, None)


@pytest.fixture
def repository():
    """Empty in-memory book repository."""
    return InMemoryBookRepository()


@pytest.fixture
def handlers(repository):
    """Book handlers wired to the in-memory repository."""
    return BookHandlers(repository)


@pytest.fixture
def sample_book_body():
    """Valid create/update body."""
    return {
        "name": "Dune",
        "author": "Herbert",
        "description": "Epic",
        "price": 25
    }


@pytest.fixture
def mock_books_collection():
    """Mock motor collection for repository tests."""
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.find_one_and_update = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.create_index = AsyncMock()
    collection.count_documents = AsyncMock(return_value=0)
    return collection


@pytest.fixture
def mock_database(mock_books_collection):
    """Mock motor database exposing the mock books collection."""
    database = MagicMock()
    database.__getitem__.return_value = mock_books_collection
    database.command = AsyncMock(return_value={"ok": 1})
    return database
