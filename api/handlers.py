"""
Book request handlers.

Each handler runs a fixed sequence of checks and store calls and ends in
exactly one ``Success`` or ``Failure``. Store exceptions are turned into
``Failure(STORE_ERROR)`` here; nothing is retried.

The duplicate-name check and the following write are separate store calls,
so two concurrent requests for the same name can both pass the check. Set
``enforce_unique_names`` to have MongoDB reject the second write.
"""

from typing import Any, Optional

from api import messages
from api.database import BookRepository, is_valid_book_id
from api.models import BookOperation, Failure, FailureReason, Outcome, Success
from api.pricing import format_price
from api.validation import parse_book_body
from utilities.logger import OperationLogger


class BookHandlers:
    """List, detail, create, update and delete for books."""

    def __init__(self, repository: BookRepository, currency_symbol: str = "$"):
        self.repository = repository
        self.currency_symbol = currency_symbol

    def _format_price(self, price: float) -> str:
        return format_price(price, self.currency_symbol)

    async def _is_duplicate_name(self, name: str, exclude_id: Optional[str] = None) -> bool:
        """Whether another book already uses ``name``, ignoring case."""
        existing = await self.repository.find_by_name_excluding(name, exclude_id)
        return existing is not None

    @staticmethod
    def _store_failure(op_log: OperationLogger, error: Exception) -> Failure:
        op_log.log_store_error(str(error))
        return Failure(reason=FailureReason.STORE_ERROR, message=str(error))

    @staticmethod
    def _reject(op_log: OperationLogger, reason: FailureReason, message: str, **kwargs) -> Failure:
        op_log.log_rejected(reason.value)
        return Failure(reason=reason, message=message, **kwargs)

    async def list_books(self) -> Outcome:
        """All books, newest first. An empty store is a success."""
        op_log = OperationLogger("list")
        op_log.log_start()
        try:
            books = await self.repository.list_all()
        except Exception as e:
            return self._store_failure(op_log, e)

        op_log.log_success(count=len(books))
        return Success(data=books, message=messages.BOOK_FETCHED_SUCCESS)

    async def get_book(self, book_id: str) -> Outcome:
        op_log = OperationLogger("detail").bind_context(book_id=book_id)
        op_log.log_start()
        if not is_valid_book_id(book_id):
            return self._reject(op_log, FailureReason.INVALID_ID, messages.INVALID_BOOK_ID)

        try:
            book = await self.repository.find_by_id(book_id)
        except Exception as e:
            return self._store_failure(op_log, e)

        if book is None:
            return self._reject(op_log, FailureReason.NOT_FOUND, messages.BOOK_FETCHED_ERROR)

        op_log.log_success()
        return Success(data=book, message=messages.BOOK_DETAILS_FETCHED_SUCCESS)

    async def create_book(self, body: Any, caller: Optional[str] = None) -> Outcome:
        """
        Validate, check for a duplicate name, format the price and insert.

        Args:
            body: Decoded JSON request body
            caller: Authenticated subject, used for logging only

        Returns:
            Success with the stored record, or the first failure hit
        """
        op_log = OperationLogger("create").bind_context(caller=caller)
        op_log.log_start()

        payload, violations = parse_book_body(body, BookOperation.CREATE)
        if violations:
            return self._reject(
                op_log, FailureReason.VALIDATION, messages.VALIDATION_ERROR, errors=violations
            )

        try:
            if await self._is_duplicate_name(payload.name):
                return self._reject(op_log, FailureReason.DUPLICATE, messages.FIND_DUPLICATE_BOOK)

            formatted_price = self._format_price(payload.price)
            book = await self.repository.insert(payload, formatted_price)
        except Exception as e:
            return self._store_failure(op_log, e)

        op_log.log_success(book_id=book.id)
        return Success(data=book, message=messages.BOOK_CREATED_SUCCESS)

    async def update_book(self, book_id: str, body: Any, caller: Optional[str] = None) -> Outcome:
        """
        Replace the mutable fields of an existing book.

        The duplicate check runs before the existence check, so a name
        conflict is reported even for an id that does not exist.
        """
        op_log = OperationLogger("update").bind_context(book_id=book_id, caller=caller)
        op_log.log_start()
        if not is_valid_book_id(book_id):
            return self._reject(op_log, FailureReason.INVALID_ID, messages.INVALID_BOOK_ID)

        payload, violations = parse_book_body(body, BookOperation.UPDATE)
        if violations:
            return self._reject(
                op_log, FailureReason.VALIDATION, messages.VALIDATION_ERROR, errors=violations
            )

        try:
            if await self._is_duplicate_name(payload.name, exclude_id=book_id):
                return self._reject(op_log, FailureReason.DUPLICATE, messages.FIND_DUPLICATE_BOOK)

            if await self.repository.find_by_id(book_id) is None:
                return self._reject(op_log, FailureReason.NOT_FOUND, messages.BOOK_FETCHED_ERROR)

            formatted_price = self._format_price(payload.price)
            book = await self.repository.update_by_id(book_id, payload, formatted_price)
        except Exception as e:
            return self._store_failure(op_log, e)

        # Removed between the existence check and the write
        if book is None:
            return self._reject(op_log, FailureReason.NOT_FOUND, messages.BOOK_FETCHED_ERROR)

        op_log.log_success()
        return Success(data=book, message=messages.BOOK_UPDATED_SUCCESS)

    async def delete_book(self, book_id: str, caller: Optional[str] = None) -> Outcome:
        op_log = OperationLogger("delete").bind_context(book_id=book_id, caller=caller)
        op_log.log_start()
        if not is_valid_book_id(book_id):
            return self._reject(op_log, FailureReason.INVALID_ID, messages.INVALID_BOOK_ID)

        try:
            if await self.repository.find_by_id(book_id) is None:
                return self._reject(op_log, FailureReason.NOT_FOUND, messages.BOOK_FETCHED_ERROR)

            await self.repository.delete_by_id(book_id)
        except Exception as e:
            return self._store_failure(op_log, e)

        op_log.log_success()
        return Success(data=None, message=messages.BOOK_DELETED_SUCCESS)
