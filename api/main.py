"""
FastAPI main application for the Book Management API.
"""

import json
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import messages
from api.auth import verify_token
from api.config import config
from api.database import MongoBookRepository
from api.handlers import BookHandlers
from api.models import (
    APIResponse, CallerIdentity, FailureReason, HealthResponse, Outcome, Success
)
from utilities.logger import setup_logging

logger = structlog.get_logger(__name__)

FAILURE_STATUS = {
    FailureReason.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    FailureReason.VALIDATION: status.HTTP_400_BAD_REQUEST,
    FailureReason.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureReason.DUPLICATE: status.HTTP_409_CONFLICT,
    FailureReason.STORE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )
    logger.info("Starting Book Management API")

    client = AsyncIOMotorClient(config.mongodb_url)
    try:
        database = client[config.mongodb_database]
        await database.command("ping")
        logger.info("Database connection established", database=config.mongodb_database)

        repository = MongoBookRepository(database, config.books_collection)
        await repository.ensure_indexes(unique_names=config.enforce_unique_names)
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        client.close()
        raise

    app.state.book_handlers = BookHandlers(repository, currency_symbol=config.currency_symbol)

    yield

    logger.info("Shutting down Book Management API")
    client.close()


app = FastAPI(
    title=config.api_title,
    description="""
    REST API for managing a catalogue of books.

    ## Features

    * **Browse**: list every book (newest first) or fetch one by id
    * **Manage**: create, update and delete books with field validation
    * **Duplicate detection**: book names are unique regardless of case
    * **Formatted prices**: every book carries a display-ready `formatted_price`

    ## Authentication

    Create, update and delete require a JWT in the Authorization header:

    ```
    Authorization: Bearer your_token_here
    ```
    """,
    version=config.api_version,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=config.cors_allow_credentials,
    allow_methods=config.cors_allow_methods,
    allow_headers=config.cors_allow_headers,
)


def get_book_handlers(request: Request) -> BookHandlers:
    """Book handlers built at startup."""
    handlers = getattr(request.app.state, "book_handlers", None)
    if handlers is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database service not available"
        )
    return handlers


async def read_json_body(request: Request) -> Any:
    """Decoded JSON body, or an empty dict when the body is missing or malformed."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Malformed JSON body", path=request.url.path)
        return {}


def envelope(success: bool, message: str, status_code: int, data: Any = None, errors=None) -> JSONResponse:
    content = APIResponse(success=success, message=message, data=data, errors=errors)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def to_response(outcome: Outcome, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """Render a handler outcome in the response envelope."""
    if isinstance(outcome, Success):
        return envelope(True, outcome.message, success_status, data=outcome.data)
    return envelope(
        False, outcome.message, FAILURE_STATUS[outcome.reason], errors=outcome.errors
    )


# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    response = envelope(False, str(exc.detail), exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    message = str(exc) if config.debug else messages.INTERNAL_SERVER_ERROR
    return envelope(False, message, status.HTTP_500_INTERNAL_SERVER_ERROR)


# Health check endpoint
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request):
    """Health check endpoint."""
    handlers = getattr(request.app.state, "book_handlers", None)
    db_status = "unavailable"
    if handlers is not None:
        health_info = await handlers.repository.health_check()
        db_status = health_info.get("status", "unknown")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.utcnow(),
        version=config.api_version,
        database_status=db_status
    )


# Books endpoints
@app.get("/books/all", response_model=APIResponse, tags=["Books"])
async def get_all_books(handlers: BookHandlers = Depends(get_book_handlers)):
    """Get every book, newest first."""
    return to_response(await handlers.list_books())


@app.get("/books/{book_id}/details", response_model=APIResponse, tags=["Books"])
async def get_book_details(book_id: str, handlers: BookHandlers = Depends(get_book_handlers)):
    """
    Get a single book by ID.

    - **book_id**: MongoDB ObjectId (24 hex characters)
    """
    return to_response(await handlers.get_book(book_id))


@app.post("/books/add", response_model=APIResponse, tags=["Books"])
async def add_book(
    request: Request,
    caller: CallerIdentity = Depends(verify_token),
    handlers: BookHandlers = Depends(get_book_handlers)
):
    """
    Create a book.

    Body fields: **name**, **author**, **description** (non-empty strings)
    and **price** (number).
    """
    body = await read_json_body(request)
    outcome = await handlers.create_book(body, caller=caller.subject)
    return to_response(outcome, success_status=status.HTTP_201_CREATED)


@app.post("/books/{book_id}/update", response_model=APIResponse, tags=["Books"])
async def update_book(
    book_id: str,
    request: Request,
    caller: CallerIdentity = Depends(verify_token),
    handlers: BookHandlers = Depends(get_book_handlers)
):
    """Replace name, author, description and price of a book."""
    body = await read_json_body(request)
    return to_response(await handlers.update_book(book_id, body, caller=caller.subject))


@app.delete("/books/{book_id}/delete", response_model=APIResponse, tags=["Books"])
async def delete_book(
    book_id: str,
    caller: CallerIdentity = Depends(verify_token),
    handlers: BookHandlers = Depends(get_book_handlers)
):
    """Delete a book."""
    return to_response(await handlers.delete_book(book_id, caller=caller.subject))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
