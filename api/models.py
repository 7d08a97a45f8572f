"""
API models and schemas for the FastAPI application.
"""

from datetime import datetime
from typing import Any, List, Optional, Union
from enum import Enum

from pydantic import BaseModel, Field, StrictStr, validator


class BookOperation(str, Enum):
    """Mutating operations that validate a request body."""
    CREATE = "create"
    UPDATE = "update"


class ViolationReason(str, Enum):
    """Why a single field failed validation."""
    INVALID_TYPE = "invalid_type"
    REQUIRED = "required"
    EMPTY = "empty"
    NOT_A_NUMBER = "not_a_number"


class Violation(BaseModel):
    """One field-level validation failure."""
    field: str = Field(..., description="Name of the failing field")
    reason: ViolationReason = Field(..., description="Violation kind")
    message: str = Field(..., description="Human-readable, field-named message")


class BookPayload(BaseModel):
    """Validated request body for create and update."""
    model_config = {
        "str_strip_whitespace": True,
        "extra": "ignore"  # formatted_price and ids are never taken from callers
    }

    name: StrictStr = Field(..., min_length=1, description="Book title, trimmed")
    author: StrictStr = Field(..., min_length=1, description="Author, trimmed")
    description: StrictStr = Field(..., min_length=1, description="Description, trimmed")
    price: float = Field(..., allow_inf_nan=False, description="Finite numeric price")

    @validator('price', pre=True)
    def validate_price(cls, v):
        """Reject booleans and ints too large for a float."""
        if isinstance(v, bool):
            raise ValueError('price must be a number')
        if isinstance(v, int):
            try:
                return float(v)
            except OverflowError:
                raise ValueError('price is out of range')
        return v


class BookRecord(BaseModel):
    """Stored book as returned by the API."""
    id: str = Field(..., description="Unique book identifier")
    name: str = Field(..., description="Book title")
    author: str = Field(..., description="Book author")
    description: str = Field(..., description="Book description")
    price: float = Field(..., description="Numeric price")
    formatted_price: str = Field(..., description="Price formatted for display")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    class Config:
        json_schema_extra = {
            "example": {
                "id": "6523f1c2a1b2c3d4e5f60718",
                "name": "Dune",
                "author": "Frank Herbert",
                "description": "Epic",
                "price": 25.0,
                "formatted_price": "$25.00",
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z"
            }
        }


class FailureReason(str, Enum):
    """Failure taxonomy for book handlers."""
    INVALID_ID = "invalid_id"
    VALIDATION = "validation"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    STORE_ERROR = "store_error"


class Success(BaseModel):
    """Terminal successful outcome of a handler."""
    data: Union[BookRecord, List[BookRecord], None] = None
    message: str


class Failure(BaseModel):
    """Terminal failed outcome of a handler."""
    reason: FailureReason
    message: str
    errors: Optional[List[Violation]] = None


Outcome = Union[Success, Failure]


class CallerIdentity(BaseModel):
    """Authenticated caller extracted from a bearer token."""
    subject: str = Field(..., description="Token subject (sub claim)")
    claims: dict = Field(default_factory=dict, description="All decoded claims")


class APIResponse(BaseModel):
    """Response envelope shared by every endpoint."""
    success: bool = Field(..., description="Whether the request succeeded")
    message: str = Field(..., description="Human-readable message")
    data: Any = Field(None, description="Record, list of records, or null")
    errors: Optional[List[Violation]] = Field(None, description="Field-level validation errors")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
