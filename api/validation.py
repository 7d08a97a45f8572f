"""
Request body validation for book create and update.

The rules live on ``BookPayload``; this module runs them against the raw
body and turns pydantic's errors into field-named violations, so that a
rejected request reports all failing fields at once.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from api import messages
from api.models import BookOperation, BookPayload, Violation, ViolationReason

FIELD_ORDER = ("name", "author", "description", "price")

FIELD_MESSAGES: Dict[str, Dict[ViolationReason, str]] = {
    "name": {
        ViolationReason.INVALID_TYPE: messages.BOOK_NAME_INVALID,
        ViolationReason.REQUIRED: messages.BOOK_NAME_REQUIRED,
        ViolationReason.EMPTY: messages.BOOK_NAME_EMPTY,
    },
    "author": {
        ViolationReason.INVALID_TYPE: messages.AUTHOR_INVALID,
        ViolationReason.REQUIRED: messages.AUTHOR_REQUIRED,
        ViolationReason.EMPTY: messages.AUTHOR_EMPTY,
    },
    "description": {
        ViolationReason.INVALID_TYPE: messages.DESCRIPTION_INVALID,
        ViolationReason.REQUIRED: messages.DESCRIPTION_REQUIRED,
        ViolationReason.EMPTY: messages.DESCRIPTION_EMPTY,
    },
    "price": {
        ViolationReason.NOT_A_NUMBER: messages.PRICE_INVALID,
        ViolationReason.REQUIRED: messages.PRICE_REQUIRED,
    },
}

# pydantic error type -> violation reason
ERROR_REASONS = {
    "missing": ViolationReason.REQUIRED,
    "string_type": ViolationReason.INVALID_TYPE,
    "string_too_short": ViolationReason.EMPTY,
    "float_parsing": ViolationReason.NOT_A_NUMBER,
    "float_type": ViolationReason.NOT_A_NUMBER,
    "finite_number": ViolationReason.NOT_A_NUMBER,
    "value_error": ViolationReason.NOT_A_NUMBER,
}


def _reason_for(field: str, error_type: str) -> ViolationReason:
    reason = ERROR_REASONS.get(error_type)
    if reason is None or reason not in FIELD_MESSAGES[field]:
        if field == "price":
            return ViolationReason.NOT_A_NUMBER
        return ViolationReason.INVALID_TYPE
    return reason


def _to_violations(error: ValidationError) -> List[Violation]:
    reasons: Dict[str, ViolationReason] = {}
    for item in error.errors():
        field = item["loc"][0] if item["loc"] else None
        if field in FIELD_MESSAGES and field not in reasons:
            reasons[field] = _reason_for(field, item["type"])

    return [
        Violation(field=field, reason=reasons[field], message=FIELD_MESSAGES[field][reasons[field]])
        for field in FIELD_ORDER
        if field in reasons
    ]


def parse_book_body(
    body: Any, operation: BookOperation
) -> Tuple[Optional[BookPayload], List[Violation]]:
    """
    Validate a raw body and build the structured payload from it.

    Create and update currently share one rule set; ``operation`` selects it.
    A body that is not a mapping is validated as an empty one. Unknown keys
    (including a caller-supplied ``formatted_price``) are dropped.

    Args:
        body: Decoded JSON body
        operation: Operation kind the body belongs to

    Returns:
        ``(payload, [])`` on success, ``(None, violations)`` otherwise
    """
    if not isinstance(body, Mapping):
        body = {}

    try:
        return BookPayload.model_validate(dict(body)), []
    except ValidationError as e:
        return None, _to_violations(e)


def validate_book_body(body: Any, operation: BookOperation) -> List[Violation]:
    """Return the violations for a raw body, in field order; empty when valid."""
    _, violations = parse_book_body(body, operation)
    return violations
