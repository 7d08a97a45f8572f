"""
User-facing messages returned by the Book Management API.
"""

# Success
BOOK_FETCHED_SUCCESS = "Books fetched successfully"
BOOK_DETAILS_FETCHED_SUCCESS = "Book details fetched successfully"
BOOK_CREATED_SUCCESS = "Book created successfully"
BOOK_UPDATED_SUCCESS = "Book updated successfully"
BOOK_DELETED_SUCCESS = "Book deleted successfully"

# Failures
INVALID_BOOK_ID = "Invalid book id"
BOOK_FETCHED_ERROR = "Book not found"
FIND_DUPLICATE_BOOK = "A book with this name already exists"
VALIDATION_ERROR = "Validation error"
INTERNAL_SERVER_ERROR = "Internal server error"
UNAUTHORIZED = "Not authenticated"
INVALID_TOKEN = "Invalid or expired token"

# Field violations
BOOK_NAME_INVALID = "Book name must be a string"
BOOK_NAME_REQUIRED = "Book name is required"
BOOK_NAME_EMPTY = "Book name cannot be empty"
AUTHOR_INVALID = "Author must be a string"
AUTHOR_REQUIRED = "Author is required"
AUTHOR_EMPTY = "Author cannot be empty"
DESCRIPTION_INVALID = "Description must be a string"
DESCRIPTION_REQUIRED = "Description is required"
DESCRIPTION_EMPTY = "Description cannot be empty"
PRICE_INVALID = "Price must be a number"
PRICE_REQUIRED = "Price is required"
