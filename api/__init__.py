"""
FastAPI RESTful API for the Book Management System.

This module provides a REST API for:
- Listing books and fetching book details
- Creating, updating and deleting books with field validation
- Case-insensitive duplicate name detection
- JWT-protected write operations
"""
