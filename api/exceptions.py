"""
Exceptions raised by the book store.
"""

from typing import List, Optional

from api.validation import FieldError


class BookStoreError(Exception):
    """Base class for book store failures."""


class BookValidationError(BookStoreError):
    """Input failed one or more field constraints."""

    def __init__(self, errors: List[FieldError]):
        self.errors = errors
        details = ", ".join(f"{error.field}: {error.message}" for error in errors)
        super().__init__(f"Book validation failed: {details}")


class BookNotFoundError(BookStoreError):
    """No book matches the given identifier."""

    def __init__(self, book_id: Optional[str] = None):
        self.book_id = book_id
        super().__init__("Book not found.")
