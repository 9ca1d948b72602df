"""
Error taxonomy for catalog operations.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class CatalogError(Exception):
    """Base class for all catalog failures."""


class BookValidationError(CatalogError):
    """Caller-supplied book data failed required-field or type checks."""

    def __init__(self, message: str = "Invalid book data", errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class BookNotFoundError(CatalogError):
    """No book with the requested identifier exists in the collection."""

    def __init__(self, book_id: int):
        super().__init__(f"Book {book_id} not found")
        self.book_id = book_id


class StorageUnavailableError(CatalogError):
    """The data file could not be read or written."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = str(path) if path is not None else None
