"""
Catalog service: the operations HTTP handlers and tools call.
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from . import operations
from .models import Book, BookCreate, BookPatch
from .store import JsonFileStore


class BookCatalog:
    """
    Book catalog backed by a ``JsonFileStore``.

    Reads load a snapshot without locking. Every create, update and delete
    runs as one serialized load/mutate/save sequence through ``store.mutate``.
    """

    def __init__(self, store: JsonFileStore):
        self.store = store

    async def list_books(self) -> List[Book]:
        """All books in insertion order."""
        return await self.store.load()

    async def list_available(self) -> List[Book]:
        """Books whose ``available`` flag is set."""
        return operations.filter_available(await self.store.load())

    async def get_book(self, book_id: int) -> Optional[Book]:
        """
        Get a single book by ID.

        Returns:
            The book if found, None otherwise
        """
        return operations.find_by_id(await self.store.load(), book_id)

    async def count(self) -> int:
        return len(await self.store.load())

    async def create_book(self, candidate: Union[BookCreate, Mapping[str, Any]]) -> Book:
        """
        Add a book, assigning it the next identifier.

        Raises:
            BookValidationError: If the candidate is invalid
            StorageUnavailableError: If the data file cannot be read or written
        """
        return await self.store.mutate(lambda books: operations.insert(books, candidate))

    async def update_book(self, book_id: int, patch: Union[BookPatch, Mapping[str, Any]]) -> Book:
        """
        Apply a partial update to a book.

        Raises:
            BookNotFoundError: If the book does not exist
            BookValidationError: If the patch is invalid
            StorageUnavailableError: If the data file cannot be read or written
        """
        return await self.store.mutate(lambda books: operations.update(books, book_id, patch))

    async def delete_book(self, book_id: int) -> Book:
        """
        Delete a book.

        Returns:
            The removed book

        Raises:
            BookNotFoundError: If the book does not exist
            StorageUnavailableError: If the data file cannot be read or written
        """
        def _remove(books: List[Book]):
            removed = operations.find_by_id(books, book_id)
            return operations.remove(books, book_id), removed

        return await self.store.mutate(_remove)

    async def health_check(self) -> Dict[str, Any]:
        return await self.store.health_check()
