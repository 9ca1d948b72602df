"""
Pure mutation operations over an in-memory book collection.

None of these functions perform I/O. Each returns a new list and leaves the
snapshot it was given untouched, so a failed operation never half-applies.
Identifier uniqueness from ``next_identifier`` only holds when callers
serialize the whole load/mutate/save sequence (see ``JsonFileStore.mutate``).
"""

from typing import Any, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .errors import BookNotFoundError, BookValidationError
from .models import Book, BookCreate, BookPatch

ModelT = TypeVar("ModelT", bound=BaseModel)


def _coerce(model: Type[ModelT], data: Union[ModelT, Mapping[str, Any]]) -> ModelT:
    """Validate caller data into ``model``, translating pydantic failures."""
    if isinstance(data, model):
        return data
    if not isinstance(data, Mapping):
        raise BookValidationError("Invalid book data: expected an object")
    try:
        return model.model_validate(dict(data))
    except ValidationError as e:
        raise BookValidationError(
            "Invalid book data",
            errors=e.errors(include_url=False, include_context=False),
        ) from e


def next_identifier(books: Sequence[Book]) -> int:
    """Return 1 for an empty collection, otherwise the highest id plus one."""
    if not books:
        return 1
    return max(book.id for book in books) + 1


def filter_available(books: Sequence[Book]) -> List[Book]:
    """Books that are currently available, in collection order."""
    return [book for book in books if book.available is True]


def find_by_id(books: Sequence[Book], book_id: int) -> Optional[Book]:
    for book in books:
        if book.id == book_id:
            return book
    return None


def _index_of(books: Sequence[Book], book_id: int) -> int:
    for index, book in enumerate(books):
        if book.id == book_id:
            return index
    raise BookNotFoundError(book_id)


def insert(
    books: Sequence[Book],
    candidate: Union[BookCreate, Mapping[str, Any]],
) -> Tuple[List[Book], Book]:
    """
    Validate ``candidate`` and append it with the next identifier.

    Args:
        books: Current collection snapshot
        candidate: Title, author and availability of the new book

    Returns:
        The new collection and the created book

    Raises:
        BookValidationError: If the candidate is missing fields or has wrong types
    """
    data = _coerce(BookCreate, candidate)
    created = Book(id=next_identifier(books), **data.model_dump())
    return [*books, created], created


def update(
    books: Sequence[Book],
    book_id: int,
    patch: Union[BookPatch, Mapping[str, Any]],
) -> Tuple[List[Book], Book]:
    """
    Overlay the fields present in ``patch`` onto book ``book_id``.

    Fields absent from the patch keep their values and the identifier never
    changes. An empty patch succeeds and returns the book as stored.

    Raises:
        BookNotFoundError: If no book has ``book_id``
        BookValidationError: If the patch has unknown fields, nulls or wrong types
    """
    index = _index_of(books, book_id)
    changes = _coerce(BookPatch, patch).changes()
    updated = books[index].model_copy(update=changes)

    result = list(books)
    result[index] = updated
    return result, updated


def remove(books: Sequence[Book], book_id: int) -> List[Book]:
    """
    Drop book ``book_id``, keeping every other book in its original order.

    Raises:
        BookNotFoundError: If no book has ``book_id``
    """
    index = _index_of(books, book_id)
    return [*books[:index], *books[index + 1:]]
