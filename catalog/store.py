"""
JSON file store for the book collection.
Handles loading, atomic replacement and serialized read-modify-write of the data file.
"""

import asyncio
import json
import os
import stat
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from .errors import StorageUnavailableError
from .models import Book

T = TypeVar("T")

_collection_adapter = TypeAdapter(List[Book])


class JsonFileStore:
    """
    Owns the durable copy of the book collection.

    The whole collection is stored as one JSON array and replaced as a unit.
    Writes go to a temporary file in the same directory which is then moved
    over the target, so readers see either the old or the new collection.

    Mutations must go through ``mutate``, which holds the store's lock for the
    full load/mutate/save span. Reads through ``load`` are unlocked.
    """

    def __init__(self, path: Union[str, Path], indent: Optional[int] = 2):
        """
        Initialize the store.

        Args:
            path: Location of the JSON data file
            indent: Indentation used when writing the file (None for compact)
        """
        self.path = Path(path)
        self.indent = indent
        self.lock = asyncio.Lock()

    async def load(self) -> List[Book]:
        """
        Read the current collection.

        A missing file is initialized to an empty collection under the lock,
        re-checking first so a concurrent first write is never clobbered.

        Raises:
            StorageUnavailableError: If the file is unreadable or corrupt
        """
        books = await asyncio.to_thread(self._read)
        if books is None:
            async with self.lock:
                books = await asyncio.to_thread(self._read_or_initialize)
        return books

    async def save(self, books: Sequence[Book]) -> None:
        """
        Atomically replace the stored collection.

        Callers that derived ``books`` from a snapshot must hold ``lock``;
        prefer ``mutate``.

        Raises:
            StorageUnavailableError: If the file cannot be written. The
                previous contents stay intact.
        """
        await asyncio.to_thread(self._write, books)

    async def mutate(self, mutation: Callable[[List[Book]], Tuple[Sequence[Book], T]]) -> T:
        """
        Run one serialized load/mutate/save sequence.

        Args:
            mutation: Called with the current snapshot, returns the new
                collection and a result for the caller

        Returns:
            Whatever ``mutation`` returned alongside the new collection

        Nothing is written if ``mutation`` raises. The lock is released on
        every exit path.
        """
        async with self.lock:
            books = await asyncio.to_thread(self._read_or_initialize)
            updated, result = mutation(books)
            await asyncio.to_thread(self._write, updated)
            return result

    async def health_check(self) -> Dict[str, Any]:
        """
        Check that the data file is readable.

        Returns:
            Dictionary with health status
        """
        try:
            books = await self.load()
        except StorageUnavailableError as e:
            return {"status": "unhealthy", "path": str(self.path), "error": str(e)}
        return {"status": "healthy", "path": str(self.path), "books_count": len(books)}

    def _read(self) -> Optional[List[Book]]:
        """Read and decode the file; None if it does not exist yet."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageUnavailableError(f"Cannot read {self.path}: {e}", self.path) from e
        return self._decode(raw)

    def _read_or_initialize(self) -> List[Book]:
        books = self._read()
        if books is None:
            self._write([])
            books = []
        return books

    def _decode(self, raw: str) -> List[Book]:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageUnavailableError(f"Corrupt data file {self.path}: {e}", self.path) from e

        try:
            books = _collection_adapter.validate_python(data)
        except ValidationError as e:
            raise StorageUnavailableError(
                f"Data file {self.path} does not hold a valid book list: "
                f"{e.error_count()} error(s)",
                self.path,
            ) from e

        seen = set()
        for book in books:
            if book.id in seen:
                raise StorageUnavailableError(
                    f"Data file {self.path} has duplicate book id {book.id}", self.path
                )
            seen.add(book.id)
        return books

    def _encode(self, books: Sequence[Book]) -> str:
        return json.dumps(
            [book.model_dump() for book in books],
            indent=self.indent,
            ensure_ascii=False,
        )

    def _write(self, books: Sequence[Book]) -> None:
        """Write to a sibling temp file, fsync it, then rename over the target."""
        payload = self._encode(books)
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, self._file_mode())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None:
                with suppress(OSError):
                    os.unlink(tmp_path)
            raise StorageUnavailableError(f"Cannot write {self.path}: {e}", self.path) from e

    def _file_mode(self) -> int:
        """Permission bits for the replacement file, kept from the current file."""
        try:
            return stat.S_IMODE(os.stat(self.path).st_mode)
        except FileNotFoundError:
            return 0o644
