#!/usr/bin/env python3
"""
Catalog Management Utility

This script provides utilities to inspect the book data file:
- List all books or only the available ones
- Show a single book
- Create an empty data file
- Verify that the data file is readable and valid
"""

import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from catalog.errors import StorageUnavailableError
from catalog.service import BookCatalog
from catalog.store import JsonFileStore
from utilities.config import config
from utilities.logger import get_logger, setup_logging

logger = get_logger(__name__)


def build_catalog() -> BookCatalog:
    """Create a catalog over the configured data file."""
    return BookCatalog(JsonFileStore(config.get_data_file_path(), indent=config.json_indent))


def print_books(books) -> None:
    for book in books:
        marker = "✅" if book.available else "⛔"
        print(f"{book.id:4d}. {marker} {book.title} by {book.author}")


async def list_books(available_only: bool = False) -> int:
    """List the books in the data file."""
    catalog = build_catalog()
    heading = "AVAILABLE BOOKS" if available_only else "ALL BOOKS"
    print("\n" + "=" * 80)
    print(f"📋 {heading} ({catalog.store.path})")
    print("=" * 80)

    books = await (catalog.list_available() if available_only else catalog.list_books())
    if not books:
        print("❌ No books found")
        return 0

    print(f"✅ Found {len(books)} books:")
    print()
    print_books(books)
    return 0


async def show_book(book_id: int) -> int:
    """Show a single book."""
    book = await build_catalog().get_book(book_id)
    if book is None:
        print(f"❌ Book {book_id} not found")
        return 1

    print(f"   ID: {book.id}")
    print(f"   Title: {book.title}")
    print(f"   Author: {book.author}")
    print(f"   Available: {'yes' if book.available else 'no'}")
    return 0


async def init_data_file() -> int:
    """Create the data file if it does not exist yet."""
    path = config.get_data_file_path()
    existed = path.exists()
    count = await build_catalog().count()
    if existed:
        print(f"ℹ️  Data file already exists with {count} books: {path}")
    else:
        print(f"✅ Created empty data file: {path}")
    return 0


async def verify_data_file() -> int:
    """Load and validate the data file."""
    catalog = build_catalog()
    health_info = await catalog.health_check()
    if health_info["status"] != "healthy":
        print(f"❌ Data file is unusable: {health_info['error']}")
        return 1

    print(f"✅ Data file is valid: {health_info['books_count']} books in {health_info['path']}")
    return 0


def usage() -> None:
    print("Usage: python manage_catalog.py [list|available|show|init|verify] [id]")
    print()
    print("Commands:")
    print("  list       - List all books")
    print("  available  - List available books")
    print("  show       - Show the book with the given id")
    print("  init       - Create an empty data file if missing")
    print("  verify     - Check that the data file is readable and valid")
    print()
    print("Examples:")
    print("  python manage_catalog.py list")
    print("  python manage_catalog.py show 2")
    print("  DATA_FILE=/srv/books.json python manage_catalog.py verify")


async def main() -> int:
    """Main function."""
    if len(sys.argv) < 2:
        usage()
        return 1

    command = sys.argv[1].lower()

    # Setup logging
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )

    try:
        if command == "list":
            return await list_books()
        if command == "available":
            return await list_books(available_only=True)
        if command == "show":
            if len(sys.argv) < 3 or not sys.argv[2].isdigit():
                print("❌ Error: numeric book id required for show command")
                print("Usage: python manage_catalog.py show <id>")
                return 1
            return await show_book(int(sys.argv[2]))
        if command == "init":
            return await init_data_file()
        if command == "verify":
            return await verify_data_file()
    except StorageUnavailableError as e:
        logger.error("Storage operation failed", command=command, error=str(e), path=e.path)
        print(f"❌ Storage error: {e}")
        return 1

    print(f"❌ Unknown command: {command}")
    print("Available commands: list, available, show, init, verify")
    return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
