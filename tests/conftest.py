"""
Pytest configuration and shared fixtures.
"""

import json

import pytest

from catalog.models import Book
from catalog.service import BookCatalog
from catalog.store import JsonFileStore


@pytest.fixture
def data_file(tmp_path):
    """Path of a data file that does not exist yet."""
    return tmp_path / "books.json"


@pytest.fixture
def store(data_file):
    """Create a store over an empty temporary directory."""
    return JsonFileStore(data_file)


@pytest.fixture
def catalog(store):
    """Create a catalog over the temporary store."""
    return BookCatalog(store)


@pytest.fixture
def sample_books():
    """Create sample books for testing."""
    return [
        Book(id=1, title="Dune", author="Frank Herbert", available=True),
        Book(id=2, title="Hyperion", author="Dan Simmons", available=False),
        Book(id=5, title="Solaris", author="Stanislaw Lem", available=True),
    ]


@pytest.fixture
def write_data_file(data_file):
    """Write raw content to the data file."""
    def _write(content):
        if not isinstance(content, str):
            content = json.dumps(content, indent=2)
        data_file.write_text(content, encoding="utf-8")
        return data_file
    return _write
