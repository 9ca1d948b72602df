"""
FastAPI main application for the Books API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List

import structlog
from fastapi import Body, Depends, FastAPI, HTTPException, Path, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.config import config as api_config
from api.models import ErrorResponse, HealthResponse, MessageResponse
from catalog.errors import BookNotFoundError, BookValidationError, StorageUnavailableError
from catalog.models import Book, BookCreate, BookPatch
from catalog.service import BookCatalog
from catalog.store import JsonFileStore
from utilities.config import config
from utilities.logger import CatalogLogger

# Setup logging
logger = structlog.get_logger(__name__)

WELCOME_PAGE = """
<h1>Books API</h1>
<p>Available endpoints:</p>
<ul>
  <li>GET /books - Get all books</li>
  <li>GET /books/available - Get available books</li>
  <li>GET /books/:id - Get a book</li>
  <li>POST /books - Add a new book</li>
  <li>PUT /books/:id - Update a book</li>
  <li>PATCH /books/:id - Update a book</li>
  <li>DELETE /books/:id - Delete a book</li>
</ul>
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    data_file = config.get_data_file_path()
    logger.info("Starting Books API", data_file=str(data_file))

    store = JsonFileStore(data_file, indent=config.json_indent)
    app.state.catalog = BookCatalog(store)

    # Creates the data file on first run
    health_info = await store.health_check()
    if health_info["status"] == "healthy":
        logger.info("Data file ready", books_count=health_info["books_count"])
    else:
        logger.error("Data file unavailable", error=health_info.get("error"))

    yield

    # Shutdown
    logger.info("Shutting down Books API")


def get_catalog(request: Request) -> BookCatalog:
    """Dependency returning the catalog built at startup."""
    return request.app.state.catalog


# Create FastAPI application
app = FastAPI(
    title=api_config.api_title,
    description=api_config.api_description,
    version=api_config.api_version,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=api_config.cors_origins,
    allow_credentials=api_config.cors_allow_credentials,
    allow_methods=api_config.cors_allow_methods,
    allow_headers=api_config.cors_allow_headers,
)


# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    cause = exc.__cause__
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=str(exc.detail),
            detail=str(cause) if api_config.debug and cause is not None else None,
            status_code=exc.status_code
        ).model_dump(),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    """Report malformed requests as invalid book data."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    CatalogLogger("api").log_rejected(reason=problems)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            error="Invalid book data",
            detail=problems if api_config.debug else None,
            status_code=status.HTTP_400_BAD_REQUEST
        ).model_dump()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            detail=str(exc) if api_config.debug else None,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        ).model_dump()
    )


def _storage_failure(operation: str, message: str, exc: StorageUnavailableError) -> HTTPException:
    """Build the 500 response for a storage error; raise it ``from exc`` to keep the cause."""
    CatalogLogger("api").log_storage_failure(operation, str(exc), exc.path)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=message
    )


def _book_not_found(book_id: int) -> HTTPException:
    CatalogLogger("api").log_rejected(reason="Book not found", book_id=book_id)
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Book not found"
    )


@app.get("/", response_class=HTMLResponse, include_in_schema=False)
async def welcome():
    """Welcome page listing the endpoints."""
    return WELCOME_PAGE


# Health check endpoint
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(catalog: BookCatalog = Depends(get_catalog)):
    """Health check endpoint."""
    health_info = await catalog.health_check()
    storage_status = health_info.get("status", "unknown")
    return HealthResponse(
        status="healthy" if storage_status == "healthy" else "unhealthy",
        timestamp=datetime.now(timezone.utc),
        version=api_config.api_version,
        storage_status=storage_status,
        books_count=health_info.get("books_count")
    )


# Books endpoints
@app.get("/books", response_model=List[Book], tags=["Books"])
async def list_books(catalog: BookCatalog = Depends(get_catalog)):
    """Get all books in insertion order."""
    try:
        return await catalog.list_books()
    except StorageUnavailableError as e:
        raise _storage_failure("list_books", "Failed to fetch books", e) from e


@app.get("/books/available", response_model=List[Book], tags=["Books"])
async def list_available_books(catalog: BookCatalog = Depends(get_catalog)):
    """Get books that are currently available."""
    try:
        return await catalog.list_available()
    except StorageUnavailableError as e:
        raise _storage_failure("list_available", "Failed to fetch available books", e) from e


@app.get("/books/{book_id}", response_model=Book, tags=["Books"])
async def get_book(
    book_id: int = Path(..., ge=1, description="Book identifier"),
    catalog: BookCatalog = Depends(get_catalog)
):
    """Get a single book by ID."""
    try:
        book = await catalog.get_book(book_id)
    except StorageUnavailableError as e:
        raise _storage_failure("get_book", "Failed to fetch book", e) from e

    if book is None:
        raise _book_not_found(book_id)
    return book


@app.post(
    "/books",
    response_model=Book,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Books"]
)
async def create_book(
    book: BookCreate = Body(...),
    catalog: BookCatalog = Depends(get_catalog)
):
    """
    Add a new book. The identifier is assigned by the server.

    - **title**: Non-empty title
    - **author**: Non-empty author
    - **available**: Boolean availability flag
    """
    book_logger = CatalogLogger("api").bind_context(operation="create_book")
    try:
        created = await catalog.create_book(book)
    except BookValidationError as e:
        book_logger.log_rejected(reason=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid book data") from e
    except StorageUnavailableError as e:
        raise _storage_failure("create_book", "Failed to add book", e) from e

    book_logger.log_book_created(created.id, created.title)
    return created


UPDATE_RESPONSES = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


@app.put("/books/{book_id}", response_model=Book, responses=UPDATE_RESPONSES, tags=["Books"])
async def update_book(
    book_id: int = Path(..., ge=1, description="Book identifier"),
    patch: BookPatch = Body(...),
    catalog: BookCatalog = Depends(get_catalog)
):
    """
    Update a book. Only the fields present in the body change;
    the identifier cannot be changed.
    """
    return await _apply_update(catalog, book_id, patch)


@app.patch("/books/{book_id}", response_model=Book, responses=UPDATE_RESPONSES, tags=["Books"])
async def patch_book(
    book_id: int = Path(..., ge=1, description="Book identifier"),
    patch: BookPatch = Body(...),
    catalog: BookCatalog = Depends(get_catalog)
):
    """Same partial update as PUT."""
    return await _apply_update(catalog, book_id, patch)


async def _apply_update(catalog: BookCatalog, book_id: int, patch: BookPatch) -> Book:
    book_logger = CatalogLogger("api").bind_context(operation="update_book")
    try:
        updated = await catalog.update_book(book_id, patch)
    except BookNotFoundError:
        raise _book_not_found(book_id)
    except BookValidationError as e:
        book_logger.log_rejected(reason=str(e), book_id=book_id)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid book data") from e
    except StorageUnavailableError as e:
        raise _storage_failure("update_book", "Failed to update book", e) from e

    book_logger.log_book_updated(book_id, sorted(patch.changes()))
    return updated


@app.delete(
    "/books/{book_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Books"]
)
async def delete_book(
    book_id: int = Path(..., ge=1, description="Book identifier"),
    catalog: BookCatalog = Depends(get_catalog)
):
    """Delete a book by ID."""
    try:
        await catalog.delete_book(book_id)
    except BookNotFoundError:
        raise _book_not_found(book_id)
    except StorageUnavailableError as e:
        raise _storage_failure("delete_book", "Failed to delete book", e) from e

    CatalogLogger("api").bind_context(operation="delete_book").log_book_deleted(book_id)
    return MessageResponse(message="Book deleted successfully")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=api_config.host,
        port=api_config.port,
        log_level=api_config.log_level.lower()
    )
