"""
FastAPI main application for the Bookstore API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from pymongo.errors import PyMongoError

from api.config import APIConfig, config as default_config
from api.database import BookStore
from api.exceptions import BookNotFoundError, BookValidationError
from api.models import (
    BookCreate, BookUpdate, ErrorResponse, HealthResponse, MessageResponse
)

# Setup logging
logger = structlog.get_logger(__name__)


def build_store(api_config: APIConfig) -> BookStore:
    """Construct the store handle described by the configuration."""
    return BookStore(
        connection_url=api_config.mongo_uri,
        database_name=api_config.mongodb_database,
        collection_name=api_config.mongodb_collection
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Bookstore API")

    store = app.state.book_store
    if store is None:
        store = build_store(app.state.config)
        app.state.book_store = store

    try:
        await store.connect()
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        raise

    yield

    # Shutdown
    logger.info("Shutting down Bookstore API")
    await store.disconnect()


def get_book_store(request: Request) -> BookStore:
    """Dependency returning the process-wide store handle."""
    store = request.app.state.book_store
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database service not available"
        )
    return store


def format_request_errors(exc: RequestValidationError) -> str:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return "Book validation failed: " + ", ".join(details)


def not_found_response() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=MessageResponse(message="Book not found.").model_dump()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as the JSON shapes clients expect."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=str(exc.detail)).model_dump(),
            headers=exc.headers
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request, exc: RequestValidationError):
        """Malformed bodies are client errors (400), not 422."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error=format_request_errors(exc)).model_dump()
        )

    @app.exception_handler(BookNotFoundError)
    async def book_not_found_handler(request, exc: BookNotFoundError):
        return not_found_response()

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc: Exception):
        """Handle general exceptions."""
        logger.error("Unhandled exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=str(exc)).model_dump()
        )


def register_routes(app: FastAPI) -> None:
    """Attach the health and book endpoints."""

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint."""
        db_status = "unavailable"
        store = request.app.state.book_store
        if store is not None:
            health_info = await store.health_check()
            db_status = health_info.get("status", "unknown")

        return HealthResponse(
            status="healthy" if db_status == "healthy" else "degraded",
            timestamp=datetime.now(timezone.utc),
            version=request.app.state.config.api_version,
            database_status=db_status
        )

    @app.post("/books", status_code=status.HTTP_201_CREATED, tags=["Books"])
    async def create_book(book: BookCreate, store: BookStore = Depends(get_book_store)):
        """Create a book. Missing title/author or an out-of-range year is a 400."""
        try:
            created = await store.create(book.to_document())
        except (BookValidationError, PyMongoError) as e:
            logger.warning("Failed to create book", error=str(e))
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        return JSONResponse(status_code=status.HTTP_201_CREATED, content=created.to_json())

    @app.get("/books", tags=["Books"])
    async def list_books(store: BookStore = Depends(get_book_store)):
        """Get every book."""
        try:
            books = await store.list_books()
        except PyMongoError as e:
            logger.error("Failed to get books", error=str(e))
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

        return JSONResponse(content=[book.to_json() for book in books])

    @app.get("/books/genre/{genre:path}", tags=["Books"])
    async def get_books_by_genre(genre: str, store: BookStore = Depends(get_book_store)):
        """
        Get books tagged with a genre.

        - **genre**: exact genre name, matched against any element of ``genres``
        """
        try:
            books = await store.find_by_genre(genre)
        except PyMongoError as e:
            logger.error("Failed to get books by genre", genre=genre, error=str(e))
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        return JSONResponse(content=[book.to_json() for book in books])

    @app.get("/books/{book_id}", tags=["Books"])
    async def get_book(book_id: str, store: BookStore = Depends(get_book_store)):
        """
        Get a single book by ID.

        - **book_id**: MongoDB ObjectId (24 hex characters)
        """
        try:
            book = await store.get_by_id(book_id)
        except PyMongoError as e:
            logger.error("Failed to get book", book_id=book_id, error=str(e))
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        return JSONResponse(content=book.to_json())

    @app.put("/books/{book_id}", tags=["Books"])
    async def update_book(book_id: str, changes: BookUpdate, store: BookStore = Depends(get_book_store)):
        """Apply the provided fields to a book and return the result."""
        try:
            book = await store.update(book_id, changes.to_changes())
        except (BookValidationError, PyMongoError) as e:
            logger.warning("Failed to update book", book_id=book_id, error=str(e))
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        return JSONResponse(content=book.to_json())

    @app.delete("/books/{book_id}", tags=["Books"])
    async def delete_book(book_id: str, store: BookStore = Depends(get_book_store)):
        """Delete a book."""
        try:
            book = await store.delete(book_id)
        except PyMongoError as e:
            logger.error("Failed to delete book", book_id=book_id, error=str(e))
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        return JSONResponse(
            content=MessageResponse(message=f"Book '{book.title}' deleted successfully.").model_dump()
        )


def create_app(api_config: Optional[APIConfig] = None, store: Optional[BookStore] = None) -> FastAPI:
    """
    Build the application.

    Args:
        api_config: Settings; the process-wide config when omitted
        store: Store handle to use; built from the settings at startup when omitted

    Returns:
        Configured FastAPI application
    """
    api_config = api_config or default_config

    app = FastAPI(
        title=api_config.api_title,
        description=api_config.api_description,
        version=api_config.api_version,
        lifespan=lifespan
    )
    app.state.config = api_config
    app.state.book_store = store

    register_exception_handlers(app)
    register_routes(app)
    return app


# Create FastAPI application
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=default_config.host,
        port=default_config.port,
        log_level=default_config.log_level.lower()
    )
