"""
Book store: async MongoDB access for the book collection.
"""

import copy
from typing import Any, Dict, List, Optional

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import ConnectionFailure

from api.exceptions import BookNotFoundError, BookValidationError
from api.models import BookResponse
from api.monitoring import ConnectionStateLogger
from api.validation import validate_book

logger = structlog.get_logger(__name__)

# Value used when create or update sends an explicit null
FIELD_DEFAULTS = {
    "genres": [],
    "isAvailable": True,
}


def parse_book_id(book_id: str) -> ObjectId:
    """Convert a path identifier to an ObjectId; malformed ids are not found."""
    if not ObjectId.is_valid(book_id):
        raise BookNotFoundError(book_id)
    return ObjectId(book_id)


class BookStore:
    """
    Async MongoDB store for book documents.
    Handles connection lifecycle, validation and CRUD operations.
    """

    def __init__(self, connection_url: str, database_name: str, collection_name: str):
        """
        Initialize the book store.

        Args:
            connection_url: MongoDB connection URL
            database_name: Database to use when the URL names none
            collection_name: Name of the collection
        """
        self.connection_url = connection_url
        self.database_name = database_name
        self.collection_name = collection_name
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self.collection: Optional[AsyncIOMotorCollection] = None

    async def connect(self) -> None:
        """Establish connection to MongoDB."""
        try:
            self.client = AsyncIOMotorClient(
                self.connection_url,
                event_listeners=[ConnectionStateLogger()]
            )
            self.database = self.client.get_default_database(default=self.database_name)
            self.collection = self.database[self.collection_name]

            # Test connection
            await self.client.admin.command('ping')
            logger.info("Successfully connected to MongoDB",
                        database=self.database.name,
                        collection=self.collection_name)

            await self.collection.create_index("genres")

        except ConnectionFailure as e:
            logger.error("Failed to connect to MongoDB", error=str(e))
            raise

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            self.client = None
            logger.info("Disconnected from MongoDB")

    async def create(self, fields: Dict[str, Any]) -> BookResponse:
        """
        Validate and insert a new book.

        Args:
            fields: Book fields keyed by wire name; null genres/isAvailable take their defaults

        Returns:
            The stored book with its generated identifier

        Raises:
            BookValidationError: if any field constraint fails
        """
        document: Dict[str, Any] = {}
        for field_name, value in fields.items():
            if value is None and field_name in FIELD_DEFAULTS:
                document[field_name] = copy.deepcopy(FIELD_DEFAULTS[field_name])
            elif value is not None:
                document[field_name] = value
        result = validate_book(document)
        if not result.ok:
            raise BookValidationError(result.errors)

        logger.info("Saving book", title=document["title"])
        inserted = await self.collection.insert_one(document)
        document["_id"] = inserted.inserted_id

        book = BookResponse.from_document(document)
        logger.info("Saved book", book_id=book.id, info=book.book_info())
        return book

    async def list_books(self) -> List[BookResponse]:
        """Return every book in natural (insertion) order."""
        cursor = self.collection.find({})
        documents = await cursor.to_list(length=None)
        return [BookResponse.from_document(document) for document in documents]

    async def get_by_id(self, book_id: str) -> BookResponse:
        """
        Get a single book by ID.

        Raises:
            BookNotFoundError: if the id is malformed or matches nothing
        """
        document = await self.collection.find_one({"_id": parse_book_id(book_id)})
        if document is None:
            raise BookNotFoundError(book_id)
        return BookResponse.from_document(document)

    async def update(self, book_id: str, changes: Dict[str, Any]) -> BookResponse:
        """
        Apply a partial update and return the post-update book.

        The stored document merged with ``changes`` is re-validated in full
        before anything is written. Last write wins.

        Args:
            book_id: Book identifier
            changes: Provided fields keyed by wire name; null clears a field

        Raises:
            BookNotFoundError: if the id is malformed or matches nothing
            BookValidationError: if the merged document is invalid
        """
        object_id = parse_book_id(book_id)
        existing = await self.collection.find_one({"_id": object_id})
        if existing is None:
            raise BookNotFoundError(book_id)

        set_fields: Dict[str, Any] = {}
        unset_fields: Dict[str, str] = {}
        for field_name, value in changes.items():
            if value is None and field_name in FIELD_DEFAULTS:
                set_fields[field_name] = copy.deepcopy(FIELD_DEFAULTS[field_name])
            elif value is None and field_name == "publishedYear":
                unset_fields[field_name] = ""
            else:
                set_fields[field_name] = value

        merged = {**existing, **set_fields}
        for field_name in unset_fields:
            merged.pop(field_name, None)

        result = validate_book(merged)
        if not result.ok:
            raise BookValidationError(result.errors)

        if not set_fields and not unset_fields:
            return BookResponse.from_document(existing)

        update_query: Dict[str, Any] = {}
        if set_fields:
            update_query["$set"] = set_fields
        if unset_fields:
            update_query["$unset"] = unset_fields

        logger.info("Saving book", book_id=book_id, title=merged.get("title"))
        document = await self.collection.find_one_and_update(
            {"_id": object_id},
            update_query,
            return_document=ReturnDocument.AFTER
        )
        if document is None:
            raise BookNotFoundError(book_id)

        book = BookResponse.from_document(document)
        logger.info("Saved book", book_id=book.id, info=book.book_info())
        return book

    async def delete(self, book_id: str) -> BookResponse:
        """
        Remove a book and return what was removed.

        Raises:
            BookNotFoundError: if the id is malformed or matches nothing
        """
        document = await self.collection.find_one_and_delete({"_id": parse_book_id(book_id)})
        if document is None:
            raise BookNotFoundError(book_id)

        logger.info("Deleted book", book_id=book_id, title=document.get("title"))
        return BookResponse.from_document(document)

    async def find_by_genre(self, genre: str) -> List[BookResponse]:
        """Return books whose genres contain ``genre`` exactly."""
        cursor = self.collection.find({"genres": genre})
        documents = await cursor.to_list(length=None)
        return [BookResponse.from_document(document) for document in documents]

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.database.command("ping")
            books_count = await self.collection.count_documents({})

            return {
                "status": "healthy",
                "books_count": books_count
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }
