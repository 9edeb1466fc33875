"""
Pytest configuration and shared fixtures.
"""

import copy
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from api.config import APIConfig
from api.database import BookStore
from api.main import create_app


class InMemoryCursor:
    """Minimal stand-in for a motor cursor."""

    def __init__(self, documents):
        self.documents = documents

    async def to_list(self, length=None):
        return self.documents if length is None else self.documents[:length]


class InMemoryCollection:
    """
    List-backed collection supporting the calls BookStore makes.
    Array fields match a scalar query value when any element equals it.
    """

    def __init__(self):
        self.documents = []

    @staticmethod
    def _matches(document, query):
        for key, expected in query.items():
            value = document.get(key)
            if isinstance(value, list) and not isinstance(expected, list):
                if expected not in value:
                    return False
            elif value != expected:
                return False
        return True

    def _find_index(self, query):
        for index, document in enumerate(self.documents):
            if self._matches(document, query):
                return index
        return None

    async def insert_one(self, document):
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    def find(self, query):
        return InMemoryCursor([copy.deepcopy(d) for d in self.documents if self._matches(d, query)])

    async def find_one(self, query):
        index = self._find_index(query)
        return None if index is None else copy.deepcopy(self.documents[index])

    async def find_one_and_update(self, query, update, return_document=None):
        index = self._find_index(query)
        if index is None:
            return None
        document = self.documents[index]
        document.update(copy.deepcopy(update.get("$set", {})))
        for key in update.get("$unset", {}):
            document.pop(key, None)
        return copy.deepcopy(document)

    async def find_one_and_delete(self, query):
        index = self._find_index(query)
        if index is None:
            return None
        return self.documents.pop(index)

    async def count_documents(self, query):
        return len([d for d in self.documents if self._matches(d, query)])

    async def create_index(self, *args, **kwargs):
        return "genres_1"


class InMemoryBookStore(BookStore):
    """BookStore whose connect() attaches an in-memory collection."""

    def __init__(self):
        super().__init__("mongodb://localhost:27017", "bookstore_test", "books")
        self.collection = InMemoryCollection()
        self.connected = False

    async def connect(self):
        self.connected = True

    async def disconnect(self):
        self.connected = False

    async def health_check(self):
        return {"status": "healthy", "books_count": await self.collection.count_documents({})}


@pytest.fixture
def api_config():
    """Configuration that never reads the environment's database settings."""
    return APIConfig(mongo_uri="mongodb://localhost:27017/bookstore_test", port=3000)


@pytest.fixture
def book_store():
    """Book store backed by an in-memory collection."""
    return InMemoryBookStore()


@pytest.fixture
def client(api_config, book_store):
    """Test client with the in-memory store injected; lifespan runs."""
    app = create_app(api_config, store=book_store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def mock_collection():
    """Mock motor collection; find() is synchronous like motor's."""
    collection = MagicMock()
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.find_one_and_delete = AsyncMock(return_value=None)
    collection.count_documents = AsyncMock(return_value=0)
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=[])
    collection.find.return_value = cursor
    return collection


@pytest.fixture
def mock_store(mock_collection):
    """BookStore wired to the mock collection without connecting."""
    store = BookStore("mongodb://localhost:27017", "bookstore_test", "books")
    store.collection = mock_collection
    return store


@pytest.fixture
def sample_book_data():
    """Create sample book fields keyed by wire name."""
    return {
        "title": "Dune",
        "author": "Frank Herbert",
        "publishedYear": 1965,
        "genres": ["Science Fiction", "Adventure"],
        "isAvailable": True,
    }


@pytest.fixture
def sample_book_document(sample_book_data):
    """Stored form of the sample book."""
    return {"_id": ObjectId("64b7f0c2a1b2c3d4e5f60718"), **sample_book_data}
