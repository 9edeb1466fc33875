"""
API models and schemas for the FastAPI application.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BookCreate(BaseModel):
    """Request body for creating a book.

    Required-field and range checks are left to ``validate_book`` so that
    create and update report them identically.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    title: Optional[str] = Field(None, description="Book title")
    author: Optional[str] = Field(None, description="Book author")
    published_year: Optional[int] = Field(None, alias="publishedYear", description="Year of publication")
    genres: Optional[List[str]] = Field(default_factory=list, description="Genres, in order")
    is_available: Optional[bool] = Field(True, alias="isAvailable", description="Availability flag")

    def to_document(self) -> Dict[str, Any]:
        """Fields keyed by their stored (wire) names, defaults applied."""
        return self.model_dump(by_alias=True)


class BookUpdate(BaseModel):
    """Request body for a partial update. Only fields sent are applied."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    title: Optional[str] = Field(None, description="Book title")
    author: Optional[str] = Field(None, description="Book author")
    published_year: Optional[int] = Field(None, alias="publishedYear", description="Year of publication")
    genres: Optional[List[str]] = Field(None, description="Genres, in order")
    is_available: Optional[bool] = Field(None, alias="isAvailable", description="Availability flag")

    def to_changes(self) -> Dict[str, Any]:
        """Explicitly provided fields keyed by wire name, including nulls."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class BookResponse(BaseModel):
    """Book response model for API."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Unique book identifier")
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Book author")
    published_year: Optional[int] = Field(None, alias="publishedYear", description="Year of publication")
    genres: List[str] = Field(default_factory=list, description="Genres, in order")
    is_available: bool = Field(True, alias="isAvailable", description="Availability flag")

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "BookResponse":
        """Build a response from a raw MongoDB document."""
        data = {key: value for key, value in document.items() if key != "_id"}
        data["id"] = str(document["_id"])
        return cls(**data)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    def book_info(self) -> str:
        """One-line human-readable summary."""
        return f"The book '{self.title}' is written by {self.author}."


class MessageResponse(BaseModel):
    """Plain message body (not-found and delete confirmations)."""
    message: str


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Overall service status")
    timestamp: datetime = Field(..., description="Health check timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
