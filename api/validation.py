"""
Field validation for book documents.

The same rules run on create and on update. Update validates the merged
document (stored fields overlaid with the requested changes), so a
partial update can never leave an invalid record behind.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

MIN_PUBLISHED_YEAR = 1900

REQUIRED_TEXT_FIELDS = ("title", "author")


class FieldError(BaseModel):
    """A single failed constraint."""
    field: str = Field(..., description="Wire name of the offending field")
    message: str = Field(..., description="Human-readable reason")


class ValidationResult(BaseModel):
    """Outcome of validating one book document."""
    errors: List[FieldError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def current_year() -> int:
    """Year used as the upper bound for publishedYear."""
    return date.today().year


def validate_book(document: Dict[str, Any], year: Optional[int] = None) -> ValidationResult:
    """
    Validate a complete book document keyed by wire field names.

    Args:
        document: Book fields (``title``, ``author``, ``publishedYear``,
            ``genres``, ``isAvailable``)
        year: Upper bound for ``publishedYear``; defaults to the current
            calendar year, evaluated on every call

    Returns:
        ValidationResult listing every failed constraint
    """
    errors: List[FieldError] = []

    for field_name in REQUIRED_TEXT_FIELDS:
        value = document.get(field_name)
        if not isinstance(value, str) or not value.strip():
            errors.append(FieldError(field=field_name, message=f"Path `{field_name}` is required."))

    published_year = document.get("publishedYear")
    if published_year is not None:
        if isinstance(published_year, bool) or not isinstance(published_year, int):
            errors.append(FieldError(
                field="publishedYear",
                message=f"Cast to Number failed for value \"{published_year}\""
            ))
        else:
            upper = year if year is not None else current_year()
            if published_year < MIN_PUBLISHED_YEAR:
                errors.append(FieldError(
                    field="publishedYear",
                    message=(
                        f"Path `publishedYear` ({published_year}) is less than "
                        f"minimum allowed value ({MIN_PUBLISHED_YEAR})."
                    )
                ))
            elif published_year > upper:
                errors.append(FieldError(
                    field="publishedYear",
                    message=f"{published_year} exceeds the current year ({upper})"
                ))

    genres = document.get("genres", [])
    if not isinstance(genres, list) or not all(isinstance(genre, str) for genre in genres):
        errors.append(FieldError(field="genres", message="genres must be a list of strings"))

    if not isinstance(document.get("isAvailable", True), bool):
        errors.append(FieldError(field="isAvailable", message="isAvailable must be a boolean"))

    return ValidationResult(errors=errors)
