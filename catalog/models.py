"""
Pydantic models for book records.
Implements the stored Book record, the creation candidate and the partial-update patch.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.types import PositiveInt, StrictBool, StrictStr


class Book(BaseModel):
    """
    A stored book record.

    Records are frozen values: an update produces a new record rather than
    changing the one held by a snapshot. Field order matches the on-disk layout.
    """
    id: PositiveInt = Field(..., description="Unique book identifier")
    title: StrictStr = Field(..., min_length=1, description="Book title")
    author: StrictStr = Field(..., min_length=1, description="Book author")
    available: StrictBool = Field(..., description="Whether the book can be borrowed")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Dune",
                "author": "Frank Herbert",
                "available": True,
            }
        },
    )


class BookCreate(BaseModel):
    """
    Candidate for a new book. The identifier is assigned by the store,
    so an ``id`` key is rejected like any other unknown field.
    """
    title: StrictStr = Field(..., min_length=1, description="Book title")
    author: StrictStr = Field(..., min_length=1, description="Book author")
    available: StrictBool = Field(..., description="Whether the book can be borrowed")

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "title": "Dune",
                "author": "Frank Herbert",
                "available": True,
            }
        },
    )


class BookPatch(BaseModel):
    """
    Partial update for an existing book.

    Only fields present in the input are applied. The identifier cannot be
    patched, and an explicit null is rejected for every field.
    """
    title: Optional[StrictStr] = Field(None, min_length=1, description="New title")
    author: Optional[StrictStr] = Field(None, min_length=1, description="New author")
    available: Optional[StrictBool] = Field(None, description="New availability")

    model_config = ConfigDict(extra="forbid")

    @field_validator("title", "author", "available", mode="before")
    @classmethod
    def reject_null(cls, v):
        """A present field must carry a value."""
        if v is None:
            raise ValueError("field may not be null")
        return v

    def changes(self) -> dict:
        """Return only the fields the caller set."""
        return self.model_dump(exclude_unset=True)
