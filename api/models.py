"""
API response models for the FastAPI application.
Book request and record schemas live in ``catalog.models``.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Confirmation message response model."""
    message: str = Field(..., description="Human-readable confirmation")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    status_code: int = Field(..., description="HTTP status code")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    storage_status: str = Field(..., description="Data file status")
    books_count: Optional[int] = Field(None, description="Number of stored books")
