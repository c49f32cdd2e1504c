from pydantic import BaseModel, Field
from typing import Generic, TypeVar, Optional, Any, Dict

DataType = TypeVar("DataType")

class APIResponse(BaseModel, Generic[DataType]):
    """Envelope for every successful response."""
    message: str = Field(..., description="A human-readable message about the response.")
    data: Optional[DataType] = Field(None, description="The payload, if any.")

class ErrorDetail(BaseModel):
    code: str = Field(
        ...,
        description="NOT_FOUND, UNAUTHORIZED, FORBIDDEN, CONFLICT, VALIDATION_ERROR, "
                    "PERSISTENCE_ERROR or INTERNAL_SERVER_ERROR",
    )
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Validation errors or the failing error type")

class ErrorResponse(BaseModel):
    """Envelope for every error response, rendered by app.middleware.exceptions."""
    error: ErrorDetail
    timestamp: str = Field(..., description="ISO 8601 UTC timestamp of the error")
    path: str = Field(..., description="Request URL that caused the error")
    request_id: Optional[str] = Field(None, description="Matches the X-Request-ID response header")
