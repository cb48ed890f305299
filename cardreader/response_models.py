# cardreader/response_models.py
# Standardized response models for the FastAPI endpoints

from pydantic import BaseModel, Field
from typing import Any, Dict, Generic, List, Optional, TypeVar
from datetime import datetime, timezone

# Generic type for data payloads
DataT = TypeVar('DataT')

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class BaseResponse(BaseModel):
    """Base response model with standard success/error fields."""
    success: bool = True
    message: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)

class ErrorResponse(BaseResponse):
    """Standard error response model."""
    success: bool = False
    error: str
    error_code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

class DataResponse(BaseResponse, Generic[DataT]):
    """Generic response model with typed data payload."""
    success: bool = True
    data: DataT

class NotFoundResponse(ErrorResponse):
    """Standard 404 response."""
    error_code: str = "NOT_FOUND"

class UnsupportedMediaTypeResponse(ErrorResponse):
    """Standard 415 response."""
    error_code: str = "UNSUPPORTED_MEDIA_TYPE"

class InternalServerErrorResponse(ErrorResponse):
    """Standard 500 response."""
    error_code: str = "INTERNAL_SERVER_ERROR"

class HealthCheckResponse(BaseResponse):
    """Health check endpoint response."""
    status: str = "healthy"
    version: Optional[str] = None
    latency_ms: Optional[float] = None

class CharacterSummary(BaseModel):
    """Resolved view of an extracted character."""
    name: str
    description: str
    avatar: str
    metadata: Dict[str, Any]

class AcceptInfo(BaseModel):
    accept: str
    extensions: List[str]

def create_error_response(
    error: str,
    error_code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
) -> ErrorResponse:
    """Create a standardized error response."""
    return ErrorResponse(error=error, error_code=error_code, details=details)

def create_data_response(data: Any, message: Optional[str] = None) -> DataResponse:
    """Create a standardized data response."""
    return DataResponse(data=data, message=message)

# Standard responses for OpenAPI documentation
STANDARD_RESPONSES = {
    404: {"model": NotFoundResponse, "description": "Not Found"},
    413: {"model": ErrorResponse, "description": "Payload Too Large"},
    415: {"model": UnsupportedMediaTypeResponse, "description": "Unsupported Media Type"},
    422: {"model": ErrorResponse, "description": "Unprocessable Entity"},
    500: {"model": InternalServerErrorResponse, "description": "Internal Server Error"},
}
