"""
Base Schemas

Error body shared by every endpoint.
Matches AppError.to_dict() / error_payload() structure.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """
    Error information returned inside HTTPException.detail.

    Standard fields from AppError:
    - code: snake_case error kind (validation_error, conflict, ...)
    - message: user-facing message
    - details: optional structured context
    - trace_id: request trace ID when one was set
    """
    code: str = Field(..., description="Error kind")
    message: str = Field(..., description="User-facing error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Error context")
    trace_id: Optional[str] = Field(None, description="Request trace ID")

    model_config = ConfigDict(extra="allow")


class ErrorResponse(BaseModel):
    detail: ErrorDetail


# Reusable `responses=` mapping for routers
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    403: {"model": ErrorResponse, "description": "Actor may not perform this operation"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
    409: {"model": ErrorResponse, "description": "Conflict or invalid transition"},
    503: {"model": ErrorResponse, "description": "Data store unavailable"},
}
