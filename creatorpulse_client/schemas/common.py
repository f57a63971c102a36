"""
Common Pydantic schemas that match frontend TypeScript interfaces.
"""
from typing import Generic, TypeVar, Optional, Any, Dict, List
from pydantic import BaseModel, Field


T = TypeVar('T')


class ApiError(BaseModel):
    """API error response schema."""
    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope returned by every public operation."""
    success: bool = Field(..., description="Whether the request was successful")
    data: Optional[T] = Field(None, description="Response data")
    error: Optional[ApiError] = Field(None, description="Error information")

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready envelope without the unused branch."""
        payload = self.model_dump(mode="json")
        if self.success:
            payload.pop("error", None)
        else:
            payload.pop("data", None)
            if payload["error"].get("details") is None:
                payload["error"].pop("details", None)
        return payload


class MessageResponse(BaseModel):
    """Simple message response."""
    message: str = Field(..., description="Response message")


class JobResponse(BaseModel):
    """Background job accepted response."""
    message: str = Field(..., description="Response message")
    job_id: str = Field(..., description="Job ID for tracking")


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated response schema."""
    data: List[T] = Field(..., description="List of items")
    total: int = Field(..., ge=0, description="Total number of items")
    page: int = Field(..., ge=1, description="Current page number")
    per_page: int = Field(..., ge=1, description="Items per page")
    total_pages: int = Field(..., ge=0, description="Total number of pages")


def success_response(data: Any) -> ApiResponse:
    return ApiResponse(success=True, data=data)


def error_response(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> ApiResponse:
    return ApiResponse(success=False, error=ApiError(code=code, message=message, details=details))
