"""
Source schemas that match frontend TypeScript interfaces.
"""
from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

SourceType = Literal["rss", "twitter"]


class SourceBase(BaseModel):
    """Base source schema."""
    type: SourceType = Field(..., description="Source type: RSS feed or Twitter handle")
    url: str = Field(..., description="Source URL or Twitter handle")
    name: Optional[str] = Field(None, description="Custom name for the source")
    active: bool = Field(default=True, description="Whether source is active")


class Source(SourceBase):
    """Source response schema."""
    id: str = Field(..., description="Source ID")
    user_id: str = Field(..., description="User ID who owns the source")
    last_checked: Optional[datetime] = Field(None, description="Last time source was checked")
    error_count: int = Field(default=0, ge=0, description="Number of consecutive errors")
    created_at: datetime = Field(..., description="Source creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")


class SourceUpdate(BaseModel):
    """Source update schema."""
    name: Optional[str] = Field(None, description="Custom name for the source")
    url: Optional[str] = Field(None, description="Source URL or Twitter handle")
    active: Optional[bool] = Field(None, description="Whether source is active")
    type: Optional[SourceType] = Field(None, description="Source type")


class SourceStatus(BaseModel):
    """Source health status schema."""
    status: Literal["active", "inactive", "error"] = Field(..., description="Source health")
    last_error: Optional[str] = Field(None, description="Error message when unhealthy")
