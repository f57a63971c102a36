"""
Source content schemas.
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class SourceContent(BaseModel):
    """Content item fetched from a source."""
    id: str = Field(..., description="Content ID")
    source_id: str = Field(..., description="Source ID")
    title: Optional[str] = Field(None, description="Content title")
    content: str = Field(..., description="Content body")
    url: Optional[str] = Field(None, description="Content URL")
    published_at: Optional[datetime] = Field(None, description="Publication timestamp")
    processed: bool = Field(default=False, description="Whether content was used for drafts")
    created_at: datetime = Field(..., description="Fetch timestamp")
