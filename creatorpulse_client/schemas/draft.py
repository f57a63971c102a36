"""
Draft schemas that match frontend TypeScript interfaces.
"""
from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

DraftStatus = Literal["pending", "approved", "rejected"]


class Draft(BaseModel):
    """Draft response schema."""
    id: str = Field(..., description="Draft ID")
    user_id: str = Field(..., description="User ID")
    content: str = Field(..., description="Draft content")
    status: DraftStatus = Field(default="pending", description="Draft status")
    source_content_id: Optional[str] = Field(None, description="Source content ID")
    source_name: Optional[str] = Field(None, description="Source name for display")
    feedback_token: Optional[str] = Field(None, description="Feedback token")
    email_sent_at: Optional[datetime] = Field(None, description="Email sent timestamp")
    character_count: Optional[int] = Field(None, description="Character count")
    engagement_score: Optional[float] = Field(None, ge=0.0, le=10.0, description="Engagement score (0.0-10.0)")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")


class GenerateDraftsResponse(BaseModel):
    """Generate drafts response schema."""
    message: str = Field(..., description="Response message")
    drafts_generated: int = Field(..., ge=0, description="Number of drafts generated")
