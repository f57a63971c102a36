"""
Pydantic schemas for feedback and dashboard statistics.
"""

from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field

FeedbackType = Literal["positive", "negative"]
FeedbackSource = Literal["dashboard", "email"]


class Feedback(BaseModel):
    """One feedback submission; drafts may collect several."""
    id: str
    draft_id: str
    feedback_type: FeedbackType
    feedback_source: FeedbackSource = "dashboard"
    created_at: datetime


class DashboardStats(BaseModel):
    """Dashboard statistics derived from the entity store."""
    total_drafts: int = Field(..., ge=0)
    drafts_this_week: int = Field(..., ge=0)
    positive_feedback: int = Field(..., ge=0)
    negative_feedback: int = Field(..., ge=0)
    feedback_rate: float = Field(..., ge=0.0, description="Feedback submissions per draft")
    active_sources: int = Field(..., ge=0)


class ProcessingStatus(BaseModel):
    """Background processing summary for the current user."""
    drafts_pending: int
    style_training_active: bool
    sources_with_errors: int
