"""
Style training schemas that match frontend TypeScript interfaces.
"""
from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

TrainingState = Literal["pending", "processing", "completed", "failed"]


class StylePost(BaseModel):
    """Style post schema."""
    id: str = Field(..., description="Post ID")
    user_id: str = Field(..., description="User ID")
    content: str = Field(..., min_length=50, max_length=3000, description="Post content")
    processed: bool = Field(default=False, description="Whether post has been processed")
    word_count: Optional[int] = Field(None, description="Number of words in content")
    created_at: datetime = Field(..., description="Creation timestamp")
    processed_at: Optional[datetime] = Field(None, description="Processing completion timestamp")


class StyleTrainingStatus(BaseModel):
    """Style training status schema."""
    status: TrainingState = Field(..., description="Training status")
    progress: int = Field(..., ge=0, le=100, description="Progress percentage (0-100)")
    total_posts: int = Field(..., ge=0, description="Total number of posts")
    processed_posts: int = Field(..., ge=0, description="Number of processed posts")
    message: Optional[str] = Field(None, description="Status message")
