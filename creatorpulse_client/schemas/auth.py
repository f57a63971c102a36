"""
Authentication schemas that match frontend TypeScript interfaces.
"""
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from .user import User


class AuthResponse(BaseModel):
    """Authentication response schema."""
    user: User = Field(..., description="User information")
    token: str = Field(..., min_length=1, description="Bearer access token")
    expires_at: datetime = Field(..., description="Token expiration timestamp")


class PersistedSession(BaseModel):
    """Session record mirrored into durable client storage."""
    model_config = ConfigDict(populate_by_name=True)

    user: User
    token: str
    expires_at: datetime = Field(..., alias="expiresAt")
