"""
User schemas that match frontend TypeScript interfaces.
"""
from pydantic import BaseModel, Field, EmailStr
from typing import Optional
from datetime import datetime, time


class UserBase(BaseModel):
    """Base user schema."""
    email: EmailStr = Field(..., description="User email address")
    timezone: str = Field(default="UTC", description="User timezone (IANA format)")
    delivery_time: time = Field(default=time(8, 0, 0), description="Email delivery time")
    active: bool = Field(default=True, description="Whether user account is active")


class User(UserBase):
    """User response schema."""
    id: str = Field(..., description="User ID")
    email_verified: bool = Field(default=False, description="Whether email is verified")
    email_notifications: bool = Field(default=True, description="Whether to receive email notifications")
    created_at: datetime = Field(..., description="Account creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")


class UserSettings(BaseModel):
    """User settings schema."""
    timezone: str = Field(..., description="User timezone (IANA format)")
    delivery_time: time = Field(..., description="Email delivery time")
    email_notifications: bool = Field(default=True, description="Whether to receive email notifications")


class UserSettingsUpdate(BaseModel):
    """Partial settings update."""
    timezone: Optional[str] = None
    delivery_time: Optional[str] = None
    email_notifications: Optional[bool] = None
