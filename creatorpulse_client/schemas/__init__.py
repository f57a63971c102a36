"""
Pydantic schemas package.
"""
from .auth import AuthResponse, PersistedSession
from .user import User, UserSettings, UserSettingsUpdate
from .source import Source, SourceUpdate, SourceStatus, SourceType
from .source_content import SourceContent
from .style import StylePost, StyleTrainingStatus
from .draft import Draft, GenerateDraftsResponse
from .feedback import Feedback, DashboardStats, ProcessingStatus
from .common import (
    ApiError,
    ApiResponse,
    JobResponse,
    MessageResponse,
    PaginatedResponse,
    error_response,
    success_response,
)

__all__ = [
    # Auth
    "AuthResponse",
    "PersistedSession",

    # User
    "User",
    "UserSettings",
    "UserSettingsUpdate",

    # Source
    "Source",
    "SourceUpdate",
    "SourceStatus",
    "SourceType",

    # Source Content
    "SourceContent",

    # Style
    "StylePost",
    "StyleTrainingStatus",

    # Draft
    "Draft",
    "GenerateDraftsResponse",

    # Feedback
    "Feedback",
    "DashboardStats",
    "ProcessingStatus",

    # Common
    "ApiError",
    "ApiResponse",
    "JobResponse",
    "MessageResponse",
    "PaginatedResponse",
    "error_response",
    "success_response",
]
