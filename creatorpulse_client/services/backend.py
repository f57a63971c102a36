"""
Backend interface shared by the remote API client and the simulated
backend, plus the remote-first fallback strategy that composes them.

Backends return schema objects on success and raise on failure:
CreatorPulseException for business errors, BackendUnavailable when the
remote API cannot be used at all.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

from creatorpulse_client.core.exceptions import BackendUnavailable
from creatorpulse_client.core.logging import get_logger
from creatorpulse_client.schemas import (
    AuthResponse,
    DashboardStats,
    Draft,
    GenerateDraftsResponse,
    JobResponse,
    MessageResponse,
    PaginatedResponse,
    Source,
    SourceStatus,
    SourceUpdate,
    StylePost,
    StyleTrainingStatus,
    UserSettings,
    UserSettingsUpdate,
)

from .session import Session

logger = get_logger(__name__)


class Backend(ABC):
    """Every operation the dashboard can perform against its API."""

    # Authentication

    @abstractmethod
    async def login(self, email: str, password: str) -> AuthResponse: ...

    @abstractmethod
    async def register(self, email: str, password: str, timezone: str = "UTC") -> AuthResponse: ...

    @abstractmethod
    async def logout(self, session: Optional[Session]) -> MessageResponse: ...

    @abstractmethod
    async def reset_password(self, email: str) -> MessageResponse: ...

    @abstractmethod
    async def verify_email(self, token: str, session: Optional[Session]) -> MessageResponse: ...

    # Sources

    @abstractmethod
    async def get_sources(self, session: Session) -> List[Source]: ...

    @abstractmethod
    async def create_source(
        self, session: Session, source_type: str, url: str, name: Optional[str] = None
    ) -> Source: ...

    @abstractmethod
    async def update_source(self, session: Session, source_id: str, changes: SourceUpdate) -> Source: ...

    @abstractmethod
    async def delete_source(self, session: Session, source_id: str) -> MessageResponse: ...

    @abstractmethod
    async def get_source_status(self, session: Session, source_id: str) -> SourceStatus: ...

    # Style training

    @abstractmethod
    async def add_style_post(self, session: Session, content: str) -> StylePost: ...

    @abstractmethod
    async def upload_style_posts(self, session: Session, posts: List[str]) -> JobResponse: ...

    @abstractmethod
    async def get_training_status(
        self, session: Session, job_id: Optional[str] = None
    ) -> StyleTrainingStatus: ...

    @abstractmethod
    async def retrain_style(self, session: Session) -> JobResponse: ...

    # Drafts and feedback

    @abstractmethod
    async def get_drafts(self, session: Session, page: int = 1, per_page: int = 10) -> PaginatedResponse: ...

    @abstractmethod
    async def generate_drafts(self, session: Session, force: bool = False) -> GenerateDraftsResponse: ...

    @abstractmethod
    async def get_draft(self, session: Session, draft_id: str) -> Draft: ...

    @abstractmethod
    async def submit_draft_feedback(
        self, session: Session, draft_id: str, feedback_type: str
    ) -> MessageResponse: ...

    @abstractmethod
    async def submit_feedback_by_token(self, token: str, feedback_type: str) -> MessageResponse: ...

    # Settings and dashboard

    @abstractmethod
    async def get_user_settings(self, session: Session) -> UserSettings: ...

    @abstractmethod
    async def update_user_settings(self, session: Session, changes: UserSettingsUpdate) -> UserSettings: ...

    @abstractmethod
    async def get_dashboard_stats(self, session: Session) -> DashboardStats: ...


class FallbackStrategy:
    """
    Remote first, simulated on transport failure.

    Business errors from the primary propagate unchanged; only
    BackendUnavailable sends the call to the fallback. The two attempts are
    strictly sequential.
    """

    def __init__(
        self,
        primary: Backend,
        fallback: Backend,
        on_primary_success: Optional[Callable[..., None]] = None,
    ):
        self.primary = primary
        self.fallback = fallback
        self.on_primary_success = on_primary_success
        self.last_path: Optional[str] = None

    async def execute(self, operation: str, *args, **kwargs) -> Any:
        try:
            result = await getattr(self.primary, operation)(*args, **kwargs)
        except BackendUnavailable as e:
            logger.warning(
                "Remote API unavailable, using simulated backend",
                operation=operation,
                reason=e.reason,
            )
            self.last_path = "simulated"
            return await getattr(self.fallback, operation)(*args, **kwargs)

        self.last_path = "remote"
        if self.on_primary_success is not None:
            try:
                self.on_primary_success(operation, result, *args, **kwargs)
            except Exception:
                # the remote result stands even if the local cache lags
                logger.exception("Failed to cache remote result", operation=operation)
        return result
