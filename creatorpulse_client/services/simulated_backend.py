"""
Local simulation of the CreatorPulse API.

Serves every operation from the in-memory entity store with emulated
latency and failures, and absorbs successful remote results so the
simulation stays consistent with what the dashboard has already shown.
"""
import secrets
import uuid
from datetime import timedelta
from typing import Any, List, Optional

from creatorpulse_client.core.clock import Clock
from creatorpulse_client.core.exceptions import (
    AuthException,
    NotFoundException,
    ValidationException,
)
from creatorpulse_client.core.logging import get_logger
from creatorpulse_client.schemas import (
    AuthResponse,
    DashboardStats,
    Draft,
    Feedback,
    GenerateDraftsResponse,
    JobResponse,
    MessageResponse,
    PaginatedResponse,
    Source,
    SourceStatus,
    SourceUpdate,
    StylePost,
    StyleTrainingStatus,
    User,
    UserSettings,
    UserSettingsUpdate,
)
from creatorpulse_client.utils.validators import (
    count_words,
    normalize_twitter_handle,
    parse_delivery_time,
    validate_password,
    validate_rss_feed,
    validate_style_post_content,
    validate_timezone,
    validate_twitter_handle,
    validate_user_email,
)

from . import aggregator
from .backend import Backend
from .draft_generator import DraftGenerator
from .entity_store import EntityStore
from .network import NetworkEmulator
from .session import Session
from .style_training import StyleTrainingSimulator, new_job_id

logger = get_logger(__name__)

SOURCE_ERROR_THRESHOLD = 3
MIN_UPLOAD_POSTS = 10
MAX_UPLOAD_POSTS = 100
MIN_TRAINED_POSTS = 10
FEEDBACK_TYPES = ("positive", "negative")
VERIFICATION_TOKEN = "valid-verification-token"


class SimulatedBackend(Backend):
    """Backend implementation served from the entity store."""

    def __init__(
        self,
        store: EntityStore,
        network: NetworkEmulator,
        training: StyleTrainingSimulator,
        drafts: DraftGenerator,
        clock: Optional[Clock] = None,
        session_ttl: timedelta = timedelta(hours=24),
        recent_drafts_window: timedelta = timedelta(hours=6),
        recent_drafts_limit: int = 5,
    ):
        self.store = store
        self.network = network
        self.training = training
        self.drafts = drafts
        self.clock = clock or Clock()
        self.session_ttl = session_ttl
        self.recent_drafts_window = recent_drafts_window
        self.recent_drafts_limit = recent_drafts_limit

    def _issue_token(self, user: User) -> AuthResponse:
        token = f"sim-token-{user.id}-{secrets.token_hex(8)}"
        return AuthResponse(user=user, token=token, expires_at=self.clock.now() + self.session_ttl)

    def _current_user(self, session: Session) -> User:
        return self.store.get_user(session.user_id) or session.user

    # Authentication

    async def login(self, email: str, password: str) -> AuthResponse:
        await self.network.delay(800)
        self.network.check("login", 0.03, "Authentication service temporarily unavailable")

        if not email or not password:
            raise ValidationException("Email and password are required")

        user = self.store.find_user_by_email(email)
        if user is None or not self.store.check_password(user.id, password):
            # same timing for unknown users and wrong passwords
            await self.network.delay(200)
            raise AuthException("Invalid email or password")

        if not user.active:
            raise AuthException("Account is deactivated. Please contact support.")

        logger.info("Simulated login", user_id=user.id)
        return self._issue_token(user)

    async def register(self, email: str, password: str, timezone: str = "UTC") -> AuthResponse:
        await self.network.delay(1000)
        self.network.check("register", None, "Registration failed")

        if not email or not password:
            raise ValidationException("Email and password are required")
        if not validate_user_email(email):
            raise ValidationException("Invalid email address", details={"field": "email"})
        password_errors = validate_password(password)
        if password_errors:
            raise ValidationException(password_errors[0], details={"field": "password"})
        timezone = timezone or "UTC"
        if not validate_timezone(timezone):
            raise ValidationException("Invalid timezone", details={"field": "timezone"})

        if self.store.find_user_by_email(email) is not None:
            raise ValidationException("Email already registered")

        user = self.store.add_user(
            User(
                id=str(uuid.uuid4()),
                email=email.strip(),
                timezone=timezone,
                created_at=self.clock.now(),
            ),
            password,
        )
        logger.info("Simulated registration", user_id=user.id)
        return self._issue_token(user)

    async def logout(self, session: Optional[Session]) -> MessageResponse:
        await self.network.delay(200)
        return MessageResponse(message="Logged out successfully")

    async def reset_password(self, email: str) -> MessageResponse:
        await self.network.delay(600)
        self.network.check("reset_password", None, "Failed to send reset email")

        if self.store.find_user_by_email(email or "") is None:
            # Don't reveal if email exists
            return MessageResponse(message="If the email exists, a reset link has been sent")
        return MessageResponse(message="Password reset email sent successfully")

    async def verify_email(self, token: str, session: Optional[Session]) -> MessageResponse:
        await self.network.delay(400)
        if token != VERIFICATION_TOKEN:
            raise ValidationException("Invalid or expired verification token")
        if session is not None:
            self.store.update_user(session.user_id, email_verified=True)
        return MessageResponse(message="Email verified successfully")

    # Sources

    def _validate_source_address(self, source_type: str, url: str) -> str:
        if source_type == "twitter":
            result = validate_twitter_handle(url)
            if not result["valid"]:
                raise ValidationException(result["error"])
            return normalize_twitter_handle(url)
        if source_type == "rss":
            result = validate_rss_feed(url)
            if not result["valid"]:
                raise ValidationException(result["error"])
            return url
        raise ValidationException(f"Unknown source type: {source_type}")

    async def get_sources(self, session: Session) -> List[Source]:
        await self.network.delay(300)
        self.network.check("get_sources", None, "Failed to fetch sources")
        return self.store.list_sources(session.user_id)

    async def create_source(
        self, session: Session, source_type: str, url: str, name: Optional[str] = None
    ) -> Source:
        await self.network.delay(600)
        self.network.check("create_source", None, "Failed to create source")

        url = self._validate_source_address(source_type, (url or "").strip())
        now = self.clock.now()
        source = Source(
            id=str(uuid.uuid4()),
            user_id=session.user_id,
            type=source_type,
            url=url,
            name=name or url,
            active=True,
            last_checked=None,
            error_count=0,
            created_at=now,
            updated_at=now,
        )
        logger.info("Source created", user_id=session.user_id, source_id=source.id, type=source_type)
        return self.store.add_source(source)

    async def update_source(self, session: Session, source_id: str, changes: SourceUpdate) -> Source:
        await self.network.delay(400)

        source = self.store.get_source(source_id, session.user_id)
        if source is None:
            raise NotFoundException("Source not found")

        updates = changes.model_dump(exclude_none=True)
        if "url" in updates or "type" in updates:
            source_type = updates.get("type", source.type)
            updates["url"] = self._validate_source_address(source_type, updates.get("url", source.url))
        updates["updated_at"] = self.clock.now()

        return self.store.update_source(source_id, session.user_id, **updates)

    async def delete_source(self, session: Session, source_id: str) -> MessageResponse:
        await self.network.delay(300)
        if not self.store.delete_source(source_id, session.user_id):
            raise NotFoundException("Source not found")
        logger.info("Source deleted", user_id=session.user_id, source_id=source_id)
        return MessageResponse(message="Source deleted successfully")

    async def get_source_status(self, session: Session, source_id: str) -> SourceStatus:
        await self.network.delay(200)
        source = self.store.get_source(source_id, session.user_id)
        if source is None:
            raise NotFoundException("Source not found")

        if source.error_count > SOURCE_ERROR_THRESHOLD:
            return SourceStatus(status="error", last_error="Feed temporarily unavailable")
        return SourceStatus(status="active" if source.active else "inactive")

    # Style training

    def _new_style_post(self, user_id: str, content: str) -> StylePost:
        content = content.strip()
        return StylePost(
            id=str(uuid.uuid4()),
            user_id=user_id,
            content=content,
            processed=False,
            word_count=count_words(content),
            created_at=self.clock.now(),
        )

    async def add_style_post(self, session: Session, content: str) -> StylePost:
        await self.network.delay(500)

        validation = validate_style_post_content(content)
        if not validation["valid"]:
            raise ValidationException(validation["errors"][0], details={"errors": validation["errors"]})

        self.network.check("add_style_post", None, "Failed to add style post")

        post = self._new_style_post(session.user_id, content)
        self.store.add_style_posts([post])
        self.training.ensure_running()
        return post

    async def upload_style_posts(self, session: Session, posts: List[str]) -> JobResponse:
        await self.network.delay(1500)

        if not isinstance(posts, list):
            raise ValidationException("Posts array is required")
        if len(posts) < MIN_UPLOAD_POSTS:
            raise ValidationException("Minimum 10 posts required for effective style training")
        if len(posts) > MAX_UPLOAD_POSTS:
            raise ValidationException("Maximum 100 posts allowed per upload")

        invalid = [
            index for index, post in enumerate(posts)
            if not validate_style_post_content(post)["valid"]
        ]
        if invalid:
            raise ValidationException(
                "Each post must be between 50 and 3000 characters",
                details={"invalid_posts": invalid},
            )

        self.network.check("upload_style", 0.06, "Style processing service temporarily unavailable")

        # a new upload replaces the previous training set
        self.store.replace_style_posts(
            session.user_id, [self._new_style_post(session.user_id, post) for post in posts]
        )
        self.training.ensure_running()

        logger.info("Style posts uploaded", user_id=session.user_id, count=len(posts))
        return JobResponse(
            message=f"Style training started with {len(posts)} posts",
            job_id=new_job_id("style-job"),
        )

    async def get_training_status(
        self, session: Session, job_id: Optional[str] = None
    ) -> StyleTrainingStatus:
        await self.network.delay(200)
        # Training is tracked per user; job_id is accepted for wire compatibility
        return self.training.status(session.user_id)

    async def retrain_style(self, session: Session) -> JobResponse:
        await self.network.delay(800)
        job_id = self.training.retrain(session.user_id)
        return JobResponse(message="Style retraining started", job_id=job_id)

    # Drafts and feedback

    async def get_drafts(self, session: Session, page: int = 1, per_page: int = 10) -> PaginatedResponse:
        await self.network.delay(400)
        return aggregator.paginate_drafts(self.store, session.user_id, page, per_page)

    async def generate_drafts(self, session: Session, force: bool = False) -> GenerateDraftsResponse:
        await self.network.delay(2500)
        self.network.check("generate_drafts", 0.08, "Draft generation failed due to AI service timeout")

        user_id = session.user_id
        sources = self.store.list_sources(user_id, active_only=True)
        if not sources:
            raise ValidationException("No active sources found. Please add sources first.")

        trained = [p for p in self.store.list_style_posts(user_id) if p.processed]
        if len(trained) < MIN_TRAINED_POSTS:
            raise ValidationException("Insufficient style training. Please upload at least 10 sample posts.")

        now = self.clock.now()
        if not force:
            cutoff = now - self.recent_drafts_window
            recent = [d for d in self.store.list_drafts(user_id) if d.created_at > cutoff]
            if len(recent) >= self.recent_drafts_limit:
                raise ValidationException(
                    "You already have recent drafts. Use force=true to generate anyway.",
                    details={"recent_drafts": len(recent)},
                )

        content_items = self.store.unprocessed_content(s.id for s in sources)
        count = self.drafts.draft_count()
        new_drafts = self.drafts.generate(
            user_id=user_id,
            count=count,
            content_items=content_items,
            sources=sources,
            now=now,
            existing_tokens=self.store.feedback_tokens(),
        )
        self.store.add_drafts(new_drafts)
        self.store.mark_content_processed(item.id for item in content_items)

        logger.info("Drafts generated", user_id=user_id, count=count, content_items=len(content_items))
        return GenerateDraftsResponse(
            message=f"Generated {count} new drafts based on your recent sources",
            drafts_generated=count,
        )

    async def get_draft(self, session: Session, draft_id: str) -> Draft:
        await self.network.delay(200)
        draft = self.store.get_draft(draft_id, session.user_id)
        if draft is None:
            raise NotFoundException("Draft not found")
        return draft

    def _record_feedback(self, draft: Draft, feedback_type: str, feedback_source: str) -> None:
        now = self.clock.now()
        self.store.update_draft(
            draft.id,
            status="approved" if feedback_type == "positive" else "rejected",
            updated_at=now,
        )
        self.store.add_feedback(Feedback(
            id=str(uuid.uuid4()),
            draft_id=draft.id,
            feedback_type=feedback_type,
            feedback_source=feedback_source,
            created_at=now,
        ))
        logger.info("Feedback recorded", draft_id=draft.id, feedback_type=feedback_type, source=feedback_source)

    @staticmethod
    def _check_feedback_type(feedback_type: str) -> None:
        if feedback_type not in FEEDBACK_TYPES:
            raise ValidationException("Feedback type must be 'positive' or 'negative'")

    async def submit_draft_feedback(
        self, session: Session, draft_id: str, feedback_type: str
    ) -> MessageResponse:
        await self.network.delay(300)
        self._check_feedback_type(feedback_type)

        draft = self.store.get_draft(draft_id, session.user_id)
        if draft is None:
            raise NotFoundException("Draft not found")

        self._record_feedback(draft, feedback_type, "dashboard")
        return MessageResponse(message="Feedback recorded successfully")

    async def submit_feedback_by_token(self, token: str, feedback_type: str) -> MessageResponse:
        await self.network.delay(300)
        self._check_feedback_type(feedback_type)

        draft = self.store.find_draft_by_token(token)
        if draft is None:
            raise NotFoundException("Invalid feedback token")

        self._record_feedback(draft, feedback_type, "email")
        return MessageResponse(message="Feedback recorded successfully")

    # Settings and dashboard

    @staticmethod
    def _settings_for(user: User) -> UserSettings:
        return UserSettings(
            timezone=user.timezone,
            delivery_time=user.delivery_time,
            email_notifications=user.email_notifications,
        )

    async def get_user_settings(self, session: Session) -> UserSettings:
        await self.network.delay(200)
        return self._settings_for(self._current_user(session))

    async def update_user_settings(self, session: Session, changes: UserSettingsUpdate) -> UserSettings:
        await self.network.delay(400)

        updates = {}
        if changes.timezone is not None:
            if not validate_timezone(changes.timezone):
                raise ValidationException("Invalid timezone", details={"field": "timezone"})
            updates["timezone"] = changes.timezone
        if changes.delivery_time is not None:
            delivery_time = parse_delivery_time(changes.delivery_time)
            if delivery_time is None:
                raise ValidationException(
                    "Delivery time must be in HH:MM or HH:MM:SS format",
                    details={"field": "delivery_time"},
                )
            updates["delivery_time"] = delivery_time
        if changes.email_notifications is not None:
            updates["email_notifications"] = changes.email_notifications

        user = self._current_user(session)
        if updates:
            updates["updated_at"] = self.clock.now()
            user = self.store.update_user(user.id, **updates) or user.model_copy(update=updates)
        return self._settings_for(user)

    async def get_dashboard_stats(self, session: Session) -> DashboardStats:
        await self.network.delay(300)
        return aggregator.dashboard_stats(self.store, session.user_id, self.clock.now())

    # Remote result caching

    def absorb(self, operation: str, result: Any, *args, **kwargs) -> None:
        """Mirror a successful remote result into the entity store."""
        handler = getattr(self, f"_absorb_{operation}", None)
        if handler is not None:
            handler(result, *args, **kwargs)

    def _absorb_login(self, result: AuthResponse, email: str, password: str) -> None:
        self.store.upsert_user(result.user, password)

    def _absorb_register(self, result: AuthResponse, email: str, password: str, timezone: str = "UTC") -> None:
        self.store.upsert_user(result.user, password)

    def _absorb_verify_email(self, result: MessageResponse, token: str, session: Optional[Session]) -> None:
        if session is not None:
            self.store.update_user(session.user_id, email_verified=True)

    def _absorb_get_sources(self, result: List[Source], session: Session) -> None:
        self.store.replace_sources(session.user_id, result)

    def _absorb_create_source(self, result: Source, session: Session, *args, **kwargs) -> None:
        self.store.add_source(result)

    def _absorb_update_source(self, result: Source, session: Session, *args, **kwargs) -> None:
        self.store.add_source(result)

    def _absorb_delete_source(self, result: MessageResponse, session: Session, source_id: str) -> None:
        self.store.delete_source(source_id, session.user_id)

    def _absorb_add_style_post(self, result: StylePost, session: Session, content: str) -> None:
        self.store.add_style_posts([result])

    def _absorb_upload_style_posts(self, result: JobResponse, session: Session, posts: List[str]) -> None:
        self.store.replace_style_posts(
            session.user_id, [self._new_style_post(session.user_id, post) for post in posts]
        )
        self.training.ensure_running()

    def _absorb_retrain_style(self, result: JobResponse, session: Session) -> None:
        self.store.reset_style_posts(session.user_id)
        self.training.ensure_running()

    def _absorb_get_drafts(self, result: PaginatedResponse, session: Session, *args, **kwargs) -> None:
        self.store.add_drafts(result.data)

    def _absorb_get_draft(self, result: Draft, session: Session, draft_id: str) -> None:
        self.store.add_drafts([result])

    def _absorb_submit_draft_feedback(
        self, result: MessageResponse, session: Session, draft_id: str, feedback_type: str
    ) -> None:
        draft = self.store.get_draft(draft_id)
        if draft is not None:
            self._record_feedback(draft, feedback_type, "dashboard")

    def _absorb_submit_feedback_by_token(self, result: MessageResponse, token: str, feedback_type: str) -> None:
        draft = self.store.find_draft_by_token(token)
        if draft is not None:
            self._record_feedback(draft, feedback_type, "email")

    def _absorb_user_settings(self, result: UserSettings, session: Session) -> None:
        self.store.update_user(
            session.user_id,
            timezone=result.timezone,
            delivery_time=result.delivery_time,
            email_notifications=result.email_notifications,
        )

    def _absorb_get_user_settings(self, result: UserSettings, session: Session) -> None:
        self._absorb_user_settings(result, session)

    def _absorb_update_user_settings(self, result: UserSettings, session: Session, changes: UserSettingsUpdate) -> None:
        self._absorb_user_settings(result, session)
