"""
Dashboard-facing API service.

Every public operation returns an ApiResponse envelope and never raises.
Calls go to the remote API first; when it is unreachable or answers
nonsense, the simulated backend serves the same operation locally.
"""
import random
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional

from creatorpulse_client.core.clock import Clock
from creatorpulse_client.core.config import Settings, get_settings
from creatorpulse_client.core.exceptions import (
    CreatorPulseException,
    ValidationException,
    exception_to_response,
    unexpected_exception_response,
)
from creatorpulse_client.core.logging import get_logger
from creatorpulse_client.schemas import (
    ApiResponse,
    AuthResponse,
    MessageResponse,
    ProcessingStatus,
    SourceUpdate,
    User,
    UserSettings,
    UserSettingsUpdate,
    success_response,
)

from . import aggregator
from .backend import Backend, FallbackStrategy
from .draft_generator import DraftGenerator
from .entity_store import EntityStore
from .network import NetworkEmulator, RandomFaultInjector, ScriptedFaultInjector, Sleep
from .remote_backend import RemoteBackend
from .seed_data import seed_demo_data
from .session import FileSessionStorage, MemorySessionStorage, SessionManager, SessionStorage
from .simulated_backend import SimulatedBackend
from .style_training import StyleTrainingSimulator

logger = get_logger(__name__)


class ApiService:
    """Single entry point for the dashboard's backend operations."""

    def __init__(
        self,
        simulated: SimulatedBackend,
        sessions: SessionManager,
        remote: Optional[Backend] = None,
        seed: Optional[Callable[[EntityStore], None]] = None,
    ):
        self.simulated = simulated
        self.sessions = sessions
        self.remote = remote
        self.store = simulated.store
        self.training = simulated.training
        self._seed = seed
        self.strategy = (
            FallbackStrategy(remote, simulated, on_primary_success=simulated.absorb)
            if remote is not None
            else None
        )

    async def _execute(self, operation: str, *args) -> Any:
        if self.strategy is None:
            return await getattr(self.simulated, operation)(*args)
        return await self.strategy.execute(operation, *args)

    async def _run(
        self,
        operation: str,
        *args,
        protected: bool = False,
        after: Optional[Callable[[Any], None]] = None,
    ) -> ApiResponse:
        """Run an operation and wrap its outcome in the response envelope."""
        try:
            if protected:
                args = (self.sessions.require(),) + args
            result = await self._execute(operation, *args)
            if after is not None:
                after(result)
        except CreatorPulseException as e:
            return exception_to_response(e)
        except Exception as e:
            return unexpected_exception_response(e, operation)
        return success_response(result)

    def _start_session(self, result: AuthResponse) -> None:
        self.sessions.establish(result.user, result.token, result.expires_at)

    # ==================== AUTHENTICATION ====================

    async def login(self, email: str, password: str) -> ApiResponse:
        """POST /auth/login"""
        return await self._run("login", email, password, after=self._start_session)

    async def register(self, email: str, password: str, timezone: str = "UTC") -> ApiResponse:
        """POST /auth/register"""
        return await self._run("register", email, password, timezone, after=self._start_session)

    async def logout(self) -> ApiResponse:
        """
        POST /auth/logout

        Local state is cleared whatever the backend answers.
        """
        session = self.sessions.current()
        try:
            await self._execute("logout", session)
        except CreatorPulseException as e:
            logger.info("Remote logout failed", error_code=e.error_code)
        except Exception:
            logger.exception("Unexpected error during logout")
        finally:
            self.sessions.clear()
        return success_response(MessageResponse(message="Logged out successfully"))

    async def reset_password(self, email: str) -> ApiResponse:
        """POST /auth/reset-password"""
        return await self._run("reset_password", email)

    async def verify_email(self, token: str) -> ApiResponse:
        """GET /auth/verify-email"""
        session = self.sessions.current()

        def mark_verified(_result: MessageResponse) -> None:
            if session is not None:
                self.sessions.update_user(session.user.model_copy(update={"email_verified": True}))

        return await self._run("verify_email", token, session, after=mark_verified)

    # ==================== SOURCES ====================

    async def get_sources(self) -> ApiResponse:
        """GET /sources"""
        return await self._run("get_sources", protected=True)

    async def create_source(self, source_type: str, url: str, name: Optional[str] = None) -> ApiResponse:
        """POST /sources"""
        return await self._run("create_source", source_type, url, name, protected=True)

    async def update_source(self, source_id: str, **changes) -> ApiResponse:
        """PUT /sources/{id}"""
        try:
            update = SourceUpdate(**changes)
        except (TypeError, ValueError) as e:
            return exception_to_response(_invalid_input(e))
        return await self._run("update_source", source_id, update, protected=True)

    async def delete_source(self, source_id: str) -> ApiResponse:
        """DELETE /sources/{id}"""
        return await self._run("delete_source", source_id, protected=True)

    async def get_source_status(self, source_id: str) -> ApiResponse:
        """GET /sources/{id}/status"""
        return await self._run("get_source_status", source_id, protected=True)

    # ==================== STYLE TRAINING ====================

    async def add_style_post(self, content: str) -> ApiResponse:
        """POST /style/posts/add"""
        return await self._run("add_style_post", content, protected=True)

    async def upload_style_posts(self, posts: List[str]) -> ApiResponse:
        """POST /style/upload"""
        return await self._run("upload_style_posts", posts, protected=True)

    async def get_training_status(self, job_id: Optional[str] = None) -> ApiResponse:
        """GET /style/status"""
        return await self._run("get_training_status", job_id, protected=True)

    async def retrain_style(self) -> ApiResponse:
        """POST /style/retrain"""
        return await self._run("retrain_style", protected=True)

    # ==================== DRAFTS ====================

    async def get_drafts(self, page: int = 1, per_page: int = 10) -> ApiResponse:
        """GET /drafts"""
        return await self._run("get_drafts", page, per_page, protected=True)

    async def generate_drafts(self, force: bool = False) -> ApiResponse:
        """POST /drafts/generate"""
        return await self._run("generate_drafts", force, protected=True)

    async def get_draft(self, draft_id: str) -> ApiResponse:
        """GET /drafts/{id}"""
        return await self._run("get_draft", draft_id, protected=True)

    async def submit_draft_feedback(self, draft_id: str, feedback_type: str) -> ApiResponse:
        """PUT /drafts/{id}/feedback"""
        return await self._run("submit_draft_feedback", draft_id, feedback_type, protected=True)

    async def submit_feedback_by_token(self, token: str, feedback_type: str) -> ApiResponse:
        """POST /feedback/{token}/{type}, no session needed"""
        return await self._run("submit_feedback_by_token", token, feedback_type)

    # ==================== SETTINGS AND DASHBOARD ====================

    async def get_user_settings(self) -> ApiResponse:
        """GET /user/settings"""
        return await self._run("get_user_settings", protected=True)

    async def update_user_settings(self, **changes) -> ApiResponse:
        """PUT /user/settings"""
        try:
            update = UserSettingsUpdate(**changes)
        except (TypeError, ValueError) as e:
            return exception_to_response(_invalid_input(e))

        def refresh_session_user(settings: UserSettings) -> None:
            session = self.sessions.current()
            if session is not None:
                self.sessions.update_user(session.user.model_copy(update=settings.model_dump()))

        return await self._run("update_user_settings", update, protected=True, after=refresh_session_user)

    async def get_dashboard_stats(self) -> ApiResponse:
        """GET /dashboard/stats"""
        return await self._run("get_dashboard_stats", protected=True)

    # ==================== LOCAL HELPERS ====================

    def get_current_user(self) -> Optional[User]:
        session = self.sessions.current()
        return session.user if session else None

    def is_authenticated(self) -> bool:
        return self.sessions.current() is not None

    def set_auth_state(self, user: User, token: str) -> None:
        """Install a session directly, bypassing login."""
        self.sessions.establish(user, token)

    def get_processing_status(self) -> Optional[ProcessingStatus]:
        session = self.sessions.current()
        if session is None:
            return None
        return aggregator.processing_status(self.store, session.user_id)

    def snapshot(self) -> Dict[str, list]:
        return self.store.snapshot()

    async def reset_data(self) -> None:
        """Restore the initial dataset and log out."""
        await self.training.stop()
        self.store.clear()
        if self._seed is not None:
            self._seed(self.store)
        self.sessions.clear()

    async def aclose(self) -> None:
        await self.training.stop()
        if isinstance(self.remote, RemoteBackend):
            await self.remote.aclose()


def _invalid_input(error: Exception) -> CreatorPulseException:
    return ValidationException("Invalid input data", details={"error": str(error)})


def create_api_service(
    settings: Optional[Settings] = None,
    clock: Optional[Clock] = None,
    storage: Optional[SessionStorage] = None,
    remote: Optional[Backend] = None,
    fault_injector=None,
    sleep: Optional[Sleep] = None,
    rng: Optional[random.Random] = None,
) -> ApiService:
    """
    Wire up an ApiService.

    Args:
        settings: Configuration; read from the environment when omitted
        clock: Time source for timestamps, expiry and training ticks
        storage: Session persistence port
        remote: Remote backend override; built from settings when omitted
        fault_injector: Failure roll source for the simulated backend
        sleep: Async sleep used for simulated latency
        rng: Random source for simulated content, batches and jitter

    Returns:
        A ready ApiService
    """
    settings = settings or get_settings()
    clock = clock or Clock()
    rng = rng or random.Random(settings.simulation_seed)

    if fault_injector is None:
        if settings.simulated_failure_rate <= 0:
            fault_injector = ScriptedFaultInjector()
        else:
            fault_injector = RandomFaultInjector(settings.simulation_seed)

    if storage is None:
        storage = (
            FileSessionStorage(settings.session_storage_path)
            if settings.session_storage_path
            else MemorySessionStorage()
        )

    store = EntityStore()

    def seed(target: EntityStore) -> None:
        seed_demo_data(target, clock.now())

    if settings.seed_demo_data:
        seed(store)

    network = NetworkEmulator(
        fault_injector=fault_injector,
        sleep=sleep,
        jitter=rng,
        failure_rate=settings.simulated_failure_rate,
        latency_enabled=settings.simulate_latency,
    )
    training = StyleTrainingSimulator(
        store,
        clock=clock,
        rng=rng,
        start_delay=settings.training_start_delay_seconds,
        tick_interval=settings.training_tick_seconds,
    )
    simulated = SimulatedBackend(
        store,
        network,
        training,
        DraftGenerator(rng),
        clock=clock,
        session_ttl=timedelta(hours=settings.session_ttl_hours),
        recent_drafts_window=timedelta(hours=settings.recent_drafts_window_hours),
        recent_drafts_limit=settings.recent_drafts_limit,
    )

    if remote is None and settings.remote_enabled:
        remote = RemoteBackend(settings.api_base_url, timeout=settings.request_timeout_seconds)

    sessions = SessionManager(storage, clock=clock, ttl=timedelta(hours=settings.session_ttl_hours))

    logger.info(
        "API service created",
        api_base_url=settings.api_base_url if remote is not None else None,
        seeded=settings.seed_demo_data,
    )
    return ApiService(simulated, sessions, remote=remote, seed=seed if settings.seed_demo_data else None)
