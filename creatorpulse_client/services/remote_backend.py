"""
HTTP client for the real CreatorPulse API.

Transport failures and responses that do not fit the wire contract raise
BackendUnavailable so the caller can fall back to simulation. Non-success
statuses are business errors and raise RemoteApiException.
"""
from typing import Any, Dict, List, Optional, Type

import httpx
from pydantic import TypeAdapter, ValidationError

from creatorpulse_client.core.exceptions import (
    ERROR_CODES,
    BackendUnavailable,
    RemoteApiException,
    error_code_for_status,
)
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

from .backend import Backend
from .session import Session

logger = get_logger(__name__)

_sources_adapter = TypeAdapter(List[Source])
_drafts_page_adapter = TypeAdapter(PaginatedResponse[Draft])


class RemoteBackend(Backend):
    """Backend implementation that calls the HTTP API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json", "User-Agent": "CreatorPulse-Dashboard/1.0"},
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        session: Optional[Session] = None,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the response payload."""
        headers = {}
        if session is not None:
            headers["Authorization"] = f"Bearer {session.token}"

        try:
            response = await self.client.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise BackendUnavailable(operation, f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise self._business_error(response)

        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None

        try:
            payload = response.json()
        except ValueError as e:
            raise BackendUnavailable(operation, "response body is not JSON") from e

        # Envelope responses: {"success": ..., "data": ...} or {"success": false, "error": ...}
        if isinstance(payload, dict) and "success" in payload and ("data" in payload or "error" in payload):
            if not payload["success"]:
                raise self._business_error(response, payload)
            return payload.get("data")
        return payload

    def _business_error(self, response: httpx.Response, body: Any = None) -> RemoteApiException:
        if body is None:
            try:
                body = response.json()
            except ValueError:
                body = None

        code = None
        message = None
        details = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict):
                code = error.get("code") or error.get("error")
                message = error.get("message")
                details = error.get("details") if isinstance(error.get("details"), dict) else None
            elif isinstance(body.get("detail"), str):
                message = body["detail"]
            elif body.get("detail") is not None:
                details = {"errors": body["detail"]}

        if code not in ERROR_CODES:
            code = error_code_for_status(response.status_code)
        if not message:
            message = response.reason_phrase or "Request failed"

        logger.info(
            "Remote API returned error",
            status_code=response.status_code,
            error_code=code,
            path=response.request.url.path,
        )
        return RemoteApiException(message, error_code=code, status_code=response.status_code, details=details)

    @staticmethod
    def _parse(operation: str, model: Type, data: Any) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise BackendUnavailable(operation, f"malformed response ({e.error_count()} errors)") from e

    @staticmethod
    def _parse_with(operation: str, adapter: TypeAdapter, data: Any) -> Any:
        try:
            return adapter.validate_python(data)
        except ValidationError as e:
            raise BackendUnavailable(operation, f"malformed response ({e.error_count()} errors)") from e

    # Authentication

    async def login(self, email: str, password: str) -> AuthResponse:
        data = await self._request("login", "POST", "/auth/login", json={"email": email, "password": password})
        return self._parse("login", AuthResponse, data)

    async def register(self, email: str, password: str, timezone: str = "UTC") -> AuthResponse:
        data = await self._request(
            "register", "POST", "/auth/register",
            json={"email": email, "password": password, "timezone": timezone},
        )
        return self._parse("register", AuthResponse, data)

    async def logout(self, session: Optional[Session]) -> MessageResponse:
        data = await self._request("logout", "POST", "/auth/logout", session=session)
        if data is None:
            return MessageResponse(message="Logged out successfully")
        return self._parse("logout", MessageResponse, data)

    async def reset_password(self, email: str) -> MessageResponse:
        data = await self._request("reset_password", "POST", "/auth/reset-password", json={"email": email})
        return self._parse("reset_password", MessageResponse, data)

    async def verify_email(self, token: str, session: Optional[Session]) -> MessageResponse:
        data = await self._request(
            "verify_email", "GET", "/auth/verify-email", session=session, params={"token": token}
        )
        return self._parse("verify_email", MessageResponse, data)

    # Sources

    async def get_sources(self, session: Session) -> List[Source]:
        data = await self._request("get_sources", "GET", "/sources", session=session)
        return self._parse_with("get_sources", _sources_adapter, data)

    async def create_source(
        self, session: Session, source_type: str, url: str, name: Optional[str] = None
    ) -> Source:
        body = {"type": source_type, "url": url}
        if name is not None:
            body["name"] = name
        data = await self._request("create_source", "POST", "/sources", session=session, json=body)
        return self._parse("create_source", Source, data)

    async def update_source(self, session: Session, source_id: str, changes: SourceUpdate) -> Source:
        data = await self._request(
            "update_source", "PUT", f"/sources/{source_id}",
            session=session, json=changes.model_dump(exclude_none=True),
        )
        return self._parse("update_source", Source, data)

    async def delete_source(self, session: Session, source_id: str) -> MessageResponse:
        data = await self._request("delete_source", "DELETE", f"/sources/{source_id}", session=session)
        if data is None:
            return MessageResponse(message="Source deleted successfully")
        return self._parse("delete_source", MessageResponse, data)

    async def get_source_status(self, session: Session, source_id: str) -> SourceStatus:
        data = await self._request("get_source_status", "GET", f"/sources/{source_id}/status", session=session)
        return self._parse("get_source_status", SourceStatus, data)

    # Style training

    async def add_style_post(self, session: Session, content: str) -> StylePost:
        data = await self._request(
            "add_style_post", "POST", "/style/posts/add", session=session, json={"content": content}
        )
        return self._parse("add_style_post", StylePost, data)

    async def upload_style_posts(self, session: Session, posts: List[str]) -> JobResponse:
        data = await self._request(
            "upload_style_posts", "POST", "/style/upload", session=session, json={"posts": posts}
        )
        return self._parse("upload_style_posts", JobResponse, data)

    async def get_training_status(
        self, session: Session, job_id: Optional[str] = None
    ) -> StyleTrainingStatus:
        params = {"job_id": job_id} if job_id else None
        data = await self._request("get_training_status", "GET", "/style/status", session=session, params=params)
        return self._parse("get_training_status", StyleTrainingStatus, data)

    async def retrain_style(self, session: Session) -> JobResponse:
        data = await self._request("retrain_style", "POST", "/style/retrain", session=session)
        return self._parse("retrain_style", JobResponse, data)

    # Drafts and feedback

    async def get_drafts(self, session: Session, page: int = 1, per_page: int = 10) -> PaginatedResponse:
        data = await self._request(
            "get_drafts", "GET", "/drafts", session=session, params={"page": page, "per_page": per_page}
        )
        return self._parse_with("get_drafts", _drafts_page_adapter, data)

    async def generate_drafts(self, session: Session, force: bool = False) -> GenerateDraftsResponse:
        data = await self._request(
            "generate_drafts", "POST", "/drafts/generate", session=session, json={"force": force}
        )
        return self._parse("generate_drafts", GenerateDraftsResponse, data)

    async def get_draft(self, session: Session, draft_id: str) -> Draft:
        data = await self._request("get_draft", "GET", f"/drafts/{draft_id}", session=session)
        return self._parse("get_draft", Draft, data)

    async def submit_draft_feedback(
        self, session: Session, draft_id: str, feedback_type: str
    ) -> MessageResponse:
        data = await self._request(
            "submit_draft_feedback", "PUT", f"/drafts/{draft_id}/feedback",
            session=session, json={"feedback_type": feedback_type},
        )
        return self._parse("submit_draft_feedback", MessageResponse, data)

    async def submit_feedback_by_token(self, token: str, feedback_type: str) -> MessageResponse:
        data = await self._request(
            "submit_feedback_by_token", "POST", f"/feedback/{token}/{feedback_type}"
        )
        return self._parse("submit_feedback_by_token", MessageResponse, data)

    # Settings and dashboard

    async def get_user_settings(self, session: Session) -> UserSettings:
        data = await self._request("get_user_settings", "GET", "/user/settings", session=session)
        return self._parse("get_user_settings", UserSettings, data)

    async def update_user_settings(self, session: Session, changes: UserSettingsUpdate) -> UserSettings:
        data = await self._request(
            "update_user_settings", "PUT", "/user/settings",
            session=session, json=changes.model_dump(exclude_none=True),
        )
        return self._parse("update_user_settings", UserSettings, data)

    async def get_dashboard_stats(self, session: Session) -> DashboardStats:
        data = await self._request("get_dashboard_stats", "GET", "/dashboard/stats", session=session)
        return self._parse("get_dashboard_stats", DashboardStats, data)
