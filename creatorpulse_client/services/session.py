"""
Session management: the current identity, its bearer token and expiry.

The session lives in memory and is mirrored into a storage port so it
survives a restart of the client. Persisted state is read lazily on the
first authenticated check.
"""
import json
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from creatorpulse_client.core.clock import Clock
from creatorpulse_client.core.exceptions import AuthenticationException
from creatorpulse_client.core.logging import get_logger
from creatorpulse_client.schemas import PersistedSession, User

logger = get_logger(__name__)

STORAGE_KEY = "creatorpulse_auth"
DEFAULT_SESSION_TTL = timedelta(hours=24)


class SessionStorage(ABC):
    """Durable client storage for a single session record."""

    @abstractmethod
    def get(self) -> Optional[Dict[str, Any]]: ...

    @abstractmethod
    def set(self, record: Dict[str, Any]) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...


class MemorySessionStorage(SessionStorage):
    def __init__(self):
        self._items: Dict[str, str] = {}

    def get(self) -> Optional[Dict[str, Any]]:
        raw = self._items.get(STORAGE_KEY)
        return json.loads(raw) if raw is not None else None

    def set(self, record: Dict[str, Any]) -> None:
        self._items[STORAGE_KEY] = json.dumps(record)

    def clear(self) -> None:
        self._items.pop(STORAGE_KEY, None)


class FileSessionStorage(SessionStorage):
    """Session record kept as a JSON document on disk."""

    def __init__(self, path: str):
        self.path = Path(path)

    def get(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        with self.path.open("r", encoding="utf-8") as f:
            document = json.load(f)
        if not isinstance(document, dict):
            raise ValueError("session file does not hold a JSON object")
        return document.get(STORAGE_KEY)

    def set(self, record: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump({STORAGE_KEY: record}, f)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class Session:
    """Authenticated context for protected operations."""

    def __init__(self, user: User, token: str, expires_at: datetime):
        self.user = user
        self.token = token
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        self.expires_at = expires_at

    @property
    def user_id(self) -> str:
        return self.user.id

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class SessionManager:
    """Tracks, persists and expires the current session."""

    def __init__(
        self,
        storage: Optional[SessionStorage] = None,
        clock: Optional[Clock] = None,
        ttl: timedelta = DEFAULT_SESSION_TTL,
    ):
        self.storage = storage or MemorySessionStorage()
        self.clock = clock or Clock()
        self.ttl = ttl
        self._session: Optional[Session] = None
        self._restored = False

    def default_expiry(self) -> datetime:
        return self.clock.now() + self.ttl

    def establish(self, user: User, token: str, expires_at: Optional[datetime] = None) -> Session:
        """Set the current session and persist it."""
        session = Session(user, token, expires_at or self.default_expiry())
        self._session = session
        self._restored = True
        try:
            record = PersistedSession(user=user, token=token, expires_at=session.expires_at)
            self.storage.set(record.model_dump(mode="json", by_alias=True))
        except OSError as e:
            logger.error("Error storing session", error=str(e))
        logger.info("Session established", user_id=user.id, expires_at=session.expires_at.isoformat())
        return session

    def restore(self) -> Optional[Session]:
        """Rehydrate the persisted session, discarding expired or unreadable records."""
        try:
            record = self.storage.get()
        except (OSError, ValueError) as e:
            logger.error("Error reading persisted session", error=str(e))
            self._discard_persisted()
            return None
        if record is None:
            return None

        try:
            persisted = PersistedSession.model_validate(record)
        except ValidationError as e:
            logger.warning("Discarding malformed persisted session", errors=e.error_count())
            self._discard_persisted()
            return None

        session = Session(persisted.user, persisted.token, persisted.expires_at)
        if session.is_expired(self.clock.now()):
            logger.info("Persisted session expired", user_id=session.user_id)
            self._discard_persisted()
            return None

        self._session = session
        return session

    def current(self) -> Optional[Session]:
        """Valid session or None; expired sessions are silently logged out."""
        if self._session is None and not self._restored:
            self._restored = True
            self.restore()
        if self._session is not None and self._session.is_expired(self.clock.now()):
            logger.info("Session expired", user_id=self._session.user_id)
            self.clear()
        return self._session

    def require(self) -> Session:
        session = self.current()
        if session is None:
            raise AuthenticationException("Authentication required")
        return session

    def update_user(self, user: User) -> None:
        """Refresh the identity held by the current session."""
        if self._session is None:
            return
        self.establish(user, self._session.token, self._session.expires_at)

    def clear(self) -> None:
        """Logout: drop memory and storage state. Safe to repeat."""
        self._session = None
        self._restored = True
        self._discard_persisted()

    def _discard_persisted(self) -> None:
        try:
            self.storage.clear()
        except OSError as e:
            logger.error("Error clearing persisted session", error=str(e))
