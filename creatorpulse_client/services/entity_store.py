"""
In-memory entity store backing the simulated backend.

Collections are keyed by id and every row carries its owner reference.
Reads hand out copies, so callers can only change state through the
store's methods.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from creatorpulse_client.core.logging import get_logger
from creatorpulse_client.schemas import (
    Draft,
    Feedback,
    Source,
    SourceContent,
    StylePost,
    User,
)

logger = get_logger(__name__)

DEFAULT_PASSWORD = "password123"


class EntityStore:
    """Owner-scoped in-memory collections."""

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._passwords: Dict[str, str] = {}
        self._sources: Dict[str, Source] = {}
        self._style_posts: Dict[str, StylePost] = {}
        self._drafts: Dict[str, Draft] = {}
        self._feedback: Dict[str, Feedback] = {}
        self._source_content: Dict[str, SourceContent] = {}

    def clear(self) -> None:
        for collection in (
            self._users,
            self._passwords,
            self._sources,
            self._style_posts,
            self._drafts,
            self._feedback,
            self._source_content,
        ):
            collection.clear()

    # Users

    def add_user(self, user: User, password: Optional[str] = None) -> User:
        self._users[user.id] = user.model_copy()
        if password is not None:
            self._passwords[user.id] = password
        return user.model_copy()

    def get_user(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    def find_user_by_email(self, email: str) -> Optional[User]:
        email = email.strip().lower()
        for user in self._users.values():
            if user.email.lower() == email:
                return user.model_copy()
        return None

    def check_password(self, user_id: str, password: str) -> bool:
        return self._passwords.get(user_id, DEFAULT_PASSWORD) == password

    def update_user(self, user_id: str, **changes) -> Optional[User]:
        user = self._users.get(user_id)
        if user is None:
            return None
        updated = user.model_copy(update=changes)
        self._users[user_id] = updated
        return updated.model_copy()

    def upsert_user(self, user: User, password: Optional[str] = None) -> None:
        """Cache a user seen on the remote path."""
        self.add_user(user, password)

    # Sources

    def list_sources(self, user_id: str, active_only: bool = False) -> List[Source]:
        return [
            source.model_copy()
            for source in self._sources.values()
            if source.user_id == user_id and (source.active or not active_only)
        ]

    def get_source(self, source_id: str, user_id: str) -> Optional[Source]:
        source = self._sources.get(source_id)
        if source is None or source.user_id != user_id:
            return None
        return source.model_copy()

    def add_source(self, source: Source) -> Source:
        self._sources[source.id] = source.model_copy()
        return source.model_copy()

    def update_source(self, source_id: str, user_id: str, **changes) -> Optional[Source]:
        if self.get_source(source_id, user_id) is None:
            return None
        updated = self._sources[source_id].model_copy(update=changes)
        self._sources[source_id] = updated
        return updated.model_copy()

    def delete_source(self, source_id: str, user_id: str) -> bool:
        if self.get_source(source_id, user_id) is None:
            return False
        del self._sources[source_id]
        for content_id in [c.id for c in self._source_content.values() if c.source_id == source_id]:
            del self._source_content[content_id]
        return True

    def replace_sources(self, user_id: str, sources: Iterable[Source]) -> None:
        """Cache the full remote source list for an owner."""
        for source_id in [s.id for s in self._sources.values() if s.user_id == user_id]:
            del self._sources[source_id]
        for source in sources:
            self.add_source(source)

    # Style posts

    def list_style_posts(self, user_id: str) -> List[StylePost]:
        return [p.model_copy() for p in self._style_posts.values() if p.user_id == user_id]

    def add_style_posts(self, posts: Iterable[StylePost]) -> None:
        for post in posts:
            self._style_posts[post.id] = post.model_copy()

    def replace_style_posts(self, user_id: str, posts: Iterable[StylePost]) -> None:
        posts = list(posts)
        for post_id in [p.id for p in self._style_posts.values() if p.user_id == user_id]:
            del self._style_posts[post_id]
        self.add_style_posts(posts)

    def unprocessed_style_posts(self) -> Dict[str, List[StylePost]]:
        """Unprocessed samples grouped by owner, oldest first."""
        grouped: Dict[str, List[StylePost]] = {}
        for post in self._style_posts.values():
            if not post.processed:
                grouped.setdefault(post.user_id, []).append(post.model_copy())
        return grouped

    def mark_style_posts_processed(self, post_ids: Iterable[str], processed_at: datetime) -> int:
        count = 0
        for post_id in post_ids:
            post = self._style_posts.get(post_id)
            if post is None or post.processed:
                continue
            self._style_posts[post_id] = post.model_copy(
                update={"processed": True, "processed_at": processed_at}
            )
            count += 1
        return count

    def reset_style_posts(self, user_id: str) -> int:
        count = 0
        for post_id, post in list(self._style_posts.items()):
            if post.user_id == user_id:
                self._style_posts[post_id] = post.model_copy(
                    update={"processed": False, "processed_at": None}
                )
                count += 1
        return count

    # Drafts

    def list_drafts(self, user_id: str) -> List[Draft]:
        return [d.model_copy() for d in self._drafts.values() if d.user_id == user_id]

    def get_draft(self, draft_id: str, user_id: Optional[str] = None) -> Optional[Draft]:
        draft = self._drafts.get(draft_id)
        if draft is None or (user_id is not None and draft.user_id != user_id):
            return None
        return draft.model_copy()

    def find_draft_by_token(self, token: str) -> Optional[Draft]:
        for draft in self._drafts.values():
            if draft.feedback_token and draft.feedback_token == token:
                return draft.model_copy()
        return None

    def add_drafts(self, drafts: Iterable[Draft]) -> None:
        for draft in drafts:
            self._drafts[draft.id] = draft.model_copy()

    def update_draft(self, draft_id: str, **changes) -> Optional[Draft]:
        draft = self._drafts.get(draft_id)
        if draft is None:
            return None
        updated = draft.model_copy(update=changes)
        self._drafts[draft_id] = updated
        return updated.model_copy()

    def feedback_tokens(self) -> set:
        return {d.feedback_token for d in self._drafts.values() if d.feedback_token}

    # Feedback

    def add_feedback(self, feedback: Feedback) -> None:
        self._feedback[feedback.id] = feedback.model_copy()

    def list_feedback(self, user_id: str) -> List[Feedback]:
        draft_ids = {d.id for d in self._drafts.values() if d.user_id == user_id}
        return [f.model_copy() for f in self._feedback.values() if f.draft_id in draft_ids]

    def feedback_for_draft(self, draft_id: str) -> List[Feedback]:
        return [f.model_copy() for f in self._feedback.values() if f.draft_id == draft_id]

    # Source content

    def add_source_content(self, items: Iterable[SourceContent]) -> None:
        for item in items:
            self._source_content[item.id] = item.model_copy()

    def unprocessed_content(self, source_ids: Iterable[str]) -> List[SourceContent]:
        source_ids = set(source_ids)
        return [
            c.model_copy()
            for c in self._source_content.values()
            if c.source_id in source_ids and not c.processed
        ]

    def mark_content_processed(self, content_ids: Iterable[str]) -> None:
        for content_id in content_ids:
            item = self._source_content.get(content_id)
            if item is not None:
                self._source_content[content_id] = item.model_copy(update={"processed": True})

    # Development helpers

    def snapshot(self) -> Dict[str, list]:
        """Copy of every collection, for debugging and tests."""
        return {
            "users": [u.model_copy() for u in self._users.values()],
            "sources": [s.model_copy() for s in self._sources.values()],
            "style_posts": [p.model_copy() for p in self._style_posts.values()],
            "drafts": [d.model_copy() for d in self._drafts.values()],
            "feedback": [f.model_copy() for f in self._feedback.values()],
            "source_content": [c.model_copy() for c in self._source_content.values()],
        }
