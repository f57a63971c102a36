"""
Derived views over the entity store: pagination and dashboard statistics.

Nothing here is cached; every call recomputes from the store.
"""
import math
from datetime import datetime, timedelta
from typing import List, Sequence, TypeVar

from creatorpulse_client.core.exceptions import ValidationException
from creatorpulse_client.schemas import (
    DashboardStats,
    Draft,
    PaginatedResponse,
    ProcessingStatus,
)

from .entity_store import EntityStore

T = TypeVar("T")

STATS_WINDOW = timedelta(days=7)


def paginate(items: Sequence[T], page: int, per_page: int) -> PaginatedResponse:
    """
    Slice one page out of `items`.

    Pages past the end come back empty rather than raising.
    """
    if page < 1:
        raise ValidationException("Page must be 1 or greater", details={"page": page})
    if per_page < 1:
        raise ValidationException("per_page must be 1 or greater", details={"per_page": per_page})

    total = len(items)
    start = (page - 1) * per_page
    return PaginatedResponse(
        data=list(items[start:start + per_page]),
        total=total,
        page=page,
        per_page=per_page,
        total_pages=math.ceil(total / per_page),
    )


def drafts_newest_first(store: EntityStore, user_id: str) -> List[Draft]:
    return sorted(store.list_drafts(user_id), key=lambda d: d.created_at, reverse=True)


def paginate_drafts(store: EntityStore, user_id: str, page: int, per_page: int) -> PaginatedResponse:
    return paginate(drafts_newest_first(store, user_id), page, per_page)


def dashboard_stats(store: EntityStore, user_id: str, now: datetime) -> DashboardStats:
    drafts = store.list_drafts(user_id)
    feedback = store.list_feedback(user_id)
    sources = store.list_sources(user_id)

    week_ago = now - STATS_WINDOW
    drafts_this_week = sum(1 for d in drafts if d.created_at > week_ago)

    positive = sum(1 for f in feedback if f.feedback_type == "positive")
    negative = sum(1 for f in feedback if f.feedback_type == "negative")
    feedback_rate = (positive + negative) / len(drafts) if drafts else 0.0

    return DashboardStats(
        total_drafts=len(drafts),
        drafts_this_week=drafts_this_week,
        positive_feedback=positive,
        negative_feedback=negative,
        feedback_rate=round(feedback_rate, 2),
        active_sources=sum(1 for s in sources if s.active),
    )


def processing_status(store: EntityStore, user_id: str) -> ProcessingStatus:
    return ProcessingStatus(
        drafts_pending=sum(1 for d in store.list_drafts(user_id) if d.status == "pending"),
        style_training_active=any(not p.processed for p in store.list_style_posts(user_id)),
        sources_with_errors=sum(1 for s in store.list_sources(user_id) if s.error_count > 0),
    )
