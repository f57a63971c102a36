"""
Template-based draft generation for the simulated backend.

The real service retrieves style-matched content and calls an LLM; offline
we fill post templates with details of the user's fresh source content and
score them randomly.
"""

import random
import re
import secrets
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from creatorpulse_client.core.logging import get_logger
from creatorpulse_client.schemas import Draft, Source, SourceContent

logger = get_logger(__name__)

MIN_DRAFTS = 3
MAX_DRAFTS = 5
MIN_ENGAGEMENT = 7.0
MAX_ENGAGEMENT = 10.0

DRAFT_TEMPLATES = [
    "🚀 Just came across an interesting development in {topic}. {insight}\n\n"
    "This reminds me of how often the simple ideas win.\n\nWhat's your take on {topic}?",
    "💡 Hot take: {insight}\n\nHere's why I think this matters:\n"
    "→ It changes how we think about {topic}\n→ Teams that adapt early will move faster\n"
    "→ Most people are still ignoring it\n\nAm I missing something here?",
    "📈 Reading about {topic} from {source_name} today.\n\nKey lessons learned:\n"
    "• {insight}\n• Focus beats breadth\n• Consistency compounds\n\n"
    "What's been your biggest challenge with {topic}?",
    "🔥 Unpopular opinion: {topic} is overhyped and underused at the same time.\n\n"
    "{insight}\n\nChange my mind - what am I getting wrong?",
    "⚡ Quick tip inspired by {source_name}:\n\n{insight}\n\n"
    "Sometimes the simplest solutions are the most effective.\n\nWhat's your favorite {topic} hack?",
]

_DEFAULT_TOPIC = "building products people love"
_DEFAULT_INSIGHT = "The best teams ship small, learn fast and write down what they learn."


def generate_feedback_token(existing: Optional[set] = None) -> str:
    """Unique opaque token for email-link feedback."""
    existing = existing or set()
    while True:
        token = f"feedback-{secrets.token_urlsafe(16)}"
        if token not in existing:
            return token


def _topic_from(content_item: Optional[SourceContent]) -> str:
    if content_item is None or not content_item.title:
        return _DEFAULT_TOPIC
    return re.sub(r"[.!?]+$", "", content_item.title.strip()).lower()


def _insight_from(content_item: Optional[SourceContent]) -> str:
    if content_item is None or not content_item.content.strip():
        return _DEFAULT_INSIGHT
    text = content_item.content.strip()
    return text[:200] + ("..." if len(text) > 200 else "")


class DraftGenerator:
    """Builds pending drafts from templates."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def draft_count(self) -> int:
        return self.rng.randint(MIN_DRAFTS, MAX_DRAFTS)

    def engagement_score(self) -> float:
        return round(self.rng.uniform(MIN_ENGAGEMENT, MAX_ENGAGEMENT), 1)

    def generate(
        self,
        user_id: str,
        count: int,
        content_items: Sequence[SourceContent],
        sources: Sequence[Source],
        now: datetime,
        existing_tokens: Optional[set] = None,
    ) -> List[Draft]:
        """
        Generate `count` drafts for a user.

        Args:
            user_id: Owner of the drafts
            count: Number of drafts to build
            content_items: Fresh source content to draw topics from; may be empty
            sources: The user's sources, for display names
            now: Creation timestamp
            existing_tokens: Feedback tokens already in use

        Returns:
            List of new pending drafts
        """
        source_names: Dict[str, Optional[str]] = {s.id: s.name or s.url for s in sources}
        tokens = set(existing_tokens or ())
        drafts = []

        for _ in range(count):
            template = self.rng.choice(DRAFT_TEMPLATES)
            content_item = self.rng.choice(content_items) if content_items else None
            source_name = source_names.get(content_item.source_id) if content_item else None

            content = template.format(
                topic=_topic_from(content_item),
                insight=_insight_from(content_item),
                source_name=source_name or "my feed",
            )
            token = generate_feedback_token(tokens)
            tokens.add(token)

            drafts.append(Draft(
                id=str(uuid.uuid4()),
                user_id=user_id,
                content=content,
                status="pending",
                source_content_id=content_item.id if content_item else None,
                source_name=source_name,
                feedback_token=token,
                email_sent_at=None,
                character_count=len(content),
                engagement_score=self.engagement_score(),
                created_at=now,
                updated_at=now,
            ))

        logger.info("Generated template drafts", user_id=user_id, count=len(drafts))
        return drafts
