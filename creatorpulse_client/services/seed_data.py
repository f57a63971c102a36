"""Demo data for the simulated backend.

Gives the dashboard something to show before the first remote call:
- a demo account with sources, trained style samples and a few drafts
- a second, deactivated account for login error paths

Timestamps are relative to the store clock so "this week" stats stay
meaningful whenever the seed is loaded.
"""

from datetime import datetime, time, timedelta

from creatorpulse_client.schemas import (
    Draft,
    Feedback,
    Source,
    SourceContent,
    StylePost,
    User,
)

from .entity_store import DEFAULT_PASSWORD, EntityStore

DEMO_USER_ID = "user-demo-0001"
DEMO_EMAIL = "demo@creatorpulse.com"
INACTIVE_USER_ID = "user-inactive-0002"
INACTIVE_EMAIL = "inactive@creatorpulse.com"

_STYLE_TOPICS = [
    "shipping small increments instead of big-bang releases",
    "writing documentation before writing the code",
    "why our team stopped estimating in story points",
    "what a failed product launch taught me about listening",
    "hiring for curiosity over credentials",
    "the meeting I cancelled that saved a week",
    "how we cut our cloud bill without losing speed",
    "mentoring juniors made me a better engineer",
    "saying no to a customer and keeping them",
    "remote onboarding that actually works",
    "the one metric our growth team watches daily",
    "lessons from a year of building in public",
]


def _style_post(index: int, topic: str, created_at: datetime) -> StylePost:
    content = (
        f"Last quarter I learned a lot about {topic}. "
        "Here is what changed for our team and what I would do differently next time."
    )
    return StylePost(
        id=f"style-demo-{index:04d}",
        user_id=DEMO_USER_ID,
        content=content,
        processed=True,
        word_count=len(content.split()),
        created_at=created_at,
        processed_at=created_at + timedelta(minutes=5),
    )


def seed_demo_data(store: EntityStore, now: datetime) -> None:
    """Load the demo dataset into an empty store."""
    store.add_user(
        User(
            id=DEMO_USER_ID,
            email=DEMO_EMAIL,
            timezone="America/New_York",
            delivery_time=time(8, 0),
            active=True,
            email_verified=True,
            created_at=now - timedelta(days=30),
        ),
        DEFAULT_PASSWORD,
    )
    store.add_user(
        User(
            id=INACTIVE_USER_ID,
            email=INACTIVE_EMAIL,
            active=False,
            created_at=now - timedelta(days=90),
        ),
        DEFAULT_PASSWORD,
    )

    store.add_source(Source(
        id="source-demo-rss",
        user_id=DEMO_USER_ID,
        type="rss",
        url="https://techcrunch.com/feed/",
        name="TechCrunch",
        active=True,
        last_checked=now - timedelta(hours=1),
        error_count=0,
        created_at=now - timedelta(days=29),
    ))
    store.add_source(Source(
        id="source-demo-twitter",
        user_id=DEMO_USER_ID,
        type="twitter",
        url="@paulg",
        name="Paul Graham",
        active=True,
        last_checked=now - timedelta(hours=2),
        error_count=5,
        created_at=now - timedelta(days=20),
    ))

    store.add_style_posts(
        _style_post(i, topic, now - timedelta(days=28, minutes=i))
        for i, topic in enumerate(_STYLE_TOPICS)
    )

    store.add_source_content([
        SourceContent(
            id="content-demo-0001",
            source_id="source-demo-rss",
            title="AI startups raise record funding in Q3",
            content="Venture funding for AI infrastructure companies hit a new high this quarter.",
            url="https://techcrunch.com/2025/01/14/ai-funding/",
            published_at=now - timedelta(hours=20),
            processed=False,
            created_at=now - timedelta(hours=19),
        ),
        SourceContent(
            id="content-demo-0002",
            source_id="source-demo-rss",
            title="The return of the small team",
            content="More founders are choosing to stay small and profitable instead of raising.",
            url="https://techcrunch.com/2025/01/13/small-teams/",
            published_at=now - timedelta(days=2),
            processed=True,
            created_at=now - timedelta(days=2),
        ),
    ])

    drafts = [
        ("draft-demo-0001", "approved", 2, 8.4),
        ("draft-demo-0002", "rejected", 3, 7.2),
        ("draft-demo-0003", "pending", 10, 9.1),
    ]
    for draft_id, status, age_days, score in drafts:
        content = (
            "Small teams are quietly outperforming. Fewer handoffs, faster decisions, "
            "and everyone owns the outcome.\n\nWhat is the smallest team you have shipped with?"
        )
        store.add_drafts([Draft(
            id=draft_id,
            user_id=DEMO_USER_ID,
            content=content,
            status=status,
            source_content_id="content-demo-0002",
            source_name="TechCrunch",
            feedback_token=f"feedback-{draft_id}",
            email_sent_at=now - timedelta(days=age_days, hours=-1),
            character_count=len(content),
            engagement_score=score,
            created_at=now - timedelta(days=age_days),
            updated_at=now - timedelta(days=age_days),
        )])

    store.add_feedback(Feedback(
        id="feedback-demo-0001",
        draft_id="draft-demo-0001",
        feedback_type="positive",
        feedback_source="email",
        created_at=now - timedelta(days=2) + timedelta(hours=3),
    ))
    store.add_feedback(Feedback(
        id="feedback-demo-0002",
        draft_id="draft-demo-0002",
        feedback_type="negative",
        feedback_source="dashboard",
        created_at=now - timedelta(days=3) + timedelta(hours=5),
    ))
