"""
Style training simulator.

Uploaded style posts are processed in the background: after a short start
delay a ticking task marks a random batch of 2-3 unprocessed posts per user
as processed, and stops once nothing is left. Status is only ever read on
demand.
"""
import asyncio
import random
import uuid
from typing import Optional

from creatorpulse_client.core.clock import Clock
from creatorpulse_client.core.logging import get_logger
from creatorpulse_client.schemas import StyleTrainingStatus

from .entity_store import EntityStore

logger = get_logger(__name__)

MIN_BATCH_SIZE = 2
MAX_BATCH_SIZE = 3


def new_job_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4()}"


class StyleTrainingSimulator:
    """Ticking state machine that advances style posts to processed."""

    def __init__(
        self,
        store: EntityStore,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        start_delay: float = 1.0,
        tick_interval: float = 2.0,
    ):
        self.store = store
        self.clock = clock or Clock()
        self.rng = rng or random.Random()
        self.start_delay = start_delay
        self.tick_interval = tick_interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> int:
        """
        Process one batch per user.

        Returns:
            Number of posts marked processed
        """
        processed_at = self.clock.now()
        processed = 0
        for user_id, posts in self.store.unprocessed_style_posts().items():
            batch_size = self.rng.randint(MIN_BATCH_SIZE, MAX_BATCH_SIZE)
            batch = [post.id for post in posts[:batch_size]]
            count = self.store.mark_style_posts_processed(batch, processed_at)
            processed += count
            logger.debug("Processed style posts", user_id=user_id, count=count)
        return processed

    async def _run(self) -> None:
        await self.clock.sleep(self.start_delay)
        while True:
            if self.tick() == 0:
                logger.info("Style training queue drained")
                return
            await self.clock.sleep(self.tick_interval)

    def ensure_running(self) -> None:
        """Start the ticking task unless it is already running."""
        if self.running:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, style training not scheduled")
            return
        self._task = loop.create_task(self._run())
        logger.info("Style training started")

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        if not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    def retrain(self, user_id: str) -> str:
        """Reset every post of the user to unprocessed and restart training."""
        reset = self.store.reset_style_posts(user_id)
        logger.info("Style retraining requested", user_id=user_id, posts=reset)
        self.ensure_running()
        return new_job_id("retrain-job")

    def status(self, user_id: str) -> StyleTrainingStatus:
        posts = self.store.list_style_posts(user_id)
        total_posts = len(posts)
        processed_posts = sum(1 for post in posts if post.processed)

        progress = round(processed_posts / total_posts * 100) if total_posts > 0 else 0
        if processed_posts < total_posts:
            # 100 means done
            progress = min(progress, 99)

        if total_posts == 0:
            status = "pending"
            message = "No style posts added yet"
        elif processed_posts == 0:
            status = "pending"
            message = "Style posts added, processing not started"
        elif processed_posts < total_posts:
            status = "processing"
            message = "Processing your writing style..."
        else:
            status = "completed"
            message = "Style training completed successfully"

        return StyleTrainingStatus(
            status=status,
            progress=progress,
            total_posts=total_posts,
            processed_posts=processed_posts,
            message=message,
        )
