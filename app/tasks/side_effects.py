import asyncio
import logging
from typing import Any, Awaitable, Set

from app.core.metrics import SIDE_EFFECT_OUTCOMES

logger = logging.getLogger(__name__)


class SideEffectRunner:
    """
    Runs webhook side effects as independent fire-and-forget asyncio tasks.

    Every task reports its own outcome to the log and to the
    ``webhook_side_effects_total`` counter. Failures are never re-raised, so
    one side effect cannot affect another or the webhook acknowledgment.
    """

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, effect: str, coro: Awaitable[Any]) -> asyncio.Task:
        task = asyncio.create_task(self._run(effect, coro), name=f"side-effect:{effect}")
        # The loop only keeps weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, effect: str, coro: Awaitable[Any]) -> bool:
        try:
            result = await coro
        except Exception as e:
            SIDE_EFFECT_OUTCOMES.labels(effect=effect, outcome="error").inc()
            logger.error("Side effect %s failed: %s", effect, e, exc_info=True)
            return False

        if result is False:
            SIDE_EFFECT_OUTCOMES.labels(effect=effect, outcome="skipped").inc()
            logger.warning("Side effect %s completed without effect", effect)
            return False

        SIDE_EFFECT_OUTCOMES.labels(effect=effect, outcome="success").inc()
        logger.info("Side effect %s succeeded", effect)
        return True

    async def drain(self) -> None:
        """Wait for in-flight side effects, e.g. on shutdown."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
