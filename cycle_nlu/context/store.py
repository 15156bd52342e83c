from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from datetime import UTC, datetime

from pydantic_core import to_jsonable_python

from cycle_nlu.context.storage import JsonContextStorage
from cycle_nlu.exceptions import CorruptContextRecordError
from cycle_nlu.models import ContextDelta, Turn, UserContext

logger = logging.getLogger(__name__)


class ContextStore:
    """Owns every UserContext: in-memory cache backed by durable storage.

    Updates for the same user are serialised with a per-user asyncio.Lock.
    Storage errors never reach the caller: a bad record is replaced by a fresh
    context and a failed write leaves the cached copy authoritative.
    """

    def __init__(
        self,
        storage: JsonContextStorage,
        max_history: int = 5,
        max_symptoms: int = 10,
    ):
        self._storage = storage
        self._max_history = max_history
        self._max_symptoms = max_symptoms
        self._cache: dict[str, UserContext] = {}
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self.corrupt_recoveries = 0
        self.persist_failures = 0

    async def _load_or_create(self, user_id: str) -> UserContext:
        """Return the cached context, loading or creating it. Caller holds the lock."""
        cached = self._cache.get(user_id)
        if cached is not None:
            return cached

        try:
            context = await self._storage.load(user_id)
        except CorruptContextRecordError:
            self.corrupt_recoveries += 1
            logger.warning(
                "Recovered from corrupt context record for user %s, starting fresh",
                user_id,
                exc_info=True,
            )
            context = None

        if context is None:
            logger.debug("No stored context for user %s, creating new one", user_id)
            context = UserContext(user_id=user_id)

        self._cache[user_id] = context
        return context

    async def get_context(self, user_id: str) -> UserContext:
        cached = self._cache.get(user_id)
        if cached is not None:
            return cached
        async with self._locks[user_id]:
            return await self._load_or_create(user_id)

    async def update_context(self, user_id: str, delta: ContextDelta) -> UserContext:
        async with self._locks[user_id]:
            context = await self._load_or_create(user_id)

            if delta.message:
                context.conversation_history.append(
                    Turn(
                        timestamp=datetime.now(UTC),
                        message=delta.message,
                        intent=delta.intent,
                        entities=to_jsonable_python(delta.entities),
                    )
                )
                overflow = len(context.conversation_history) - self._max_history
                if overflow > 0:
                    del context.conversation_history[:overflow]

            if delta.cycle_data is not None:
                if delta.cycle_data.period_start is not None:
                    context.last_period_start = delta.cycle_data.period_start
                if delta.cycle_data.cycle_phase is not None:
                    context.current_cycle_phase = delta.cycle_data.cycle_phase

            if delta.symptoms:
                context.recent_symptoms = (delta.symptoms + context.recent_symptoms)[
                    : self._max_symptoms
                ]

            self._cache[user_id] = context
            await self._persist(context)
            return context

    async def _persist(self, context: UserContext) -> None:
        try:
            await self._storage.save(context)
        except (OSError, ValueError):
            self.persist_failures += 1
            logger.error("Failed to persist context for user %s", context.user_id, exc_info=True)

    def evict(self, user_id: str) -> None:
        """Drop the cached context; the next access reloads it from storage."""
        self._cache.pop(user_id, None)
