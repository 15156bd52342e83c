from __future__ import annotations

import asyncio
import copy
import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from cycle_nlu.exceptions import ClassificationError, MalformedLLMResponseError
from cycle_nlu.models import ChatMessage, Intent, UserContext

if TYPE_CHECKING:
    from cycle_nlu.llm.cache import ResponseCache
    from cycle_nlu.llm.client import OllamaClient

logger = logging.getLogger(__name__)

INTENT_SYSTEM_PROMPT = """You are an AI assistant specializing in women's health and menstrual cycle tracking.

Your task is to identify the user's intent and extract relevant entities from their message.

IMPORTANT: Respond ONLY with a JSON object following this exact format:
{
  "intent": {
    "primary": "one of [cycle_tracking, symptom_logging, health_query, pattern_analysis, system_command]",
    "subtype": "specific intent within the primary category",
    "confidence": 0.0-1.0
  },
  "entities": {
    "temporal": {
      "dates": [],
      "cycle_day": null,
      "cycle_phase": null,
      "duration": null
    },
    "symptoms": [],
    "intensity": null,
    "mood": null,
    "body_area": null,
    "context_factors": []
  }
}

Write dates as ISO 8601 (YYYY-MM-DD). Today is {today}.
If an entity is not present, include it with null or empty array.
Do not include any explanatory text outside of the JSON structure."""


@dataclass
class ClassificationResult:
    intent: Intent
    entities: dict[str, Any]


class IntentClassifier:
    def __init__(
        self,
        client: OllamaClient,
        timeout_seconds: float = 30.0,
        history_turns: int = 3,
        temperature: float = 0.3,
        cache: ResponseCache | None = None,
    ):
        self._client = client
        self._timeout = timeout_seconds
        self._history_turns = history_turns
        self._temperature = temperature
        self._cache = cache

    def condensed_history(self, context: UserContext | None) -> str:
        if context is None or not context.conversation_history:
            return ""
        recent = context.conversation_history[-self._history_turns :]
        return "\n".join(f"User: {turn.message}" for turn in recent)

    def build_messages(self, message: str, history: str, today: str) -> list[ChatMessage]:
        messages = [
            ChatMessage(role="system", content=INTENT_SYSTEM_PROMPT.replace("{today}", today)),
            ChatMessage(role="user", content=message),
        ]
        if history:
            messages.append(
                ChatMessage(role="system", content=f"Previous conversation context:\n{history}")
            )
        return messages

    async def classify(
        self, message: str, context: UserContext | None = None
    ) -> ClassificationResult:
        """Ask the LLM for the intent and raw entities of ``message``.

        Raises ClassificationError on transport failures or timeout and
        MalformedLLMResponseError when the answer is not the expected JSON.
        """
        history = self.condensed_history(context)
        cache_key = f"{message}\x00{history}"
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug("Classifier cache hit")
                return copy.deepcopy(cached)

        messages = self.build_messages(message, history, datetime.now(UTC).date().isoformat())
        try:
            content = await asyncio.wait_for(
                self._client.chat(messages, json_mode=True, temperature=self._temperature),
                timeout=self._timeout,
            )
        except TimeoutError as e:
            logger.error("LLM classification timed out after %.1fs", self._timeout)
            raise ClassificationError(f"timed out after {self._timeout:.1f}s") from e
        except httpx.HTTPError as e:
            logger.error("Error calling Ollama: %s", e)
            raise ClassificationError(str(e) or type(e).__name__) from e
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Unexpected Ollama response shape: %s", e)
            raise ClassificationError(f"unexpected response shape: {e}") from e

        result = self._parse(content)
        if self._cache is not None:
            self._cache.set(cache_key, copy.deepcopy(result))
        return result

    def _parse(self, content: str) -> ClassificationResult:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise MalformedLLMResponseError(content) from e
        if not isinstance(data, dict) or not isinstance(data.get("intent"), dict):
            raise MalformedLLMResponseError(content)

        try:
            intent = Intent.model_validate(data["intent"])
        except ValidationError as e:
            raise MalformedLLMResponseError(content) from e

        entities = data.get("entities")
        if not isinstance(entities, dict):
            entities = {}
        return ClassificationResult(intent=intent, entities=entities)
