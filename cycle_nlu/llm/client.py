from __future__ import annotations

import logging
import re

import httpx

from cycle_nlu.models import ChatMessage

logger = logging.getLogger(__name__)


class OllamaClient:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        model: str,
    ):
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._model = model

    async def chat(
        self,
        messages: list[ChatMessage],
        json_mode: bool = False,
        temperature: float | None = None,
        model: str | None = None,
    ) -> str:
        url = f"{self._base_url}/api/chat"
        use_model = model or self._model

        payload: dict = {
            "model": use_model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "stream": False,
            # Classification calls never need the reasoning trace
            "think": False,
        }
        if json_mode:
            payload["format"] = "json"
        if temperature is not None:
            payload["options"] = {"temperature": temperature}

        resp = await self._http.post(url, json=payload)
        if resp.status_code == 404:
            logger.error(
                "Ollama model '%s' not found, download it with: ollama pull %s",
                use_model,
                use_model,
            )
        resp.raise_for_status()
        data = resp.json()
        content = data["message"].get("content", "")

        if content:
            logger.debug("LLM raw response: %s", content[:500])
            # Strip deepseek/qwen reasoning blocks: <think>...</think>
            content = re.sub(r"<think>.*?</think>\n*", "", content, flags=re.DOTALL)
            content = content.split("</think>")[-1]
            content = content.split("<think>")[0].strip()

        return content

    async def is_available(self) -> bool:
        try:
            resp = await self._http.get(
                f"{self._base_url}/api/tags",
                timeout=5.0,
            )
            return resp.status_code == 200
        except httpx.HTTPError:
            return False
