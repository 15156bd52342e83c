from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import os
import re
from pathlib import Path

from pydantic import ValidationError

from cycle_nlu.exceptions import CorruptContextRecordError
from cycle_nlu.models import CONTEXT_SCHEMA_VERSION, UserContext

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")
# Readable part of a file name; the rest is replaced by a digest
_MAX_NAME_CHARS = 64


class JsonContextStorage:
    """One JSON file per user, fully rewritten on every save."""

    def __init__(self, data_dir: str):
        self._dir = Path(data_dir)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.error("Failed to create context data directory %s", self._dir, exc_info=True)

    def path_for(self, user_id: str) -> Path:
        safe = _UNSAFE_CHARS.sub("_", user_id)
        if safe != user_id or safe.strip(".") == "" or len(safe) > _MAX_NAME_CHARS:
            # Sanitising and truncation can collide ("a/b" vs "a_b"); disambiguate with a hash
            digest = hashlib.sha256(user_id.encode("utf-8")).hexdigest()[:12]
            safe = f"{safe[:_MAX_NAME_CHARS]}-{digest}"
        return self._dir / f"{safe}.json"

    def _read(self, path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _write(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, path)

    async def load(self, user_id: str) -> UserContext | None:
        """Return the stored context, or None when the user has no record.

        Raises CorruptContextRecordError when a record exists but is unreadable.
        """
        path = self.path_for(user_id)
        try:
            raw = await asyncio.to_thread(self._read, path)
        except OSError as e:
            raise CorruptContextRecordError(user_id, f"read failed: {e}") from e
        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptContextRecordError(user_id, f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise CorruptContextRecordError(user_id, "record is not a JSON object")

        version = data.get("schema_version", CONTEXT_SCHEMA_VERSION)
        if version != CONTEXT_SCHEMA_VERSION:
            raise CorruptContextRecordError(user_id, f"unsupported schema_version {version!r}")

        try:
            return UserContext.model_validate(data)
        except ValidationError as e:
            raise CorruptContextRecordError(user_id, f"schema mismatch: {e.error_count()} errors") from e

    async def save(self, context: UserContext) -> None:
        path = self.path_for(context.user_id)
        content = context.model_dump_json(indent=2)
        await asyncio.to_thread(self._write, path, content)
