from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from cycle_nlu.dependencies import get_pipeline
from cycle_nlu.exceptions import NLUError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/nlu")


@router.post("/process")
async def process_message(request: Request) -> Response:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    user_id = body.get("userId") if isinstance(body, dict) else None
    message = body.get("message") if isinstance(body, dict) else None
    if not isinstance(user_id, str) or not user_id or not isinstance(message, str) or not message:
        return JSONResponse(status_code=400, content={"error": "Missing required fields"})

    pipeline = get_pipeline(request)
    try:
        result = await pipeline.process_input(user_id, message)
    except NLUError as e:
        logger.error("Error processing request for user %s: %s", user_id, e)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process input", "message": str(e)},
        )
    except Exception as e:
        logger.exception("Unhandled error processing request for user %s", user_id)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process input", "message": str(e)},
        )

    return JSONResponse(content=result.model_dump(mode="json", by_alias=True))
