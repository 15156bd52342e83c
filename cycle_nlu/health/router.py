from fastapi import APIRouter, Request

from cycle_nlu.dependencies import get_context_store, get_ollama_client
from cycle_nlu.models import HealthResponse, ServiceChecks

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    ollama_ok = await get_ollama_client(request).is_available()
    store = get_context_store(request)
    return HealthResponse(
        status="ok" if ollama_ok else "degraded",
        checks=ServiceChecks(
            available=ollama_ok,
            corrupt_recoveries=store.corrupt_recoveries,
            persist_failures=store.persist_failures,
        ),
    )
