import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cycle_nlu.api.router import router as nlu_router
from cycle_nlu.config import Settings
from cycle_nlu.context.storage import JsonContextStorage
from cycle_nlu.context.store import ContextStore
from cycle_nlu.health.router import router as health_router
from cycle_nlu.llm.cache import ResponseCache
from cycle_nlu.llm.classifier import IntentClassifier
from cycle_nlu.llm.client import OllamaClient
from cycle_nlu.logging_config import configure_logging
from cycle_nlu.pipeline import NLUPipeline

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    configure_logging(
        level=settings.log_level, json_format=settings.log_json, log_file=settings.log_file
    )

    http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.llm_timeout_seconds, connect=10.0))

    ollama_client = OllamaClient(
        http_client=http_client,
        base_url=settings.ollama_base_url,
        model=settings.ollama_model,
    )
    cache = None
    if settings.llm_cache_enabled:
        cache = ResponseCache(
            max_entries=settings.llm_cache_max_entries,
            ttl_seconds=settings.llm_cache_ttl_seconds,
        )
    classifier = IntentClassifier(
        ollama_client,
        timeout_seconds=settings.llm_timeout_seconds,
        history_turns=settings.classifier_history_turns,
        temperature=settings.llm_temperature,
        cache=cache,
    )
    context_store = ContextStore(
        JsonContextStorage(settings.context_data_dir),
        max_history=settings.context_max_history,
        max_symptoms=settings.context_max_symptoms,
    )

    app.state.settings = settings
    app.state.http_client = http_client
    app.state.ollama_client = ollama_client
    app.state.context_store = context_store
    app.state.pipeline = NLUPipeline(context_store, classifier)

    logger.info("NLU service ready (model=%s)", settings.ollama_model)

    yield

    await http_client.aclose()


app = FastAPI(title="Cycle NLU", lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.include_router(health_router)
app.include_router(nlu_router)
