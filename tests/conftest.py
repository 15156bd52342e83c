import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from cycle_nlu.config import Settings
from cycle_nlu.context.storage import JsonContextStorage
from cycle_nlu.context.store import ContextStore
from cycle_nlu.llm.classifier import ClassificationResult
from cycle_nlu.llm.client import OllamaClient
from cycle_nlu.main import app
from cycle_nlu.models import Intent
from cycle_nlu.pipeline import NLUPipeline

TEST_SETTINGS = Settings(
    ollama_base_url="http://localhost:11434",
    ollama_model="test-model",
    llm_cache_enabled=False,
    log_json=False,
)


@pytest.fixture
def settings() -> Settings:
    return TEST_SETTINGS


@pytest.fixture
def storage(tmp_path) -> JsonContextStorage:
    return JsonContextStorage(str(tmp_path / "contexts"))


@pytest.fixture
def context_store(storage) -> ContextStore:
    return ContextStore(storage, max_history=5, max_symptoms=10)


@pytest.fixture
def fake_classifier() -> MagicMock:
    classifier = MagicMock()
    classifier.classify = AsyncMock(return_value=make_classification())
    return classifier


@pytest.fixture
def pipeline(context_store, fake_classifier) -> NLUPipeline:
    return NLUPipeline(context_store, fake_classifier)


# --- Sync fixture for TestClient-based integration tests ---


@pytest.fixture
def client(settings: Settings, storage, fake_classifier) -> TestClient:
    mock_http = AsyncMock()
    mock_http.post = AsyncMock()
    mock_http.get = AsyncMock()

    context_store = ContextStore(storage)

    app.state.settings = settings
    app.state.http_client = mock_http
    app.state.ollama_client = OllamaClient(
        http_client=mock_http,
        base_url=settings.ollama_base_url,
        model=settings.ollama_model,
    )
    app.state.context_store = context_store
    app.state.pipeline = NLUPipeline(context_store, fake_classifier)

    return TestClient(app, raise_server_exceptions=False)


def days_ago_iso(days: int) -> str:
    return (datetime.now(UTC) - timedelta(days=days)).date().isoformat()


def make_entities(
    dates: list | None = None,
    symptoms: list | None = None,
    cycle_phase: str | None = None,
) -> dict:
    return {
        "temporal": {
            "dates": list(dates or []),
            "cycle_day": None,
            "cycle_phase": cycle_phase,
            "duration": None,
        },
        "symptoms": list(symptoms or []),
        "intensity": None,
        "mood": None,
        "body_area": None,
        "context_factors": [],
    }


def make_classification(
    primary: str = "cycle_tracking",
    subtype: str = "period_start_logging",
    confidence: float = 0.9,
    entities: dict | None = None,
) -> ClassificationResult:
    return ClassificationResult(
        intent=Intent(primary=primary, subtype=subtype, confidence=confidence),
        entities=entities if entities is not None else make_entities(),
    )


def make_llm_content(
    primary: str = "symptom_logging",
    subtype: str = "symptom_report",
    confidence: float = 0.8,
    entities: dict | None = None,
) -> str:
    return json.dumps(
        {
            "intent": {"primary": primary, "subtype": subtype, "confidence": confidence},
            "entities": entities if entities is not None else make_entities(),
        }
    )
