from fastapi import Request

from cycle_nlu.context.store import ContextStore
from cycle_nlu.llm.client import OllamaClient
from cycle_nlu.pipeline import NLUPipeline


def get_ollama_client(request: Request) -> OllamaClient:
    return request.app.state.ollama_client


def get_context_store(request: Request) -> ContextStore:
    return request.app.state.context_store


def get_pipeline(request: Request) -> NLUPipeline:
    return request.app.state.pipeline
