from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Ollama
    ollama_base_url: str = "http://ollama:11434"
    ollama_model: str = "qwen3:8b"
    llm_temperature: float = 0.3
    llm_timeout_seconds: float = 30.0

    # Classifier response cache
    llm_cache_enabled: bool = True
    llm_cache_max_entries: int = 256
    llm_cache_ttl_seconds: int = 600

    # User context
    context_data_dir: str = "data/contexts"
    context_max_history: int = 5
    context_max_symptoms: int = 10
    classifier_history_turns: int = 3

    # Logging
    log_level: str = "INFO"
    log_json: bool = True
    log_file: str = "data/cycle_nlu.log"

    # Server
    port: int = 3000

    @field_validator("context_max_history", "context_max_symptoms")
    @classmethod
    def check_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("context bounds must be at least 1")
        return v

    model_config = {"env_file": ".env"}
