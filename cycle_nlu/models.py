from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

CONTEXT_SCHEMA_VERSION = 1


class CyclePhase(StrEnum):
    MENSTRUAL = "menstrual"
    FOLLICULAR = "follicular"
    OVULATORY = "ovulatory"
    LUTEAL = "luteal"
    UNKNOWN = "unknown"


class SymptomCategory(StrEnum):
    PHYSICAL = "physical"
    EMOTIONAL = "emotional"
    OTHER = "other"


class ChatMessage(BaseModel):
    role: str  # "system", "user" or "assistant"
    content: str


class Intent(BaseModel):
    """Classification produced by the LLM. Extra keys are kept as-is."""

    model_config = ConfigDict(extra="allow")

    primary: str = ""  # cycle_tracking, symptom_logging, health_query, pattern_analysis, system_command
    subtype: str = ""
    confidence: float = 0.0


class Symptom(BaseModel):
    name: str
    category: SymptomCategory = SymptomCategory.OTHER
    intensity: str | None = None


class Turn(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    message: str
    intent: Intent | None = None
    entities: dict[str, Any] | None = None


class UserContext(BaseModel):
    schema_version: int = CONTEXT_SCHEMA_VERSION
    user_id: str
    conversation_history: list[Turn] = Field(default_factory=list)
    current_cycle_phase: CyclePhase | None = None
    last_period_start: datetime | None = None
    recent_symptoms: list[Symptom] = Field(default_factory=list)


class CycleData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    period_start: datetime | None = Field(default=None, alias="periodStart")
    cycle_phase: CyclePhase | None = Field(default=None, alias="cyclePhase")


class ContextDelta(BaseModel):
    """Everything a single turn may fold into a UserContext."""

    message: str | None = None
    intent: Intent | None = None
    entities: dict[str, Any] | None = None
    cycle_data: CycleData | None = None
    symptoms: list[Symptom] = Field(default_factory=list)


class ContextAwareness(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_cycle_phase: CyclePhase | None = Field(default=None, alias="currentCyclePhase")
    last_period_start: datetime | None = Field(default=None, alias="lastPeriodStart")


class NLUResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    intent: Intent
    entities: dict[str, Any]
    cycle_data: CycleData | None = Field(default=None, alias="cycleData")
    context_awareness: ContextAwareness = Field(alias="contextAwareness")


class ServiceChecks(BaseModel):
    available: bool
    corrupt_recoveries: int = 0
    persist_failures: int = 0


class HealthResponse(BaseModel):
    status: str
    service: str = "nlu"
    checks: ServiceChecks
