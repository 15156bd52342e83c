from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cycle_nlu.domain.entities import process_entities
from cycle_nlu.domain.phase import days_since, determine_cycle_phase
from cycle_nlu.models import ContextAwareness, ContextDelta, CycleData, NLUResponse, Symptom

if TYPE_CHECKING:
    from cycle_nlu.context.store import ContextStore
    from cycle_nlu.llm.classifier import IntentClassifier

logger = logging.getLogger(__name__)

PERIOD_START_SUBTYPES = frozenset({"period_start_logging", "period_tracking"})


class NLUPipeline:
    """Runs one user message through classification, cleaning and context update."""

    def __init__(self, context_store: ContextStore, classifier: IntentClassifier):
        self._store = context_store
        self._classifier = classifier

    async def process_input(self, user_id: str, message: str) -> NLUResponse:
        context = await self._store.get_context(user_id)
        # The response reports what was known before this turn
        awareness = ContextAwareness(
            current_cycle_phase=context.current_cycle_phase,
            last_period_start=context.last_period_start,
        )

        # Classification errors propagate; nothing has been written yet
        classification = await self._classifier.classify(message, context)
        intent = classification.intent
        entities = process_entities(classification.entities)

        cycle_data: CycleData | None = None
        temporal = entities.get("temporal")
        dates = temporal.get("dates") if isinstance(temporal, dict) else None
        if (
            intent.primary == "cycle_tracking"
            and intent.subtype in PERIOD_START_SUBTYPES
            and dates
        ):
            cycle_data = CycleData(period_start=dates[0])

        if context.last_period_start is not None:
            phase = determine_cycle_phase(days_since(context.last_period_start))
            if cycle_data is None:
                cycle_data = CycleData()
            cycle_data.cycle_phase = phase

            if temporal is None:
                temporal = entities["temporal"] = {}
            if isinstance(temporal, dict) and not temporal.get("cycle_phase"):
                temporal["cycle_phase"] = phase

        symptoms = [s for s in entities.get("symptoms") or [] if isinstance(s, Symptom)]

        await self._store.update_context(
            user_id,
            ContextDelta(
                message=message,
                intent=intent,
                entities=entities,
                cycle_data=cycle_data,
                symptoms=symptoms,
            ),
        )

        logger.info(
            "Processed message for user %s: intent=%s/%s symptoms=%d",
            user_id,
            intent.primary,
            intent.subtype,
            len(symptoms),
        )
        return NLUResponse(
            intent=intent,
            entities=entities,
            cycle_data=cycle_data,
            context_awareness=awareness,
        )
